"""User notice and logging package."""

from financas.notices.logger import NoticeLogger, NoticeSink, configure_logging

__all__ = ["NoticeLogger", "NoticeSink", "configure_logging"]
