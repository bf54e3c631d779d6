"""
Notice Logger

Every significant action produces a structured log line and, when the
user should hear about it, a Notice for the UI.

The notice logger:
- Always logs locally through structlog
- Hands notices to an optional sink (the UI's toast queue)
- Logs and drops sink failures
"""

import logging
from collections import deque
from typing import Callable, Optional

import structlog

from financas.models.notice import Notice, NoticeBuilder, NoticeSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(debug: bool = False) -> None:
    """Route structlog output through stdlib logging at the wanted level."""
    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )


MAX_PENDING = 200

NoticeSink = Callable[[Notice], None]


class NoticeLogger:
    """
    Central notice service.

    Publishes notices both to:
    1. Structured local log (for debugging)
    2. The UI sink, if one is attached (toast-style feedback)

    Without a sink, notices are queued until `drain()` is called so a UI
    without a push channel can poll them. With a sink, only notices the
    sink failed to take are queued. The queue keeps the newest
    MAX_PENDING notices.
    """

    def __init__(self, sink: Optional[NoticeSink] = None):
        """
        Initialize notice logger.

        Args:
            sink: Callable receiving each notice. If None, notices are
                  only logged and queued.
        """
        self._sink = sink
        self._pending: deque[Notice] = deque(maxlen=MAX_PENDING)
        self._logger = structlog.get_logger("financas.notices")

    def publish(self, notice: Notice) -> Notice:
        """Log a notice, then hand it to the sink or queue it."""
        log_dict = notice.to_log_dict()

        if notice.severity == NoticeSeverity.ERROR:
            self._logger.error("notice", **log_dict)
        elif notice.severity == NoticeSeverity.WARNING:
            self._logger.warning("notice", **log_dict)
        else:
            self._logger.info("notice", **log_dict)

        if self._sink is None:
            self._pending.append(notice)
            return notice

        try:
            self._sink(notice)
        except Exception as e:
            self._logger.error(
                "notice_sink_failed",
                error=str(e),
                notice_id=str(notice.notice_id),
            )
            self._pending.append(notice)

        return notice

    def drain(self) -> list[Notice]:
        """Return and forget every notice published since the last drain."""
        pending = list(self._pending)
        self._pending.clear()
        return pending

    @property
    def pending(self) -> list[Notice]:
        return list(self._pending)

    def persistence_failed(
        self,
        entity_type: str,
        operation: str,
        error: Exception,
        entity_id: Optional[str] = None,
    ) -> None:
        """Publish a persistence failure notice."""
        self.publish(NoticeBuilder.persistence_failed(
            entity_type=entity_type,
            operation=operation,
            error_message=str(error),
            entity_id=entity_id,
        ))

    def load_failed(self, entity_type: str, error: Exception) -> None:
        """Publish a load failure notice."""
        self.publish(NoticeBuilder.load_failed(entity_type, str(error)))
