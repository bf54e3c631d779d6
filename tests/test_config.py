"""Tests for settings, logging setup and the notice logger."""

from financas.config import AppSettings, get_settings, validate_all_settings
from financas.models import NoticeBuilder, NoticeType
from financas.notices import NoticeLogger
from financas.notices.logger import MAX_PENDING


class TestSettings:

    def test_app_settings_from_environment(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "google_sheets")
        monkeypatch.setenv("ROLLBACK_PARTIAL_CHAINS", "true")
        monkeypatch.setenv("UPCOMING_WINDOW_DAYS", "10")

        settings = AppSettings()

        assert settings.storage_backend == "google_sheets"
        assert settings.rollback_partial_chains is True
        assert settings.upcoming_window_days == 10
        assert settings.timezone == "America/Sao_Paulo"

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        assert get_settings() is get_settings()

    def test_validate_all_settings_reports_app(self):
        status = validate_all_settings()
        assert status["app"] is True


class TestNoticeLogger:

    def test_publish_queues_until_drained(self):
        notices = NoticeLogger()
        notices.publish(NoticeBuilder.data_cleared("card"))
        notices.publish(NoticeBuilder.no_new_months())

        drained = notices.drain()
        assert [n.notice_type for n in drained] == [NoticeType.DATA_CLEARED, NoticeType.NO_NEW_MONTHS]
        assert notices.pending == []

    def test_sink_receives_notices(self):
        received = []
        notices = NoticeLogger(sink=received.append)
        notice = notices.publish(NoticeBuilder.data_cleared("card"))
        assert received == [notice]

    def test_broken_sink_does_not_raise(self):
        def sink(notice):
            raise RuntimeError("toast queue closed")

        notices = NoticeLogger(sink=sink)
        notices.publish(NoticeBuilder.data_cleared("card"))
        assert len(notices.pending) == 1

    def test_sink_delivery_is_not_queued(self):
        received = []
        notices = NoticeLogger(sink=received.append)
        for _ in range(1000):
            notices.publish(NoticeBuilder.no_new_months())

        assert len(received) == 1000
        assert notices.pending == []

    def test_queue_keeps_newest_notices(self):
        notices = NoticeLogger()
        for _ in range(MAX_PENDING):
            notices.publish(NoticeBuilder.no_new_months())
        last = notices.publish(NoticeBuilder.data_cleared("card"))

        assert len(notices.pending) == MAX_PENDING
        assert notices.pending[-1] is last
