import json
import logging

from core.logger import JSONFormatter, KSTFormatter, StructuredLoggerAdapter, get_logger


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.notice_service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="[SERVICE] Fetched 10 rows",
        args=(),
        exc_info=None,
    )
    # 2024-03-01 00:00:00 UTC
    record.created = 1709251200.0
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:
    def test_text_with_context_and_duration(self):
        formatter = KSTFormatter("%(asctime)s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

        line = formatter.format(
            _record(context={"source": "dept_computer", "page": 2}, duration_ms=12.5)
        )

        assert line.startswith("2024-03-01 09:00:00 | [SERVICE] Fetched 10 rows")
        assert "source=dept_computer | page=2" in line
        assert line.endswith("12.50ms")

    def test_json(self):
        payload = json.loads(JSONFormatter().format(_record(context={"page": 1})))

        assert payload["level"] == "INFO"
        assert payload["message"] == "[SERVICE] Fetched 10 rows"
        assert payload["context"] == {"page": 1}
        assert payload["timestamp"].startswith("2024-03-01T09:00:00")


class TestStructuredLoggerAdapter:
    def test_moves_keywords_into_extra(self):
        adapter = StructuredLoggerAdapter(logging.getLogger("kmu-notice-test"), {})

        msg, kwargs = adapter.process("hi", {"context": {"page": 1}, "duration": 0.5})

        assert msg == "hi"
        assert kwargs["extra"] == {"context": {"page": 1}, "duration": 0.5}

    def test_get_logger_attaches_handlers_once(self, tmp_path):
        log_file = tmp_path / "logs" / "test.log"

        first = get_logger("kmu-notice-once", log_level="DEBUG", log_file=str(log_file))
        second = get_logger("kmu-notice-once")

        assert first.logger is second.logger
        assert len(first.logger.handlers) == 2
        assert log_file.parent.exists()
