import json
import logging

from study_buddy.utils.logger import ConsoleFormatter, CONSOLE_DATEFMT, CONSOLE_FORMAT, JsonFormatter


def make_record(**extra):
    record = logging.LogRecord("study_buddy.test", logging.INFO, __file__, 10, "Subjects seeded", None, None)
    record.__dict__.update(extra)
    record.request_id = None
    return record


def test_console_line_appends_extras_but_not_timestamp():
    line = ConsoleFormatter(CONSOLE_FORMAT, CONSOLE_DATEFMT).format(make_record(count=6))

    assert line.endswith("Subjects seeded count=6")
    assert "asctime=" not in line


def test_console_line_shows_request_id():
    record = make_record()
    record.request_id = "ab12cd34"

    line = ConsoleFormatter(CONSOLE_FORMAT, CONSOLE_DATEFMT).format(record)

    assert line.endswith("Subjects seeded [request_id=ab12cd34]")


def test_json_line_carries_extras_and_stringifies_unserialisable_values():
    payload = json.loads(JsonFormatter().format(make_record(count=6, when=object)))

    assert payload["message"] == "Subjects seeded"
    assert payload["level"] == "INFO"
    assert payload["count"] == 6
    assert payload["when"] == str(object)
    assert "asctime" not in payload
