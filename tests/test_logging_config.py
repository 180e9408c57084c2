import logging

from logging_config import ContextualFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("services.consistency", logging.WARNING, __file__, 1, "No data", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_extra_fields() -> None:
    formatter = ContextualFormatter(fmt="%(levelname)s %(message)s")

    line = formatter.format(_record(station="Estação Centro", parameter="MP10", request_id="ignored"))

    assert line == 'WARNING No data | station="Estação Centro" parameter=MP10'


def test_formatter_leaves_plain_records_untouched() -> None:
    formatter = ContextualFormatter(fmt="%(message)s", extra_keys=["row_count"])

    assert formatter.format(_record()) == "No data"
    assert formatter.format(_record(row_count=0)) == "No data | row_count=0"
