"""
Unit tests for structured logging helpers.
"""

import json
import logging

from oshpaz.core.logging_config import JSONFormatter, filter_sensitive_data, user_logger


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


def test_filter_sensitive_data_masks_nested_keys():
    data = {
        "initData": "query_id=1&hash=abc",
        "profile": {"firstName": "Aziz", "api_key": "sk-1"},
        "items": [{"token": "t"}, {"name": "Plov"}],
    }

    filtered = filter_sensitive_data(data)

    assert filtered["initData"] == "***FILTERED***"
    assert filtered["profile"] == {"firstName": "Aziz", "api_key": "***FILTERED***"}
    assert filtered["items"] == [{"token": "***FILTERED***"}, {"name": "Plov"}]
    assert data["profile"]["api_key"] == "sk-1"


def test_user_logger_binds_tg_id():
    logger = logging.getLogger("oshpaz.test.user_logger")
    handler = ListHandler()
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    try:
        user_logger(logger, 100).info("Meal confirmed", extra={"extra_fields": {"meal_id": "m1"}})
    finally:
        logger.removeHandler(handler)

    fields = handler.records[0].extra_fields
    assert fields == {"tg_id": "100", "meal_id": "m1"}


def test_json_formatter_merges_fields():
    record = logging.LogRecord("oshpaz", logging.WARNING, __file__, 10, "Reminder failed", None, None)
    record.extra_fields = {"tg_id": "100", "category": "breakfast"}

    entry = json.loads(JSONFormatter().format(record))

    assert entry["level"] == "WARNING"
    assert entry["message"] == "Reminder failed"
    assert entry["tg_id"] == "100"
    assert entry["category"] == "breakfast"
