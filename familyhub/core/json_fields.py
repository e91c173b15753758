"""Structured sub-documents stored as JSON text.

Every entity column holding a list or mapping (chore schedules, photo lists,
jar distribution breakdowns, chat attachments) goes through ``JsonText`` so
encoding and decoding happen in one place.
"""

import json
import logging

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator

logger = logging.getLogger("familyhub.json")


def SerializeJson(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))


def ParseJson(value: str | None, default=None):
    """Parse stored JSON text; unparseable text is handed back unchanged."""
    if value is None or value == "":
        return default
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        logger.warning("stored json field could not be parsed, returning raw text")
        return value


class JsonText(TypeDecorator):
    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return SerializeJson(value)

    def process_result_value(self, value, dialect):
        return ParseJson(value)
