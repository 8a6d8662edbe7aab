"""
Small SQLAlchemy expression helpers that behave the same on SQLite and PostgreSQL
"""
import json
from sqlalchemy import String, cast, or_


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_text(column, value: str):
    """Case-insensitive substring match"""
    return column.ilike(f"%{escape_like(value)}%", escape="\\")


def any_contains_text(columns, value: str):
    return or_(*[contains_text(column, value) for column in columns])


def json_array_contains(column, value: str):
    """
    "Array contains" over a JSON list column of strings.

    Matches the serialized element (including its quotes) inside the JSON text,
    so "cardio" does not match an element "cardiology".
    """
    element = json.dumps(value)
    return cast(column, String).like(f"%{escape_like(element)}%", escape="\\")
