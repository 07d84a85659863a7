"""
Base schema model for API payloads.

Provides camelCase field aliases for the web front end, UTC datetime
serialization, and construction from ORM rows.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, SerializationInfo, field_serializer


def to_camel(string: str) -> str:
    """
    Convert snake_case to camelCase.

    Example:
        >>> to_camel("created_by_id")
        'createdById'
    """
    parts = string.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])


def serialize_datetime(dt: datetime | None) -> str | None:
    """
    Serialize datetime to ISO 8601 with a 'Z' suffix.

    Stored datetimes are naive UTC; aware values are converted to UTC first.
    """
    if dt is None:
        return None

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)

    return dt.isoformat() + "Z"


class HTTPSchemaModel(BaseModel):
    """
    Base model for all HTTP API schemas.

    - camelCase aliases on output, snake_case or camelCase accepted on input
    - from_attributes=True so ORM rows validate directly
    - datetimes rendered as "2025-07-11T11:47:58.123456Z" in JSON
    """

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @field_serializer("*", mode="wrap")
    def serialize_any_datetime(self, value: Any, handler: Any, info: SerializationInfo) -> Any:
        if isinstance(value, datetime) and info.mode_is_json():
            return serialize_datetime(value)
        return handler(value)
