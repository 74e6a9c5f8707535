"""Shared base model for domain entities exchanged with the outer layers."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Get the current UTC datetime with timezone awareness."""
    return datetime.now(UTC)


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire.

    Both spellings are accepted on input so records written by the browser
    client and by Python callers load the same way.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """Dump using camelCase field names and JSON-safe values."""
        return self.model_dump(mode="json", by_alias=True)
