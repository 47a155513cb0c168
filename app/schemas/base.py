from datetime import date, datetime, time, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def _bson_safe(value: Any) -> Any:
    # BSON has no date-only type
    if isinstance(value, dict):
        return {k: _bson_safe(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_bson_safe(v) for v in value]
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    return value


class CamelModel(BaseModel):
    """Request body with camelCase wire names. Unknown fields are dropped, which keeps patches allow-listed."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_document(self, **kwargs) -> dict:
        return _bson_safe(self.model_dump(by_alias=True, **kwargs))

    def changes(self) -> dict:
        """Fields the caller actually sent, minus explicit nulls."""
        return {k: v for k, v in self.to_document(exclude_unset=True).items() if v is not None}
