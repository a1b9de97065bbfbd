"""
Pydantic base class for all stored records.

Records keep camelCase keys on disk (referralCode, createdAt, ...) and
snake_case attributes in Python.
"""
import secrets
import string
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

_ID_ALPHABET = string.ascii_lowercase + string.digits


def _money_to_json(value: Decimal) -> Union[int, float]:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _money_from_json(value: Any) -> Any:
    # repr() is the shortest string that round-trips, so 9.99 reads back as Decimal("9.99")
    if isinstance(value, float):
        return Decimal(repr(value))
    return value


# Decimal in Python, plain JSON number on disk and on the wire.
# Amounts are whole cents (see parse_amount), which floats carry exactly through repr().
Money = Annotated[
    Decimal,
    BeforeValidator(_money_from_json),
    PlainSerializer(_money_to_json, return_type=Union[int, float], when_used="json"),
]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def random_token(length: int) -> str:
    """Random lowercase base-36 string."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def new_id(prefix: str) -> str:
    return prefix + random_token(12)


class Record(BaseModel):
    """Base class for all stored records."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_record(cls, data: dict[str, Any]):
        return cls.model_validate(data)

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
