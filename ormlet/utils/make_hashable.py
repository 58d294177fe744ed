"""Convert bound parameter values to a hashable form, for use in cache keys."""

import datetime
import decimal
import enum
import uuid
from collections.abc import Mapping

from pydantic import BaseModel

_SCALAR_TYPES = (
    int, float, str, bytes, type(None),
    decimal.Decimal, uuid.UUID,
    datetime.datetime, datetime.date, datetime.time, datetime.timedelta,
)


def make_hashable(thing: object):
    """Return a hashable representation of thing (e.g. for use in hash() or as dict key)."""
    # enums
    if isinstance(thing, enum.Enum):
        return (thing.name, thing.value)
    # pre-transform Pydantic model instances
    if isinstance(thing, BaseModel):
        thing = thing.model_dump()
    # mappings
    if isinstance(thing, Mapping):
        return tuple(
            (key, make_hashable(value))
            for key, value
            in sorted(thing.items(), key=lambda item: item[0])
        )
    # binary buffers
    if isinstance(thing, (bytearray, memoryview)):
        return bytes(thing)
    # collections
    if isinstance(thing, (list, tuple, set, frozenset)):
        return tuple(make_hashable(value) for value in thing)
    # scalar types
    if isinstance(thing, _SCALAR_TYPES):
        return thing
    # other
    raise ValueError(f"Cannot hash `{thing}`, {type(thing)}")
