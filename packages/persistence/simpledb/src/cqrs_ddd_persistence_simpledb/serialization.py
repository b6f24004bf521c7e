"""Entity fields <-> SimpleDB attribute values.

SimpleDB stores text only and keeps no type information, so structured
values are written as JSON text and recognised again on read purely by
their shape:

* ``"true"`` / ``"false"`` become booleans;
* anything containing ``<digits>-<digits>-<digits>T`` is parsed as a
  datetime (surrounding quotes and whitespace removed first);
* text wrapped in ``{...}`` or ``[...]`` is parsed as JSON.

The checks run in that order against the stored text and a later match
wins. A plain string that happens to look like one of these comes back
typed, unless the entity declares the field as ``str`` (see
:func:`text_fields`).
"""

from __future__ import annotations

import json
import re
import types
from datetime import date, datetime, time, timezone
from typing import TYPE_CHECKING, Any, Union, get_args, get_origin

from pydantic import BaseModel

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .ports import IEntity

_DATE_PATTERN = re.compile(r"\d+-\d+-\d+T")
_STRUCTURED_PATTERN = re.compile(r"[\{\[].*[\}\]]")
_DATE_STRIP = "\" \t\r\n\f\v"


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_value(value: Any) -> Any:
    """Convert one field value to its stored form.

    Mappings, sequences, pydantic models, booleans and datetimes become JSON
    text; numbers and strings are returned unchanged.
    """
    if isinstance(value, BaseModel):
        return json.dumps(value.model_dump(mode="json"))
    if isinstance(value, datetime):
        return json.dumps(value.isoformat())
    if isinstance(value, date):
        return encode_value(datetime.combine(value, time(), tzinfo=timezone.utc))
    if isinstance(value, (bool, dict, list, tuple)):
        return json.dumps(value, default=_json_default)
    return value


def encode_fields(entity: IEntity) -> dict[str, Any]:
    """Build the attribute map to store for ``entity``. None values are skipped."""
    data: dict[str, Any] = {}
    for name in entity.fields():
        value = getattr(entity, name, None)
        if value is None:
            continue
        data[name] = encode_value(value)
    return data


def _parse_datetime(text: str) -> datetime | None:
    text = text.strip(_DATE_STRIP)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def decode_value(value: Any) -> Any:
    """Reinterpret one stored value; non-strings are returned as-is."""
    if not isinstance(value, str):
        return value
    result: Any = value
    if value == "true":
        result = True
    if value == "false":
        result = False
    if _DATE_PATTERN.search(value):
        parsed = _parse_datetime(value)
        if parsed is not None:
            result = parsed
    if _STRUCTURED_PATTERN.fullmatch(value):
        try:
            result = json.loads(value)
        except ValueError:
            pass  # not JSON after all; keep what we have
    return result


def _is_text(annotation: Any) -> bool:
    if annotation is str:
        return True
    if get_origin(annotation) in (Union, types.UnionType):
        args = {arg for arg in get_args(annotation) if arg is not type(None)}
        return args == {str}
    return False


def text_fields(entity: Any) -> frozenset[str]:
    """Names of fields a pydantic entity declares as plain ``str``.

    Their stored text is already the value, so decoding must not turn
    ``"true"`` or an ISO timestamp into another type.
    """
    if not isinstance(entity, BaseModel):
        return frozenset()
    return frozenset(
        name
        for name, info in type(entity).model_fields.items()
        if _is_text(info.annotation)
    )


def decode_item(
    item: Mapping[str, Any], keep_text: frozenset[str] = frozenset()
) -> dict[str, Any]:
    """Decode every attribute of a stored item, except those in ``keep_text``."""
    return {
        name: value if name in keep_text else decode_value(value)
        for name, value in item.items()
    }
