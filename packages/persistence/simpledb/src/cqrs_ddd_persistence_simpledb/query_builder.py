"""SimpleDB select builder from mongo-style equality filters."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from .exceptions import SimpleDBQueryError
from .serialization import encode_value

if TYPE_CHECKING:
    from collections.abc import Mapping

_ESCAPES = {
    "\0": "\\0",
    "\b": "\\b",
    "\t": "\\t",
    "\x1a": "\\z",
    "\n": "\\n",
    "\r": "\\r",
    '"': '\\"',
    "'": "\\'",
    "\\": "\\\\",
    "%": "\\%",
}
_ESCAPE_PATTERN = re.compile("[" + re.escape("".join(_ESCAPES)) + "]")
_IDENTIFIER = re.compile(r"[A-Za-z0-9_]+")


def escape_str(value: Any) -> str:
    """Backslash-escape characters that could break out of a select literal."""
    return _ESCAPE_PATTERN.sub(lambda m: _ESCAPES[m.group(0)], str(value))


def is_control_key(key: str) -> bool:
    """Directive keys such as ``all$`` are not attribute constraints."""
    return key.endswith("$")


def _quote_name(escaped: str) -> str:
    # a backtick inside a quoted name is written twice
    return "`" + escaped.replace("`", "``") + "`"


def _render_value(key: str, value: Any) -> str:
    if value is None:
        raise SimpleDBQueryError(
            f"Filter value for {key!r} is None; None fields are never stored"
        )
    encoded = encode_value(value)
    return '"' + escape_str(encoded) + '"'


def _render_name(key: str) -> str:
    if not key:
        raise SimpleDBQueryError("Filter attribute name must not be empty")
    escaped = escape_str(key)
    if _IDENTIFIER.fullmatch(key):
        return escaped
    return _quote_name(escaped)


class SimpleDBQueryBuilder:
    """Compiles ``{field: value}`` filters to SimpleDB select expressions.

    Only conjunctions of equality constraints are supported. Values go
    through the same encoding as stored fields, so ``2`` matches ``"2"``
    and ``True`` matches ``"true"``. A ``None`` value is rejected because
    ``None`` fields are never written.
    """

    def build_where(self, query: Mapping[str, Any] | None) -> str:
        """Return ``k1="v1" and k2="v2"`` or an empty string."""
        if not query:
            return ""
        clauses = [
            f"{_render_name(str(key))}={_render_value(str(key), value)}"
            for key, value in query.items()
            if not is_control_key(str(key))
        ]
        return " and ".join(clauses)

    def build_select(self, domain: str, query: Mapping[str, Any] | None) -> str:
        """Build ``select * from `domain` [where ...]``."""
        select = f"select * from {_quote_name(escape_str(domain))}"
        where = self.build_where(query)
        if where:
            return f"{select} where {where}"
        return select
