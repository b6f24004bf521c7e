"""InMemorySimpleDBClient — dict-backed fake of the SimpleDB client.

Behaves like SimpleDB where the adapter can tell the difference: values are
stored as text, puts replace attributes, select results come back in pages,
and unknown domains raise ``NoSuchDomain``. It understands the select
expressions produced by :class:`SimpleDBQueryBuilder` (equality
conjunctions) and nothing more.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import TYPE_CHECKING, Any

from .client import SelectPage

if TYPE_CHECKING:
    import builtins
    from collections.abc import Mapping

_SELECT = re.compile(
    r"select \* from `(?P<domain>(?:[^`\\]|\\.|``)*)`(?: where (?P<where>.+))?",
    re.DOTALL,
)
_CLAUSE = re.compile(
    r"(?:^| and )(?P<name>`(?:[^`\\]|\\.|``)*`|[A-Za-z0-9_]+)"
    r'="(?P<value>(?:[^"\\]|\\.)*)"',
    re.DOTALL,
)
_UNESCAPE = re.compile(r"\\(.)", re.DOTALL)
_UNESCAPES = {"0": "\0", "b": "\b", "t": "\t", "z": "\x1a", "n": "\n", "r": "\r"}


class InMemorySimpleDBError(Exception):
    """Error shaped like botocore's ``ClientError`` (has ``response``)."""

    def __init__(self, code: str, message: str) -> None:
        self.response = {"Error": {"Code": code, "Message": message}}
        super().__init__(f"{code}: {message}")


def _unescape(text: str) -> str:
    return _UNESCAPE.sub(lambda m: _UNESCAPES.get(m.group(1), m.group(1)), text)


def _unquote_name(text: str) -> str:
    return _unescape(text[1:-1].replace("``", "`"))


def parse_select(query: str) -> tuple[str, list[tuple[str, str]]]:
    """Split a select expression into its domain and ``(name, value)`` pairs."""
    match = _SELECT.fullmatch(query)
    if match is None:
        raise InMemorySimpleDBError("InvalidQueryExpression", query)
    domain = _unescape(match.group("domain").replace("``", "`"))
    where = match.group("where") or ""
    conditions: list[tuple[str, str]] = []
    pos = 0
    while pos < len(where):
        clause = _CLAUSE.match(where, pos)
        if clause is None:
            raise InMemorySimpleDBError("InvalidQueryExpression", query)
        name = clause.group("name")
        name = _unquote_name(name) if name.startswith("`") else _unescape(name)
        conditions.append((name, _unescape(clause.group("value"))))
        pos = clause.end()
    return domain, conditions


class InMemorySimpleDBClient:
    """In-memory stand-in for :class:`~cqrs_ddd_persistence_simpledb.client.SimpleDBClient`."""

    def __init__(self, *, page_size: int = 100) -> None:
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self.page_size = page_size
        self.domains: dict[str, dict[str, dict[str, Any]]] = {}
        self.calls: Counter[str] = Counter()
        self.closed = False
        self._failures: dict[str, BaseException] = {}

    def fail_next(self, operation: str, exc: BaseException) -> None:
        """Make the next call to ``operation`` raise ``exc``."""
        self._failures[operation] = exc

    def _enter(self, operation: str) -> None:
        self.calls[operation] += 1
        exc = self._failures.pop(operation, None)
        if exc is not None:
            raise exc

    def _domain(self, name: str) -> dict[str, dict[str, Any]]:
        try:
            return self.domains[name]
        except KeyError:
            raise InMemorySimpleDBError(
                "NoSuchDomain", f"The specified domain does not exist: {name}"
            ) from None

    async def list_domains(self) -> builtins.list[str]:
        self._enter("list_domains")
        return sorted(self.domains)

    async def create_domain(self, name: str) -> dict[str, Any]:
        self._enter("create_domain")
        self.domains.setdefault(name, {})
        return {}

    async def delete_domain(self, name: str) -> dict[str, Any]:
        self._enter("delete_domain")
        self.domains.pop(name, None)
        return {}

    async def get_item(self, domain: str, key: str) -> dict[str, Any] | None:
        self._enter("get_item")
        item = self._domain(domain).get(key)
        return dict(item) if item else None

    async def put_item(
        self, domain: str, key: str, attributes: Mapping[str, Any]
    ) -> dict[str, Any]:
        self._enter("put_item")
        item = self._domain(domain).setdefault(key, {})
        item.update({str(k): str(v) for k, v in attributes.items()})
        return {}

    async def delete_item(self, domain: str, key: str) -> None:
        self._enter("delete_item")
        self._domain(domain).pop(key, None)

    async def select(
        self, query: str, next_token: str | None = None
    ) -> tuple[builtins.list[dict[str, Any]], SelectPage]:
        self._enter("select")
        domain, conditions = parse_select(query)
        matches = [
            (name, item)
            for name, item in self._domain(domain).items()
            if all(item.get(attr) == value for attr, value in conditions)
        ]
        start = int(next_token) if next_token else 0
        end = start + self.page_size
        page = matches[start:end]
        return (
            [dict(item) for _, item in page],
            SelectPage(
                next_token=str(end) if end < len(matches) else None,
                item_names=tuple(name for name, _ in page),
            ),
        )

    async def close(self) -> None:
        self.closed = True
