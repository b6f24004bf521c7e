"""SimpleDBClient — async wrapper over the aiobotocore ``sdb`` client.

Translates between SimpleDB's attribute lists and plain mappings, and runs
every request through the :class:`BackoffPolicy`. This is the handle
returned by ``native()``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .retry import BackoffPolicy

if TYPE_CHECKING:
    import builtins
    from collections.abc import Mapping

    from .connection import SimpleDBConnectionManager

logger = logging.getLogger("cqrs_ddd.simpledb.client")


@dataclass(frozen=True)
class SelectPage:
    """Paging metadata returned alongside one page of select results."""

    next_token: str | None = None
    item_names: tuple[str, ...] = field(default_factory=tuple)

    @property
    def truncated(self) -> bool:
        return self.next_token is not None


def attributes_to_dict(attributes: list[dict[str, Any]]) -> dict[str, Any]:
    """Collapse SimpleDB ``[{"Name": .., "Value": ..}]`` into a mapping.

    Names that occur more than once become lists of values.
    """
    result: dict[str, Any] = {}
    for attr in attributes:
        name, value = attr["Name"], attr["Value"]
        if name not in result:
            result[name] = value
        elif isinstance(result[name], list):
            result[name].append(value)
        else:
            result[name] = [result[name], value]
    return result


def dict_to_attributes(data: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Expand a mapping into replacing SimpleDB attributes (values as text)."""
    return [
        {"Name": str(name), "Value": str(value), "Replace": True}
        for name, value in data.items()
    ]


class SimpleDBClient:
    """Outbound SimpleDB operations used by the entity store."""

    def __init__(
        self,
        connection: SimpleDBConnectionManager,
        *,
        backoff: BackoffPolicy | None = None,
        consistent_read: bool = False,
    ) -> None:
        self._connection = connection
        self._backoff = backoff or BackoffPolicy()
        self._consistent_read = consistent_read

    @property
    def connection(self) -> SimpleDBConnectionManager:
        return self._connection

    async def _call(self, operation: str, **params: Any) -> dict[str, Any]:
        client = await self._connection.get_client()
        method = getattr(client, operation)

        async def call() -> dict[str, Any]:
            return await method(**params)

        return await self._backoff.run(operation, call)

    async def list_domains(self) -> builtins.list[str]:
        """Return every domain name, following ``NextToken``."""
        domains: list[str] = []
        params: dict[str, Any] = {}
        while True:
            out = await self._call("list_domains", **params)
            domains.extend(out.get("DomainNames", []))
            token = out.get("NextToken")
            if not token:
                return domains
            params = {"NextToken": token}

    async def create_domain(self, name: str) -> dict[str, Any]:
        return await self._call("create_domain", DomainName=name)

    async def delete_domain(self, name: str) -> dict[str, Any]:
        return await self._call("delete_domain", DomainName=name)

    async def get_item(self, domain: str, key: str) -> dict[str, Any] | None:
        """Return the item's attributes, or None when it has none."""
        out = await self._call(
            "get_attributes",
            DomainName=domain,
            ItemName=key,
            ConsistentRead=self._consistent_read,
        )
        attributes = out.get("Attributes") or []
        if not attributes:
            return None
        return attributes_to_dict(attributes)

    async def put_item(
        self, domain: str, key: str, attributes: Mapping[str, Any]
    ) -> dict[str, Any]:
        return await self._call(
            "put_attributes",
            DomainName=domain,
            ItemName=key,
            Attributes=dict_to_attributes(attributes),
        )

    async def delete_item(self, domain: str, key: str) -> None:
        await self._call("delete_attributes", DomainName=domain, ItemName=key)

    async def select(
        self, query: str, next_token: str | None = None
    ) -> tuple[builtins.list[dict[str, Any]], SelectPage]:
        """Run one page of a select expression."""
        params: dict[str, Any] = {
            "SelectExpression": query,
            "ConsistentRead": self._consistent_read,
        }
        if next_token:
            params["NextToken"] = next_token
        logger.debug("select: %s", query)
        out = await self._call("select", **params)
        raw_items = out.get("Items", [])
        items = [attributes_to_dict(item.get("Attributes", [])) for item in raw_items]
        page = SelectPage(
            next_token=out.get("NextToken"),
            item_names=tuple(item["Name"] for item in raw_items),
        )
        return items, page

    async def close(self) -> None:
        await self._connection.close()
