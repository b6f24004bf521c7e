"""SimpleDBEntityStore — the CRUD façade over SimpleDB.

Every operation follows the same shape: ensure the entity's domain exists,
talk to the store, then decode the results into host entities. Any error
coming back from the store is logged and raised once as
:class:`SimpleDBStoreError`; programming errors (missing arguments,
unsupported query shapes) are raised as they are.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from .client import SimpleDBClient
from .config import SimpleDBSettings
from .connection import SimpleDBConnectionManager
from .exceptions import (
    STORE_NAME,
    SimpleDBConfigurationError,
    SimpleDBConnectionError,
    SimpleDBStoreError,
)
from .ports import IEntityStore
from .provisioning import DomainProvisioner, domain_name
from .query_builder import SimpleDBQueryBuilder
from .retry import BackoffPolicy
from .serialization import decode_item, encode_fields, text_fields

if TYPE_CHECKING:
    import builtins
    from collections.abc import Callable, Iterator, Mapping

    from aiobotocore.session import AioSession

    from .ports import IEntity, ISimpleDBClient

logger = logging.getLogger("cqrs_ddd.simpledb.store")


def _new_id() -> str:
    return str(uuid.uuid4())


class SimpleDBEntityStore(IEntityStore):
    """Entity store backed by SimpleDB domains.

    ``remove`` with a filter selects the matching items and deletes each one
    in its own task without waiting for them (fire-and-forget). Pass
    ``wait_for_deletes=True`` to await every delete and raise if any of
    them failed.

    ``list`` and ``remove`` only consume the first page of select results;
    larger result sets are truncated. Use :meth:`native` and follow
    ``SelectPage.next_token`` when every match is needed.
    """

    name = STORE_NAME

    def __init__(
        self,
        client: ISimpleDBClient,
        *,
        wait_for_deletes: bool = False,
        tag: str | None = None,
        id_factory: Callable[[], str] = _new_id,
        query_builder: SimpleDBQueryBuilder | None = None,
    ) -> None:
        self._client: ISimpleDBClient | None = client
        self._provisioner = DomainProvisioner(client)
        self._query_builder = query_builder or SimpleDBQueryBuilder()
        self._wait_for_deletes = wait_for_deletes
        self._id_factory = id_factory
        self._pending: set[asyncio.Task[None]] = set()
        self.tag = tag or "-"
        self.desc = f"{self.name}/{self.tag}"

    @classmethod
    def from_settings(
        cls,
        settings: SimpleDBSettings,
        *,
        session: AioSession | None = None,
        tag: str | None = None,
    ) -> SimpleDBEntityStore:
        """Wire connection, backoff and client from validated settings."""
        connection = SimpleDBConnectionManager(settings, session=session)
        backoff = BackoffPolicy(min_wait=settings.min_wait, max_wait=settings.max_wait)
        client = SimpleDBClient(
            connection, backoff=backoff, consistent_read=settings.consistent_read
        )
        return cls(client, wait_for_deletes=settings.wait_for_deletes, tag=tag)

    @classmethod
    async def configure(
        cls,
        options: SimpleDBSettings | Mapping[str, Any],
        *,
        session: AioSession | None = None,
        tag: str | None = None,
    ) -> SimpleDBEntityStore:
        """Validate ``options`` and open the SimpleDB connection.

        Invalid options (e.g. missing credentials) raise pydantic's
        ``ValidationError`` straight away; a connection that cannot be opened
        raises :class:`SimpleDBConfigurationError`.
        """
        if isinstance(options, SimpleDBSettings):
            settings = options
        else:
            settings = SimpleDBSettings.from_options(options)
        store = cls.from_settings(settings, session=session, tag=tag)
        connection = store._client.connection  # type: ignore[union-attr]
        try:
            await connection.get_client()
        except SimpleDBConnectionError as e:
            raise SimpleDBConfigurationError(str(e)) from e
        logger.debug("init: db open %s region=%s", store.desc, settings.region_name)
        return store

    # -- helpers ------------------------------------------------------------

    def _require_client(self) -> ISimpleDBClient:
        if self._client is None:
            raise SimpleDBConnectionError(f"{self.desc} is closed")
        return self._client

    def _report(self, operation: str, exc: BaseException) -> SimpleDBStoreError:
        """Single reporting path for store-originated errors."""
        logger.debug("error: %s: %s", operation, exc)
        return SimpleDBStoreError(f"{operation}: {exc}")

    @contextmanager
    def _store_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SimpleDBStoreError:
            raise
        except Exception as e:
            raise self._report(operation, e) from e

    def _make(self, entity: IEntity, item: Mapping[str, Any]) -> IEntity:
        return entity.make(decode_item(item, text_fields(entity)))

    def _on_delete_done(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            error = self._report(f"remove/delete {task.get_name()}", exc)
            logger.warning("Background delete failed: %s", error, exc_info=exc)

    def _spawn_delete(self, client: ISimpleDBClient, domain: str, key: str) -> None:
        task = asyncio.create_task(
            client.delete_item(domain, key), name=f"{domain}/{key}"
        )
        self._pending.add(task)
        task.add_done_callback(self._on_delete_done)

    async def _delete_and_join(
        self, client: ISimpleDBClient, domain: str, keys: builtins.list[str]
    ) -> None:
        results = await asyncio.gather(
            *(client.delete_item(domain, key) for key in keys),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            error = self._report(
                f"remove: {len(failures)} of {len(keys)} deletes failed", failures[0]
            )
            raise error from failures[0]

    # -- CRUD contract ------------------------------------------------------

    async def save(self, entity: IEntity) -> IEntity:
        """Insert (no id yet) or update (id present) with upsert semantics."""
        if entity is None:
            raise ValueError("save requires an entity")
        self._require_client()
        update = bool(entity.id)
        data = encode_fields(entity)
        key = str(entity.id) if update else (entity.explicit_id or self._id_factory())
        data["id"] = key

        with self._store_errors("save"):
            client, domain = await self._provisioner.ensure_domain(entity)
            await client.put_item(domain, key, data)

        if update:
            logger.debug("save/update %s %s", entity, self.desc)
        else:
            entity.id = key
            logger.debug("save/insert %s %s", entity, self.desc)
        return entity

    async def load(self, entity: IEntity, query: Mapping[str, Any]) -> IEntity | None:
        """Load one entity by ``{"id": ...}``; None when it does not exist."""
        if entity is None or query is None:
            raise ValueError("load requires an entity and a query")
        self._require_client()
        if not query.get("id"):
            raise NotImplementedError("select style query not implemented for load")

        with self._store_errors("load"):
            client, domain = await self._provisioner.ensure_domain(entity)
            item = await client.get_item(domain, str(query["id"]))
            found = self._make(entity, item) if item is not None else None

        logger.debug("load %s %s %s", query, found, self.desc)
        return found

    async def list(
        self, entity: IEntity, query: Mapping[str, Any] | None = None
    ) -> builtins.list[IEntity]:
        """Entities matching the equality filter, first page only."""
        if entity is None:
            raise ValueError("list requires an entity")
        self._require_client()
        select = self._query_builder.build_select(domain_name(entity.canon), query)

        with self._store_errors("list"):
            client, _ = await self._provisioner.ensure_domain(entity)
            items, page = await client.select(select)

        if page.truncated:
            logger.debug(
                "list %s returned a partial page of %d items", select, len(items)
            )
        with self._store_errors("list"):
            results = [self._make(entity, item) for item in items]
        logger.debug(
            "list %s %d %s %s",
            query,
            len(results),
            results[0] if results else None,
            self.desc,
        )
        return results

    async def remove(self, entity: IEntity, query: Mapping[str, Any]) -> Any:
        """Delete matching items, or the whole domain for ``{"all$": True}``.

        Returns the delete-domain response, or the raw matched items.
        """
        if entity is None or query is None:
            raise ValueError("remove requires an entity and a query")
        self._require_client()

        if query.get("all$"):
            with self._store_errors("remove"):
                client, domain = await self._provisioner.ensure_domain(entity)
                result = await client.delete_domain(domain)
            logger.debug("remove/all %s %s", domain, self.desc)
            return result

        select = self._query_builder.build_select(domain_name(entity.canon), query)
        with self._store_errors("remove"):
            client, domain = await self._provisioner.ensure_domain(entity)
            items, page = await client.select(select)

        names = page.item_names or tuple(item.get("id") for item in items)
        keys = [
            str(item.get("id") or name)
            for item, name in zip(items, names)
            if item.get("id") or name
        ]
        if self._wait_for_deletes:
            await self._delete_and_join(client, domain, keys)
        else:
            for key in keys:
                self._spawn_delete(client, domain, key)
        logger.debug("remove %s %d %s", query, len(keys), self.desc)
        return items

    async def native(self, entity: IEntity) -> ISimpleDBClient:
        """Ensure the entity's domain and hand back the raw client."""
        if entity is None:
            raise ValueError("native requires an entity")
        self._require_client()
        with self._store_errors("native"):
            client, _ = await self._provisioner.ensure_domain(entity)
        return client

    async def close(self) -> None:
        """Drop the client handle. Idempotent; never raises."""
        client, self._client = self._client, None
        if client is None:
            return
        await self.drain()
        try:
            await client.close()
        except Exception:
            logger.warning("Closing %s failed", self.desc, exc_info=True)
        logger.debug("close %s", self.desc)

    # -- extras -------------------------------------------------------------

    @property
    def pending_deletes(self) -> int:
        """Number of fire-and-forget deletes still running."""
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for outstanding fire-and-forget deletes (errors already logged)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def health_check(self) -> bool:
        """Return True if the store answers."""
        if self._client is None:
            return False
        connection = getattr(self._client, "connection", None)
        if connection is not None:
            return bool(await connection.health_check())
        try:
            await self._client.list_domains()
            return True
        except Exception:  # noqa: BLE001
            return False
