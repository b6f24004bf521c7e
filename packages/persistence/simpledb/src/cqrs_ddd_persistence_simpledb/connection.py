"""SimpleDBConnectionManager — aiobotocore ``sdb`` client lifecycle."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from aiobotocore.config import AioConfig
from aiobotocore.session import AioSession

from .exceptions import SimpleDBConnectionError

if TYPE_CHECKING:
    from .config import SimpleDBSettings

logger = logging.getLogger("cqrs_ddd.simpledb.client")


class SimpleDBConnectionManager:
    """Holds the single aiobotocore SimpleDB client used by a store.

    Botocore's own retries are switched off; backoff is handled by
    :class:`~cqrs_ddd_persistence_simpledb.retry.BackoffPolicy` using the
    settings' wait bounds.
    """

    def __init__(
        self,
        settings: SimpleDBSettings,
        *,
        session: AioSession | None = None,
        **client_kwargs: Any,
    ) -> None:
        self._settings = settings
        self._session = session or AioSession()
        self._client_kwargs = client_kwargs
        self._client: Any = None
        self._client_cm: Any = None

    @property
    def settings(self) -> SimpleDBSettings:
        return self._settings

    async def get_client(self) -> Any:
        """Return the shared SimpleDB client; create it on first use."""
        if self._client is not None:
            return self._client
        settings = self._settings
        kwargs: dict[str, Any] = {
            "region_name": settings.region_name,
            "aws_access_key_id": settings.key_id,
            "aws_secret_access_key": settings.secret.get_secret_value(),
            "config": AioConfig(retries={"total_max_attempts": 1}),
            **self._client_kwargs,
        }
        if settings.endpoint_url:
            kwargs["endpoint_url"] = settings.endpoint_url
        try:
            self._client_cm = self._session.create_client("sdb", **kwargs)
            self._client = await self._client_cm.__aenter__()
        except Exception as e:
            self._client_cm = None
            raise SimpleDBConnectionError(str(e)) from e
        return self._client

    @property
    def connected(self) -> bool:
        return self._client is not None

    async def close(self) -> None:
        """Close the client if open. Idempotent."""
        if self._client_cm is not None:
            cm = self._client_cm
            self._client_cm = None
            self._client = None
            try:
                await cm.__aexit__(None, None, None)
            except Exception:
                logger.warning("Closing the SimpleDB client failed", exc_info=True)

    async def health_check(self) -> bool:
        """Return True if SimpleDB answers a one-domain listing."""
        try:
            client = await self.get_client()
            await client.list_domains(MaxNumberOfDomains=1)
            return True
        except Exception:  # noqa: BLE001
            return False
