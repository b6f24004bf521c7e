"""SimpleDBSettings — validated connection and behaviour options."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

MIN_WAIT_MS = 16
MAX_WAIT_MS = 65336


class SimpleDBSettings(BaseModel):
    """Credentials and tuning for the SimpleDB store.

    ``min_wait`` / ``max_wait`` are milliseconds and bound the backoff used
    by the store client when SimpleDB asks it to slow down. The adapter
    itself never waits.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key_id: str = Field(validation_alias=AliasChoices("key_id", "keyid"))
    secret: SecretStr
    min_wait: int = Field(
        default=MIN_WAIT_MS, gt=0, validation_alias=AliasChoices("min_wait", "minwait")
    )
    max_wait: int = Field(
        default=MAX_WAIT_MS, gt=0, validation_alias=AliasChoices("max_wait", "maxwait")
    )
    region_name: str = "us-east-1"
    endpoint_url: str | None = None
    consistent_read: bool = False
    wait_for_deletes: bool = False

    @field_validator("key_id")
    @classmethod
    def _key_id_present(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("key_id is required")
        return value

    @field_validator("secret")
    @classmethod
    def _secret_present(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("secret is required")
        return value

    @model_validator(mode="after")
    def _wait_bounds(self) -> SimpleDBSettings:
        if self.min_wait > self.max_wait:
            raise ValueError("min_wait must be <= max_wait")
        return self

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> SimpleDBSettings:
        """Build settings from plugin options (``keyid``, ``secret``, ...).

        Falsy wait values fall back to the defaults.
        """
        data = {k: v for k, v in options.items() if v is not None}
        for key in ("minwait", "maxwait", "min_wait", "max_wait"):
            if key in data and not data[key]:
                del data[key]
        return cls.model_validate(data)
