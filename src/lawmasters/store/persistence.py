"""Serialize/merge boundary between PersistedState and durable storage.

The payload keeps the envelope and camelCase field names the browser
dashboard writes under the same key, so either client can rehydrate the
other's preferences:

    {"state": {"darkMode": true, "language": "en", ...}, "version": 0}
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr
from pydantic import ValidationError as PydanticValidationError

from lawmasters.domain.session import PersistedState
from lawmasters.domain.value_objects import (
    DEFAULT_DATE_FORMAT,
    DEFAULT_TIMEZONE,
    MAX_RECENT_MATTERS,
    Language,
)
from lawmasters.exceptions import PersistedStateError, StorageError
from lawmasters.logging_config import get_logger
from lawmasters.store.storage import KeyValueStorage

logger = get_logger(__name__)

PAYLOAD_VERSION = 0


class PersistedStatePayload(BaseModel):
    """Wire schema for the persisted subset of the session state."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    dark_mode: StrictBool = Field(default=False, alias="darkMode")
    language: Language = Language.ENGLISH
    bci_safe_mode: StrictBool = Field(default=True, alias="bcisafeMode")
    timezone: StrictStr = DEFAULT_TIMEZONE
    date_format: StrictStr = Field(default=DEFAULT_DATE_FORMAT, alias="dateFormat")
    recent_matters: list[StrictStr] = Field(default_factory=list, alias="recentMatters")
    pinned_items: list[StrictStr] = Field(default_factory=list, alias="pinnedItems")

    @classmethod
    def from_state(cls, state: PersistedState) -> PersistedStatePayload:
        return cls(
            dark_mode=state.dark_mode,
            language=state.language,
            bci_safe_mode=state.bci_safe_mode,
            timezone=state.timezone,
            date_format=state.date_format,
            recent_matters=list(state.recent_matters),
            pinned_items=sorted(state.pinned_items),
        )

    def to_state(self) -> PersistedState:
        recent = tuple(dict.fromkeys(self.recent_matters))[:MAX_RECENT_MATTERS]
        return PersistedState(
            dark_mode=self.dark_mode,
            language=self.language,
            bci_safe_mode=self.bci_safe_mode,
            timezone=self.timezone,
            date_format=self.date_format,
            recent_matters=recent,
            pinned_items=frozenset(self.pinned_items),
        )


class PersistedEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    state: PersistedStatePayload
    version: StrictInt = PAYLOAD_VERSION


def encode_persisted(state: PersistedState) -> str:
    envelope = PersistedEnvelope(
        state=PersistedStatePayload.from_state(state), version=PAYLOAD_VERSION
    )
    return envelope.model_dump_json(by_alias=True)


def decode_persisted(raw: str, key: str) -> PersistedState:
    """Decode a stored payload.

    Raises:
        PersistedStateError: If the payload is not valid JSON, does not match
            the schema, or was written by an unknown payload version.
    """
    try:
        data: Any = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise PersistedStateError(key, f"corrupt JSON: {e}") from e

    try:
        envelope = PersistedEnvelope.model_validate(data)
    except PydanticValidationError as e:
        raise PersistedStateError(
            key, f"schema mismatch ({e.error_count()} errors)"
        ) from e

    if envelope.version != PAYLOAD_VERSION:
        raise PersistedStateError(key, f"unsupported version {envelope.version}")
    return envelope.state.to_state()


class StatePersister:
    """Best-effort bridge between the store and a KeyValueStorage.

    Never raises: read failures and malformed payloads fall back to the
    initial PersistedState, write failures are logged and reported via the
    return value of save().
    """

    def __init__(self, storage: KeyValueStorage, key: str) -> None:
        self._storage = storage
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    @property
    def storage(self) -> KeyValueStorage:
        return self._storage

    def load(self) -> PersistedState:
        try:
            raw = self._storage.get_item(self._key)
        except StorageError as e:
            logger.warning("storage_read_failed", **e.to_dict())
            return PersistedState()

        if raw is None:
            logger.debug("persisted_state_missing", key=self._key)
            return PersistedState()

        try:
            state = decode_persisted(raw, self._key)
        except PersistedStateError as e:
            logger.warning("persisted_payload_invalid", **e.to_dict())
            return PersistedState()

        logger.debug(
            "store_rehydrated",
            key=self._key,
            recent_matters=len(state.recent_matters),
            pinned_items=len(state.pinned_items),
        )
        return state

    def save(self, state: PersistedState) -> bool:
        try:
            self._storage.set_item(self._key, encode_persisted(state))
        except StorageError as e:
            logger.warning("storage_write_failed", **e.to_dict())
            return False
        return True

    def clear(self) -> bool:
        try:
            self._storage.remove_item(self._key)
        except StorageError as e:
            logger.warning("storage_write_failed", **e.to_dict())
            return False
        return True
