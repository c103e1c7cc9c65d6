"""Process-wide session state backed by durable storage."""

import json

from pydantic import ValidationError

from todogether.auth.schemas import SessionRecord
from todogether.core.exceptions import StorageError
from todogether.core.logging import get_logger, mask_token
from todogether.core.protocols import KeyValueStorage

logger = get_logger(__name__)

DEFAULT_STORAGE_KEY = "todogether_tokens"


class TokenStore:
    """Holds the access/refresh token pair and mirrors it to storage.

    Writes are whole-record replacements, so there is nothing to lock:
    the last writer wins.
    """

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_STORAGE_KEY):
        self.storage = storage
        self.key = key
        self.access_token: str | None = None
        self.refresh_token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    def load(self) -> SessionRecord:
        """Read the persisted record into memory.

        Never raises: a missing, unreadable or malformed record yields an
        empty session and the bad record is discarded.
        """
        try:
            raw = self.storage.get(self.key)
            if raw is None:
                logger.debug("session_not_found", key=self.key)
                record = SessionRecord()
            else:
                record = SessionRecord.model_validate(json.loads(raw))
        except (StorageError, ValueError, ValidationError) as e:
            logger.warning("session_load_failed", key=self.key, error=str(e))
            self.clear()
            return SessionRecord()

        self.access_token = record.access_token or None
        self.refresh_token = record.refresh_token or None
        logger.info("session_loaded", is_authenticated=self.is_authenticated)
        return record

    def save(self, access_token: str | None, refresh_token: str | None) -> None:
        """Replace the session in memory and in storage with one write."""
        self.access_token = access_token or None
        self.refresh_token = refresh_token or None

        record = SessionRecord(access_token=self.access_token, refresh_token=self.refresh_token)
        try:
            self.storage.set(self.key, record.model_dump_json(by_alias=True))
        except StorageError as e:
            logger.error("session_save_failed", key=self.key, error=e.message)
            return
        logger.debug(
            "session_saved",
            access_token=mask_token(self.access_token),
            has_refresh_token=self.refresh_token is not None,
        )

    def clear(self) -> None:
        """Forget both tokens and remove the persisted record."""
        self.access_token = None
        self.refresh_token = None
        try:
            self.storage.delete(self.key)
        except StorageError as e:
            logger.error("session_clear_failed", key=self.key, error=e.message)
            return
        logger.debug("session_cleared", key=self.key)

    def snapshot(self) -> SessionRecord:
        """Current in-memory session as a record."""
        return SessionRecord(access_token=self.access_token, refresh_token=self.refresh_token)
