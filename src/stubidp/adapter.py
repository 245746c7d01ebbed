"""Storage adapter persisting OIDC engine models in a relational store.

One adapter instance serves one model kind. The method names, argument
order and the difference between a find miss (``None``) and a consume miss
(``NotFoundError``) follow the contract the OIDC engine expects.
"""

import logging
import time
from typing import Any

from stubidp.core.exceptions import (
    NotFoundError,
    StorageError,
    UnknownModelError,
    ValidationError,
)
from stubidp.database.base import RelationalStore
from stubidp.models import ModelKind, resolve
from stubidp.payloads import ClientPayload, Payload, decode, encode

logger = logging.getLogger(__name__)


def now() -> int:
    """Current time in Unix seconds."""
    return int(time.time())


class StorageAdapter:
    """Adapter between the OIDC engine and a :class:`RelationalStore`.

    Holds no mutable state of its own; concurrent calls only share the
    store, whose single-statement atomicity covers every operation.
    """

    def __init__(self, store: RelationalStore, model: str) -> None:
        try:
            self.kind: ModelKind = resolve(model)
        except UnknownModelError as e:
            raise UnknownModelError(e.message, model=e.model, operation="constructor") from None

        self.store = store
        self.model = self.kind.value
        self.definition = self.kind.definition
        self.table = self.definition.table_name
        self.key_column = self.definition.key_column

    def _log(self, level: int, operation: str, msg: str, *args: Any, **kwargs: Any) -> None:
        logger.log(
            level,
            msg,
            *args,
            extra={"model": self.model, "operation": operation},
            **kwargs,
        )

    def _storage_error(self, operation: str, message: str, cause: Exception) -> StorageError:
        self._log(logging.ERROR, operation, "%s: %r", message, cause)
        return StorageError(message, model=self.model, operation=operation, cause=cause)

    def _expires_at(self, expires_in: int | None) -> int | None:
        if expires_in and expires_in > 0:
            return now() + int(expires_in)
        return None

    def _is_expired(self, row: dict[str, Any], current: int) -> bool:
        if not self.definition.expires:
            return False
        expires_at = row.get("expires_at")
        return expires_at is not None and expires_at < current

    async def _discard_expired(self, operation: str, column: str, value: str, current: int) -> None:
        # Best effort: the row is already treated as absent, so a failed
        # delete is logged and dropped and the caller still gets None.
        # Only rows still expired at delete time go, never a fresh upsert.
        try:
            await self.store.delete_expired(self.table, current, column, value)
        except Exception as e:
            self._log(logging.WARNING, operation, "failed to delete expired record %s: %r", value, e)

    async def _live_payload(
        self, operation: str, row: dict[str, Any] | None, current: int
    ) -> Payload | None:
        if row is None:
            return None
        if self._is_expired(row, current):
            key = row[self.key_column]
            self._log(logging.DEBUG, operation, "record %s expired", key)
            await self._discard_expired(operation, self.key_column, key, current)
            return None
        return decode(self.kind, row)

    async def upsert(self, id: str, payload: Payload, expires_in: int | None = None) -> None:
        """Insert or replace the record stored under ``id``.

        Args:
            id: Record identifier (the client id for clients)
            payload: Engine payload
            expires_in: Lifetime in seconds; zero or None never expires

        Raises:
            ValidationError: ``id`` is empty, or a client payload has no client_id
            StorageError: The store failed
        """
        if not id:
            raise ValidationError(
                "ID is required for upsert operation",
                model=self.model,
                operation="upsert",
            )

        encoded = encode(self.kind, payload)
        if isinstance(encoded, ClientPayload):
            if not encoded.client_id:
                raise ValidationError(
                    "client_id is required in Client payload",
                    model=self.model,
                    operation="upsert",
                )
            values = encoded.to_row()
        else:
            values = {
                "id": id,
                **encoded.to_row(self.definition),
                "expires_at": self._expires_at(expires_in),
            }

        self._log(logging.DEBUG, "upsert", "upserting record %s (expires_in=%s)", id, expires_in)
        try:
            await self.store.insert_or_replace(self.table, self.key_column, values)
        except Exception as e:
            raise self._storage_error(
                "upsert", f"Failed to upsert {self.model} with id: {id}", e
            ) from e

    async def find(self, id: str) -> Payload | None:
        """Return the live payload stored under ``id``, or None."""
        if not id:
            return None

        self._log(logging.DEBUG, "find", "finding record %s", id)
        try:
            row = await self.store.select_one(self.table, self.key_column, id)
        except Exception as e:
            raise self._storage_error(
                "find", f"Failed to find {self.model} with id: {id}", e
            ) from e
        return await self._live_payload("find", row, now())

    async def find_by_secondary_key(self, key: str, value: str) -> Payload | None:
        """Return the live payload whose ``key`` field equals ``value``, or None.

        Only ``uid`` (sessions) and ``userCode`` (device codes) are
        supported lookups.
        """
        operation = f"findBy{key[:1].upper()}{key[1:]}"
        if key not in self.definition.secondary_keys:
            raise ValidationError(
                f"{self.model} has no secondary key {key!r}",
                model=self.model,
                operation=operation,
            )
        if not value:
            return None

        column = self.definition.lookup_columns[key]
        current = now()
        self._log(logging.DEBUG, operation, "finding record by %s", key)
        try:
            row = await self.store.select_one(self.table, column, value, live_at=current)
        except Exception as e:
            raise self._storage_error(
                operation, f"Failed to find {self.model} by {key}", e
            ) from e

        if row is None:
            # sweep expired rows still holding this value
            await self._discard_expired(operation, column, value, current)
            return None
        return await self._live_payload(operation, row, current)

    async def find_by_uid(self, uid: str) -> Payload | None:
        return await self.find_by_secondary_key("uid", uid)

    async def find_by_user_code(self, user_code: str) -> Payload | None:
        return await self.find_by_secondary_key("userCode", user_code)

    async def destroy(self, id: str) -> None:
        """Delete the record stored under ``id``; absent records are ignored."""
        if not id:
            return

        self._log(logging.DEBUG, "destroy", "destroying record %s", id)
        try:
            await self.store.delete_where(self.table, self.key_column, id)
        except Exception as e:
            raise self._storage_error(
                "destroy", f"Failed to destroy {self.model} with id: {id}", e
            ) from e

    async def consume(self, id: str) -> None:
        """Stamp ``consumed`` (Unix seconds) into the payload stored under ``id``.

        Raises:
            ValidationError: ``id`` is empty
            NotFoundError: No live record exists for ``id``
            StorageError: The store failed
        """
        if not id:
            raise ValidationError(
                "ID is required for consume operation",
                model=self.model,
                operation="consume",
            )

        self._log(logging.DEBUG, "consume", "consuming record %s", id)
        try:
            row = await self.store.select_one(self.table, self.key_column, id)
        except Exception as e:
            raise self._storage_error(
                "consume", f"Failed to consume {self.model} with id: {id}", e
            ) from e

        if row is None or self._is_expired(row, now()):
            raise NotFoundError(
                f"{self.model} with id {id} not found",
                model=self.model,
                operation="consume",
            )

        payload = {**(row.get("payload") or {}), "consumed": now()}
        try:
            updated = await self.store.update_by_key(
                self.table, self.key_column, id, {"payload": payload}
            )
        except Exception as e:
            raise self._storage_error(
                "consume", f"Failed to consume {self.model} with id: {id}", e
            ) from e

        if not updated:
            raise NotFoundError(
                f"{self.model} with id {id} not found",
                model=self.model,
                operation="consume",
            )

    async def revoke_by_grant_id(self, grant_id: str) -> None:
        """Delete every record bound to ``grant_id``."""
        if not grant_id:
            return

        column = self.definition.relation_column
        if column is None:
            self._log(logging.DEBUG, "revokeByGrantId", "%s is not grant-bound; nothing to revoke", self.model)
            return

        self._log(logging.DEBUG, "revokeByGrantId", "revoking records for grant %s", grant_id)
        try:
            await self.store.delete_where(self.table, column, grant_id)
        except Exception as e:
            raise self._storage_error(
                "revokeByGrantId", f"Failed to revoke {self.model} by grantId: {grant_id}", e
            ) from e

    async def purge_expired(self) -> int:
        """Delete every expired record of this kind and return how many went.

        Reads already hide expired records; this only reclaims space.
        """
        if not self.definition.expires:
            return 0

        try:
            deleted = await self.store.delete_expired(self.table, now())
        except Exception as e:
            raise self._storage_error(
                "purgeExpired", f"Failed to purge expired {self.model} records", e
            ) from e
        self._log(logging.INFO, "purgeExpired", "purged %d expired records", deleted)
        return deleted
