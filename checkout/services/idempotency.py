"""
Idempotency Store for Item Scans

Remembers which cart version an idempotency key produced so a retried scan
returns the earlier result instead of adding the items twice.

Records are written only after the guarded scan has been saved, and they
never expire.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from checkout.models.base import CheckoutError, EmptyIdentifierError
from checkout.models.cart import validate_quantity
from checkout.models.sku import SKU, validate_sku


class IdempotencyKeyConflictError(CheckoutError):
    """
    An idempotency key was reused for a different operation.

    When the key belongs to another cart, both fingerprints are prefixed
    with their cart id so the mismatch is visible in the error itself.
    """

    def __init__(
        self,
        idempotency_key: str,
        expected_fingerprint: str,
        received_fingerprint: str,
    ) -> None:
        self.idempotency_key = idempotency_key
        self.expected_fingerprint = expected_fingerprint
        self.received_fingerprint = received_fingerprint
        super().__init__(
            f"Idempotency key {idempotency_key!r} was already used for "
            f"{expected_fingerprint}, received {received_fingerprint}"
        )


@dataclass(frozen=True)
class IdempotencyRecord:
    """Outcome of a completed scan."""

    cart_id: str
    version: int
    fingerprint: str

    def to_dict(self) -> dict[str, Any]:
        return {"cart_id": self.cart_id, "version": self.version, "fingerprint": self.fingerprint}


@dataclass(frozen=True)
class IdempotencyCheck:
    """Result of verify_and_set()."""

    is_duplicate: bool
    version: int | None = None


class IdempotencyStore:
    """
    In-memory idempotency records keyed by caller-supplied key.

    verify_and_set() followed by set() is a read-then-write without locking,
    and the caller awaits the repository in between. Two first attempts with
    one key can both pass the check; the cart's version compare-and-swap only
    rejects the second when both read the cart before either saves. Callers
    that run scans concurrently must serialize them per key.
    """

    def __init__(self) -> None:
        self._records: dict[str, IdempotencyRecord] = {}
        self._logger = structlog.get_logger(__name__)

    @staticmethod
    def create_fingerprint(sku: SKU | str, quantity: int) -> str:
        """Encode scan parameters as "<SKU>:<quantity>"."""
        validated_quantity = validate_quantity(quantity)
        return f"{validate_sku(sku).value}:{validated_quantity}"

    def verify_and_set(self, key: str, cart_id: str, fingerprint: str) -> IdempotencyCheck:
        """
        Check whether `key` was already used.

        Nothing is recorded here; call set() once the scan has been saved.

        Args:
            key: Idempotency key from the caller
            cart_id: Cart the scan targets
            fingerprint: Output of create_fingerprint()

        Returns:
            IdempotencyCheck, carrying the recorded version for duplicates

        Raises:
            IdempotencyKeyConflictError: If the key was used for another cart
                or with other scan parameters
        """
        self._require_key(key)
        record = self._records.get(key)
        if record is None:
            return IdempotencyCheck(is_duplicate=False)

        if record.cart_id != cart_id:
            self._logger.warning(
                "idempotency_key_cart_mismatch",
                idempotency_key=key,
                recorded_cart_id=record.cart_id,
                cart_id=cart_id,
            )
            raise IdempotencyKeyConflictError(
                key,
                f"{record.cart_id}:{record.fingerprint}",
                f"{cart_id}:{fingerprint}",
            )

        if record.fingerprint != fingerprint:
            self._logger.warning(
                "idempotency_key_fingerprint_mismatch",
                idempotency_key=key,
                cart_id=cart_id,
                expected_fingerprint=record.fingerprint,
                received_fingerprint=fingerprint,
            )
            raise IdempotencyKeyConflictError(key, record.fingerprint, fingerprint)

        self._logger.info(
            "idempotent_replay",
            idempotency_key=key,
            cart_id=cart_id,
            version=record.version,
        )
        return IdempotencyCheck(is_duplicate=True, version=record.version)

    def set(self, key: str, cart_id: str, version: int, fingerprint: str) -> None:
        """Record (or overwrite) the outcome for `key`."""
        self._require_key(key)
        self._records[key] = IdempotencyRecord(
            cart_id=cart_id,
            version=version,
            fingerprint=fingerprint,
        )
        self._logger.debug(
            "idempotency_key_recorded",
            idempotency_key=key,
            cart_id=cart_id,
            version=version,
        )

    def get(self, key: str) -> IdempotencyRecord | None:
        return self._records.get(key)

    def clear(self) -> None:
        """Drop every record."""
        self._records.clear()

    def get_stats(self) -> dict[str, Any]:
        return {"total_keys": len(self._records)}

    def __len__(self) -> int:
        return len(self._records)

    @staticmethod
    def _require_key(key: str) -> None:
        if not isinstance(key, str) or not key.strip():
            raise EmptyIdentifierError("idempotency_key")
