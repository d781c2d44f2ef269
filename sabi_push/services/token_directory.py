"""
Token directory: which FCM tokens belong to which Nostr pubkey.

Two tables back it: ``devices`` (one record per token) and ``pubkey_devices``
(the token set of each identity, one row per token). Every method commits its
own transaction; callers roll back on failure.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, Iterator, NamedTuple, Optional, Set

from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.device import Device
from ..models.pubkey_device import PubkeyDevice

logger = logging.getLogger(__name__)


class StaleDevice(NamedTuple):
    token: str
    nostr_pubkey: str
    last_active: datetime


def short(value: Optional[str], length: int = 8) -> str:
    """Truncate an identity or token for log lines."""
    if not value:
        return "?"
    return f"{value[:length]}..."


class TokenDirectory:
    def __init__(self, db: Session):
        self.db = db

    def register_token(self, identity: str, token: str, platform: Optional[str] = None,
                       app_version: Optional[str] = None) -> None:
        """Idempotently attach ``token`` to ``identity``.

        A token belongs to at most one identity: registering it under a new
        pubkey drops it from the previous owner's set in the same transaction.

        If a concurrent registration of the same token commits first, the
        upsert is replayed once on top of it, so the latest caller owns the
        token. A second collision propagates.
        """
        try:
            self._upsert_registration(identity, token, platform, app_version)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Concurrent registration of {short(token, 20)}, retrying: {e.orig}")
            self._upsert_registration(identity, token, platform, app_version)
            self.db.commit()

        logger.info(f"✅ Registered device for pubkey: {short(identity)}")

    def _upsert_registration(self, identity: str, token: str, platform: Optional[str],
                             app_version: Optional[str]) -> None:
        now = datetime.now(timezone.utc)

        device = self.db.get(Device, token)
        if device is None:
            device = Device(token=token)
            self.db.add(device)
        elif device.nostr_pubkey != identity:
            logger.info(f"🔁 Token moving from {short(device.nostr_pubkey)} to {short(identity)}")

        # Any membership under another identity goes, whatever the device record says
        self.db.query(PubkeyDevice).filter(
            PubkeyDevice.token == token,
            PubkeyDevice.nostr_pubkey != identity,
        ).delete()

        device.nostr_pubkey = identity
        device.platform = platform or "android"
        device.app_version = app_version or "unknown"
        device.registered_at = now
        device.last_active = now

        existing = self.db.query(PubkeyDevice).filter_by(nostr_pubkey=identity, token=token).first()
        if not existing:
            self.db.add(PubkeyDevice(nostr_pubkey=identity, token=token))

    def unregister_token(self, identity: Optional[str], token: str) -> None:
        """Detach ``token`` and delete its device record. Absent tokens are a no-op."""
        device = self.db.get(Device, token)
        if identity is None and device is not None:
            identity = device.nostr_pubkey

        membership = self.db.query(PubkeyDevice).filter(PubkeyDevice.token == token)
        if identity is not None:
            membership = membership.filter(PubkeyDevice.nostr_pubkey == identity)
        removed = membership.delete()

        if device is not None and (identity is None or device.nostr_pubkey == identity):
            self.db.delete(device)

        self.db.commit()
        logger.info(f"🗑️ Unregistered device token {short(token, 20)} ({removed} set entries removed)")

    def tokens_for(self, identity: str) -> Set[str]:
        rows = self.db.execute(
            select(PubkeyDevice.token).where(PubkeyDevice.nostr_pubkey == identity)
        ).scalars()
        return set(rows)

    def prune_tokens(self, identity: str, tokens: Iterable[str]) -> int:
        """Remove exactly ``tokens`` from ``identity``'s set and drop their device records.

        Tokens added to the set meanwhile are left alone, and so are device
        records that have since moved to another identity.
        """
        tokens = list(set(tokens))
        if not tokens:
            return 0

        removed = self.db.query(PubkeyDevice).filter(
            PubkeyDevice.nostr_pubkey == identity,
            PubkeyDevice.token.in_(tokens),
        ).delete()

        self.db.query(Device).filter(
            Device.nostr_pubkey == identity,
            Device.token.in_(tokens),
        ).delete()

        self.db.commit()
        return removed

    def stale_device_tokens(self, retention: timedelta,
                            now: Optional[datetime] = None) -> Iterator[StaleDevice]:
        """Yield device records whose last activity is strictly older than ``now - retention``.

        ``now`` defaults to the current UTC time. The query runs on first
        iteration and its rows are read in full before anything is yielded,
        so callers may commit or roll back between items.
        """
        cutoff = (now or datetime.now(timezone.utc)) - retention
        rows = self.db.execute(
            select(Device.token, Device.nostr_pubkey, Device.last_active)
            .where(Device.last_active < cutoff)
            .order_by(Device.last_active)
        ).all()
        for row in rows:
            yield StaleDevice(token=row.token, nostr_pubkey=row.nostr_pubkey, last_active=row.last_active)

    def ping(self) -> bool:
        self.db.execute(text("SELECT 1"))
        return True
