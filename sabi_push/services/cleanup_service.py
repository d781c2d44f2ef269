import logging
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session
from .token_directory import TokenDirectory, short

logger = logging.getLogger(__name__)


def cleanup_stale_tokens(db: Session, retention_days: int = 30, now: Optional[datetime] = None):
    """Delete devices inactive for longer than ``retention_days``.

    Each stale token is pruned from its owner's token set on its own; a
    failure for one pubkey is logged and the sweep moves on.
    """
    directory = TokenDirectory(db)
    removed = 0
    failed = 0

    for stale in directory.stale_device_tokens(timedelta(days=retention_days), now=now):
        try:
            directory.prune_tokens(stale.nostr_pubkey, [stale.token])
            removed += 1
        except Exception as e:
            db.rollback()
            failed += 1
            logger.error(f"❌ Error removing stale token for {short(stale.nostr_pubkey)}: {e}")

    if removed == 0 and failed == 0:
        logger.info("No stale devices to clean up")
    else:
        logger.info(f"🧹 Cleaned up {removed} stale device tokens ({failed} failed)")

    return {"removed": removed, "failed": failed}
