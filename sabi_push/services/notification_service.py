import logging

from .push_gateway import PushGateway, is_token_invalid
from .token_directory import TokenDirectory, short
from ..schemas.notification import DeliveryResult, NotificationPayload

logger = logging.getLogger(__name__)


def send_push_to_user(directory: TokenDirectory, gateway: PushGateway, nostr_pubkey: str,
                      notification: NotificationPayload) -> DeliveryResult:
    """Send one notification to every device registered for a pubkey.

    Args:
        directory: Token directory bound to the current DB session
        gateway: Push gateway used for the per-token sends
        nostr_pubkey: Recipient identity
        notification: Formatted notification

    Returns:
        DeliveryResult with attempted/succeeded/failed counts and the tokens
        that were pruned because FCM reported them invalid. Transient send
        errors count as failed but the token is kept.
    """
    tokens = directory.tokens_for(nostr_pubkey)
    if not tokens:
        logger.info(f"⚠️ No tokens found for pubkey: {short(nostr_pubkey)}")
        return DeliveryResult()

    result = DeliveryResult(attempted=len(tokens))
    invalid_tokens = set()

    for token in tokens:
        try:
            message_id = gateway.send(token, notification)
            result.succeeded += 1
            logger.debug(f"FCM sent successfully: {message_id}")
        except Exception as exc:
            result.failed += 1
            if is_token_invalid(exc):
                invalid_tokens.add(token)
                logger.warning(f"🚫 Invalid token {short(token, 20)} for {short(nostr_pubkey)}: {exc}")
            else:
                logger.error(f"❌ Failed to send to token {short(token, 20)}: {exc}")

    if invalid_tokens:
        try:
            directory.prune_tokens(nostr_pubkey, invalid_tokens)
            result.pruned_tokens = invalid_tokens
            logger.info(f"🧹 Cleaned up {len(invalid_tokens)} invalid tokens for {short(nostr_pubkey)}")
        except Exception as e:
            # Delivery already happened; the next send will retry the cleanup
            directory.db.rollback()
            logger.error(f"Error cleaning up tokens for {short(nostr_pubkey)}: {e}", exc_info=True)

    logger.info(
        f"📊 Push sent to {short(nostr_pubkey)}: "
        f"{result.succeeded}/{result.attempted} successful, {result.failed} failed"
    )
    return result
