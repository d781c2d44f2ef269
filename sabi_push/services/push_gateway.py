import logging
from pathlib import Path
from typing import Optional

import firebase_admin
from firebase_admin import credentials, exceptions, messaging

from ..schemas.notification import NotificationPayload

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL = "sabi_wallet_default"

# Android notification channel per payload type
CHANNEL_FOR_TYPE = {
    "payment_received": "sabi_wallet_payments",
    "payment_sent": "sabi_wallet_payments",
    "payment_failed": "sabi_wallet_payments",
    "p2p_trade_started": "sabi_wallet_p2p",
    "p2p_payment_marked": "sabi_wallet_p2p",
    "p2p_payment_confirmed": "sabi_wallet_p2p",
    "p2p_funds_released": "sabi_wallet_p2p",
    "p2p_trade_cancelled": "sabi_wallet_p2p",
    "p2p_trade_disputed": "sabi_wallet_p2p",
    "p2p_new_message": "sabi_wallet_p2p",
    "p2p_new_inquiry": "sabi_wallet_p2p",
    "p2p_update": "sabi_wallet_p2p",
    "zap_received": "sabi_wallet_social",
    "dm_received": "sabi_wallet_social",
    "vtu_order_complete": "sabi_wallet_vtu",
    "vtu_order_failed": "sabi_wallet_vtu",
}

# Errors meaning the token itself is dead; anything else may be transient
INVALID_TOKEN_ERRORS = (
    messaging.UnregisteredError,
    messaging.SenderIdMismatchError,
    exceptions.InvalidArgumentError,
)


class GatewayNotConfiguredError(RuntimeError):
    pass


def channel_for_type(notification_type: Optional[str]) -> str:
    return CHANNEL_FOR_TYPE.get(notification_type or "", DEFAULT_CHANNEL)


def is_token_invalid(exc: BaseException) -> bool:
    return isinstance(exc, INVALID_TOKEN_ERRORS)


class PushGateway:
    """Single-token sender on top of the Firebase Admin SDK."""

    def __init__(self, app: Optional[firebase_admin.App] = None):
        self.app = app

    @property
    def configured(self) -> bool:
        return self.app is not None

    @classmethod
    def from_settings(cls, settings) -> "PushGateway":
        """Initialize Firebase from a service account file or discrete env vars.

        Missing credentials are not an error: the gateway comes back
        unconfigured and the relay keeps serving registrations.
        """
        try:
            if firebase_admin._apps:
                logger.info("✅ Firebase Admin SDK already initialized")
                return cls(firebase_admin.get_app())

            cred = None
            if settings.FIREBASE_CREDENTIALS_PATH:
                path = Path(settings.FIREBASE_CREDENTIALS_PATH)
                if path.exists():
                    cred = credentials.Certificate(str(path))
                else:
                    logger.warning(f"⚠️ Firebase service account file not found at {path}")

            if cred is None and settings.FIREBASE_PROJECT_ID and settings.FIREBASE_CLIENT_EMAIL \
                    and settings.FIREBASE_PRIVATE_KEY:
                cred = credentials.Certificate({
                    "type": "service_account",
                    "project_id": settings.FIREBASE_PROJECT_ID,
                    "client_email": settings.FIREBASE_CLIENT_EMAIL,
                    # Keys pasted into env vars carry literal \n sequences
                    "private_key": settings.FIREBASE_PRIVATE_KEY.replace("\\n", "\n"),
                    "token_uri": "https://oauth2.googleapis.com/token",
                })

            if cred is None:
                logger.warning("⚠️ Firebase credentials missing; push gateway not configured")
                return cls()

            app = firebase_admin.initialize_app(cred)
            logger.info("✅ Firebase Admin SDK initialized successfully")
            return cls(app)

        except (ValueError, exceptions.FirebaseError) as e:
            logger.error(f"❌ Error initializing Firebase: {e}")
            return cls()

    def build_message(self, token: str, notification: NotificationPayload) -> messaging.Message:
        # Ensure all data values are strings (FCM requirement)
        data = {"type": notification.type}
        data.update({k: str(v) if v is not None else "" for k, v in notification.data.items()})

        return messaging.Message(
            token=token,
            notification=messaging.Notification(
                title=notification.title,
                body=notification.body,
            ),
            data=data,
            android=messaging.AndroidConfig(
                priority="high",
                notification=messaging.AndroidNotification(
                    channel_id=channel_for_type(notification.type),
                    priority="high",
                    default_sound=True,
                    default_vibrate_timings=True,
                ),
            ),
            apns=messaging.APNSConfig(
                payload=messaging.APNSPayload(
                    aps=messaging.Aps(
                        alert=messaging.ApsAlert(
                            title=notification.title,
                            body=notification.body,
                        ),
                        sound="default",
                        badge=1,
                        content_available=True,
                    )
                )
            ),
        )

    def send(self, token: str, notification: NotificationPayload) -> str:
        """Send to one device token and return the FCM message id.

        Firebase errors propagate; see ``is_token_invalid`` for which ones mean
        the token should be dropped.
        """
        if not self.configured:
            raise GatewayNotConfiguredError("Firebase Admin SDK not initialized")

        message = self.build_message(token, notification)
        logger.debug(f"📤 Sending FCM: {notification.title} -> {token[:20]}...")
        return messaging.send(message, app=self.app)
