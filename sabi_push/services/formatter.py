"""
Notification templates for every event family the relay understands.

``format_notification`` is the only entry point the routers use. Families and
payload types are enumerated here so nothing downstream has to guess them.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from ..schemas.notification import NotificationPayload

MAX_ERROR_LENGTH = 100


class EventFamily(str, Enum):
    PAYMENT_RECEIVED = "payment_received"
    PAYMENT_SENT = "payment_sent"
    PAYMENT_FAILED = "payment_failed"
    P2P_TRADE = "p2p_trade"
    DM = "dm"
    ZAP = "zap"
    VTU_ORDER = "vtu_order"
    TEST = "test"


class NotificationType(str, Enum):
    PAYMENT_RECEIVED = "payment_received"
    PAYMENT_SENT = "payment_sent"
    PAYMENT_FAILED = "payment_failed"
    P2P_TRADE_STARTED = "p2p_trade_started"
    P2P_PAYMENT_MARKED = "p2p_payment_marked"
    P2P_PAYMENT_CONFIRMED = "p2p_payment_confirmed"
    P2P_FUNDS_RELEASED = "p2p_funds_released"
    P2P_TRADE_CANCELLED = "p2p_trade_cancelled"
    P2P_TRADE_DISPUTED = "p2p_trade_disputed"
    P2P_NEW_MESSAGE = "p2p_new_message"
    P2P_NEW_INQUIRY = "p2p_new_inquiry"
    P2P_UPDATE = "p2p_update"
    DM_RECEIVED = "dm_received"
    ZAP_RECEIVED = "zap_received"
    VTU_ORDER_COMPLETE = "vtu_order_complete"
    VTU_ORDER_FAILED = "vtu_order_failed"
    TEST = "test"
    UPDATE = "update"


VTU_LABELS = {
    "airtime": "Airtime",
    "data": "Data",
    "electricity": "Electricity",
}


def format_amount(value: Any) -> Optional[str]:
    """
    Render a number with thousands separators.

    Examples:
        1500 -> "1,500"
        500.0 -> "500"
        1234.5 -> "1,234.50"
        "2000" -> "2,000"
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = float(value.replace(",", ""))
        except ValueError:
            return value
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int):
        return f"{value:,}"
    return f"{value:,.2f}"


def _text(value: Any) -> str:
    # FCM data values must be strings
    return "" if value is None else str(value)


def _naira(fields: Mapping[str, Any]) -> str:
    naira = format_amount(fields.get("amountNaira"))
    return f" (₦{naira})" if naira else ""


def _sats(fields: Mapping[str, Any]) -> str:
    return format_amount(fields.get("amountSats")) or "0"


def _display_name(fields: Mapping[str, Any]) -> Optional[str]:
    if fields.get("senderName"):
        return fields["senderName"]
    if fields.get("senderPubkey"):
        return fields["senderPubkey"][:8]
    return None


def _payment_received(fields):
    body = f"You received {_sats(fields)} sats{_naira(fields)}"
    if fields.get("description"):
        body += f"\n{fields['description']}"
    return NotificationPayload(
        title="⚡ Payment Received!",
        body=body,
        type=NotificationType.PAYMENT_RECEIVED.value,
        data={
            "amountSats": _text(fields.get("amountSats")),
            "amountNaira": _text(fields.get("amountNaira")),
            "paymentHash": _text(fields.get("paymentHash")),
            "timestamp": fields.get("timestamp") or datetime.now(timezone.utc).isoformat(),
        },
    )


def _payment_sent(fields):
    body = f"You sent {_sats(fields)} sats{_naira(fields)}"
    if fields.get("recipientName"):
        body += f" to {fields['recipientName']}"
    return NotificationPayload(
        title="✅ Payment Sent",
        body=body,
        type=NotificationType.PAYMENT_SENT.value,
        data={
            "amountSats": _text(fields.get("amountSats")),
            "amountNaira": _text(fields.get("amountNaira")),
            "paymentHash": _text(fields.get("paymentHash")),
        },
    )


def _payment_failed(fields):
    body = f"Failed to send {_sats(fields)} sats{_naira(fields)}"
    if fields.get("recipientName"):
        body += f" to {fields['recipientName']}"
    error_message = fields.get("errorMessage")
    if error_message:
        if len(error_message) > MAX_ERROR_LENGTH:
            error_message = error_message[:MAX_ERROR_LENGTH] + "..."
        body += f"\nError: {error_message}"
    return NotificationPayload(
        title="❌ Payment Failed",
        body=body,
        type=NotificationType.PAYMENT_FAILED.value,
        data={
            "amountSats": _text(fields.get("amountSats")),
            "errorMessage": _text(fields.get("errorMessage")),
        },
    )


def _p2p_templates(fields):
    who = fields.get("counterpartyName")
    amount = format_amount(fields.get("amount"))
    return {
        "trade_started": (
            "🔄 New Trade Started",
            (f"{who} started a trade with you" if who else "A new trade has started")
            + (f" for ₦{amount}" if amount else ""),
            NotificationType.P2P_TRADE_STARTED,
        ),
        "payment_marked": (
            "💰 Payment Marked",
            f"Buyer has marked payment as sent{f' for ₦{amount}' if amount else ''}. Please verify.",
            NotificationType.P2P_PAYMENT_MARKED,
        ),
        "payment_confirmed": (
            "✅ Payment Confirmed",
            "Seller has confirmed receiving your payment.",
            NotificationType.P2P_PAYMENT_CONFIRMED,
        ),
        "funds_released": (
            "🎉 Trade Complete!",
            f"Funds have been released{f'. You received ₦{amount}' if amount else ''}",
            NotificationType.P2P_FUNDS_RELEASED,
        ),
        "trade_cancelled": (
            "❌ Trade Cancelled",
            "The trade has been cancelled.",
            NotificationType.P2P_TRADE_CANCELLED,
        ),
        "trade_disputed": (
            "⚠️ Trade Disputed",
            "A dispute has been opened on this trade.",
            NotificationType.P2P_TRADE_DISPUTED,
        ),
        "new_message": (
            "💬 New Message",
            f"{who} sent you a message" if who else "You have a new message in your trade",
            NotificationType.P2P_NEW_MESSAGE,
        ),
        "new_inquiry": (
            "📩 New Inquiry",
            f"{who} is interested in your offer" if who else "Someone is interested in your offer",
            NotificationType.P2P_NEW_INQUIRY,
        ),
    }


def _p2p_trade(fields):
    event_type = fields.get("eventType") or ""
    template = _p2p_templates(fields).get(event_type)
    if template is None:
        # Unknown trade events still reach the user instead of being dropped
        template = ("🔔 P2P Update", f"Trade update: {event_type}", NotificationType.P2P_UPDATE)
    title, body, notification_type = template
    return NotificationPayload(
        title=title,
        body=body,
        type=notification_type.value,
        data={
            "eventType": event_type,
            "tradeId": _text(fields.get("tradeId")),
        },
    )


def _dm(fields):
    sender = _display_name(fields)
    return NotificationPayload(
        title=f"💬 {sender}" if sender else "💬 New Message",
        body=fields.get("preview") or "You have a new encrypted message",
        type=NotificationType.DM_RECEIVED.value,
        data={"senderPubkey": _text(fields.get("senderPubkey"))},
    )


def _zap(fields):
    zapper = _display_name(fields) or "Someone"
    message = fields.get("message")
    if message:
        body = f'{zapper} zapped you {_sats(fields)} sats: "{message}"'
    else:
        body = f"{zapper} zapped you {_sats(fields)} sats!"
    return NotificationPayload(
        title="⚡ Zap Received",
        body=body,
        type=NotificationType.ZAP_RECEIVED.value,
        data={
            "amountSats": _text(fields.get("amountSats") or 0),
            "senderPubkey": _text(fields.get("senderPubkey")),
            "eventId": _text(fields.get("eventId")),
        },
    )


def _vtu_order(fields):
    order_type = fields.get("orderType")
    label = VTU_LABELS.get(order_type, order_type or "VTU")
    amount = format_amount(fields.get("amount"))

    if fields.get("status") == "complete":
        title = f"✅ {label} Successful"
        body = f"Your {label} purchase{f' of ₦{amount}' if amount else ''} was successful"
        if fields.get("phoneNumber"):
            body += f" for {fields['phoneNumber']}"
        notification_type = NotificationType.VTU_ORDER_COMPLETE
    else:
        title = f"❌ {label} Failed"
        body = f"Your {label} purchase failed. Please try again."
        notification_type = NotificationType.VTU_ORDER_FAILED

    return NotificationPayload(
        title=title,
        body=body,
        type=notification_type.value,
        data={
            "orderId": _text(fields.get("orderId")),
            "orderType": _text(order_type),
            "status": _text(fields.get("status")),
        },
    )


def _test(fields):
    return NotificationPayload(
        title=fields.get("title") or "🔔 Test Notification",
        body=fields.get("body") or "Push notifications are working! 🎉",
        type=fields.get("type") or NotificationType.TEST.value,
        data={"timestamp": datetime.now(timezone.utc).isoformat()},
    )


def _generic_update(fields):
    return NotificationPayload(
        title="🔔 Sabi Wallet Update",
        body=fields.get("body") or "You have a new update",
        type=NotificationType.UPDATE.value,
        data={},
    )


FORMATTERS: Dict[EventFamily, Callable[[Mapping[str, Any]], NotificationPayload]] = {
    EventFamily.PAYMENT_RECEIVED: _payment_received,
    EventFamily.PAYMENT_SENT: _payment_sent,
    EventFamily.PAYMENT_FAILED: _payment_failed,
    EventFamily.P2P_TRADE: _p2p_trade,
    EventFamily.DM: _dm,
    EventFamily.ZAP: _zap,
    EventFamily.VTU_ORDER: _vtu_order,
    EventFamily.TEST: _test,
}


def format_notification(family, fields: Mapping[str, Any]) -> NotificationPayload:
    """Build the notification for ``family``; anything unrecognised becomes a generic update."""
    try:
        family = EventFamily(family)
    except ValueError:
        return _generic_update(fields)
    return FORMATTERS.get(family, _generic_update)(fields)
