from fastapi import APIRouter, Depends, HTTPException
from ..schemas.event import (
    PaymentEvent,
    PaymentFailedEvent,
    P2PTradeEvent,
    DirectMessageEvent,
    ZapEvent,
    VtuOrderEvent,
    TestNotificationRequest,
)
from ..schemas.notification import WebhookResponse
from ..dependencies import get_directory, get_gateway, require_configured
from ..services.formatter import EventFamily, format_notification
from ..services.notification_service import send_push_to_user
from ..services.push_gateway import PushGateway
from ..services.token_directory import TokenDirectory
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


def _require(payload, *names):
    missing = [name for name in names if not getattr(payload, name)]
    if missing:
        if len(names) == 1:
            detail = f"{names[0]} is required"
        else:
            detail = f"{', '.join(names[:-1])} and {names[-1]} are required"
        raise HTTPException(status_code=400, detail=detail)


def _notify(family: EventFamily, payload, directory: TokenDirectory, gateway: PushGateway) -> WebhookResponse:
    require_configured(gateway)
    notification = format_notification(family, payload.model_dump())
    result = send_push_to_user(directory, gateway, payload.nostrPubkey, notification)
    logger.info(f"{family.value} notification sent: {result.succeeded} success, {result.failed} failed")
    return WebhookResponse(success=True, sent=result.succeeded, failed=result.failed)


@router.post("/webhook/payment", response_model=WebhookResponse)
def payment_received(payload: PaymentEvent, directory: TokenDirectory = Depends(get_directory),
                     gateway: PushGateway = Depends(get_gateway)):
    """Lightning payment received (called by the payment backend)"""
    _require(payload, "nostrPubkey", "amountSats")
    return _notify(EventFamily.PAYMENT_RECEIVED, payload, directory, gateway)


@router.post("/webhook/payment-sent", response_model=WebhookResponse)
def payment_sent(payload: PaymentEvent, directory: TokenDirectory = Depends(get_directory),
                 gateway: PushGateway = Depends(get_gateway)):
    _require(payload, "nostrPubkey", "amountSats")
    return _notify(EventFamily.PAYMENT_SENT, payload, directory, gateway)


@router.post("/webhook/payment-failed", response_model=WebhookResponse)
def payment_failed(payload: PaymentFailedEvent, directory: TokenDirectory = Depends(get_directory),
                   gateway: PushGateway = Depends(get_gateway)):
    _require(payload, "nostrPubkey", "amountSats")
    return _notify(EventFamily.PAYMENT_FAILED, payload, directory, gateway)


@router.post("/webhook/p2p", response_model=WebhookResponse)
def p2p_trade(payload: P2PTradeEvent, directory: TokenDirectory = Depends(get_directory),
              gateway: PushGateway = Depends(get_gateway)):
    """P2P trade state change (called by the escrow service)"""
    _require(payload, "nostrPubkey", "tradeId", "eventType")
    return _notify(EventFamily.P2P_TRADE, payload, directory, gateway)


@router.post("/webhook/dm", response_model=WebhookResponse)
def direct_message(payload: DirectMessageEvent, directory: TokenDirectory = Depends(get_directory),
                   gateway: PushGateway = Depends(get_gateway)):
    _require(payload, "nostrPubkey")
    return _notify(EventFamily.DM, payload, directory, gateway)


@router.post("/webhook/zap", response_model=WebhookResponse)
def zap(payload: ZapEvent, directory: TokenDirectory = Depends(get_directory),
        gateway: PushGateway = Depends(get_gateway)):
    _require(payload, "nostrPubkey")
    return _notify(EventFamily.ZAP, payload, directory, gateway)


@router.post("/webhook/vtu", response_model=WebhookResponse)
def vtu_order(payload: VtuOrderEvent, directory: TokenDirectory = Depends(get_directory),
              gateway: PushGateway = Depends(get_gateway)):
    """Airtime / data / electricity order finished"""
    _require(payload, "nostrPubkey", "orderId", "orderType", "status")
    return _notify(EventFamily.VTU_ORDER, payload, directory, gateway)


@router.post("/test-notification", response_model=WebhookResponse)
def test_notification(payload: TestNotificationRequest, directory: TokenDirectory = Depends(get_directory),
                      gateway: PushGateway = Depends(get_gateway)):
    """Send a test notification (for debugging)"""
    _require(payload, "nostrPubkey")
    return _notify(EventFamily.TEST, payload, directory, gateway)
