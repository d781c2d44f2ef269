from pydantic import BaseModel
from typing import Optional

# Every field is optional at the schema level; required ones are checked by the
# handlers so a missing field answers 400 with a readable message.

class PaymentEvent(BaseModel):
    nostrPubkey: Optional[str] = None
    amountSats: Optional[int] = None
    amountNaira: Optional[float] = None
    paymentHash: Optional[str] = None
    description: Optional[str] = None
    recipientName: Optional[str] = None
    timestamp: Optional[str] = None

class PaymentFailedEvent(BaseModel):
    nostrPubkey: Optional[str] = None
    amountSats: Optional[int] = None
    amountNaira: Optional[float] = None
    errorMessage: Optional[str] = None
    recipientName: Optional[str] = None

class P2PTradeEvent(BaseModel):
    nostrPubkey: Optional[str] = None
    tradeId: Optional[str] = None
    eventType: Optional[str] = None
    amount: Optional[float] = None
    counterpartyName: Optional[str] = None

class DirectMessageEvent(BaseModel):
    nostrPubkey: Optional[str] = None
    senderName: Optional[str] = None
    senderPubkey: Optional[str] = None
    preview: Optional[str] = None

class ZapEvent(BaseModel):
    nostrPubkey: Optional[str] = None
    amountSats: Optional[int] = None
    senderName: Optional[str] = None
    senderPubkey: Optional[str] = None
    message: Optional[str] = None
    eventId: Optional[str] = None

class VtuOrderEvent(BaseModel):
    nostrPubkey: Optional[str] = None
    orderId: Optional[str] = None
    orderType: Optional[str] = None  # airtime / data / electricity
    status: Optional[str] = None  # complete / failed
    amount: Optional[float] = None
    phoneNumber: Optional[str] = None

class TestNotificationRequest(BaseModel):
    nostrPubkey: Optional[str] = None
    title: Optional[str] = None
    body: Optional[str] = None
    type: Optional[str] = None
