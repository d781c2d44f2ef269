from pydantic import BaseModel, Field
from typing import Dict, Set

class NotificationPayload(BaseModel):
    title: str
    body: str
    type: str
    data: Dict[str, str] = Field(default_factory=dict)

class DeliveryResult(BaseModel):
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    pruned_tokens: Set[str] = Field(default_factory=set)

class WebhookResponse(BaseModel):
    success: bool = True
    sent: int = 0
    failed: int = 0
