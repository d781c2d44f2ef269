from pydantic import BaseModel
from typing import Optional

class DeviceRegister(BaseModel):
    fcmToken: Optional[str] = None
    nostrPubkey: Optional[str] = None
    platform: Optional[str] = None
    appVersion: Optional[str] = None

class DeviceUnregister(BaseModel):
    fcmToken: Optional[str] = None
    nostrPubkey: Optional[str] = None
