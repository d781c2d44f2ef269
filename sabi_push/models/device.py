from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from ..database import Base

class Device(Base):
    __tablename__ = "devices"

    token = Column(String, primary_key=True)  # FCM registration token
    nostr_pubkey = Column(String, nullable=False, index=True)  # owning identity
    platform = Column(String, default="android")  # android / ios / web
    app_version = Column(String, default="unknown")
    registered_at = Column(DateTime(timezone=True), server_default=func.now())
    last_active = Column(DateTime(timezone=True), server_default=func.now(), index=True)
