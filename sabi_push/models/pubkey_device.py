from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from ..database import Base

class PubkeyDevice(Base):
    """One row per token in an identity's token set."""
    __tablename__ = "pubkey_devices"
    __table_args__ = (UniqueConstraint("nostr_pubkey", "token", name="uq_pubkey_devices_pubkey_token"),)

    id = Column(Integer, primary_key=True)
    nostr_pubkey = Column(String, nullable=False, index=True)
    token = Column(String, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
