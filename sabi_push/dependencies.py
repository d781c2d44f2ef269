from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from .database import SessionLocal
from .services.push_gateway import PushGateway
from .services.token_directory import TokenDirectory


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_directory(db: Session = Depends(get_db)) -> TokenDirectory:
    return TokenDirectory(db)


def get_gateway(request: Request) -> PushGateway:
    """Return the process-wide gateway created on startup (unconfigured if missing)."""
    gateway = getattr(request.app.state, "gateway", None)
    return gateway if gateway is not None else PushGateway()


def require_configured(gateway: PushGateway) -> None:
    if not gateway.configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Push gateway not configured",
        )
