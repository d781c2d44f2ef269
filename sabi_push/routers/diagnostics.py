from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from ..config import settings
from ..dependencies import get_directory, get_gateway
from ..services.push_gateway import PushGateway
from ..services.token_directory import TokenDirectory
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


def _presence(value):
    return "set" if value else "missing"


@router.get("/health")
def health():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.VERSION,
    }


@router.get("/debug")
def debug(directory: TokenDirectory = Depends(get_directory), gateway: PushGateway = Depends(get_gateway)):
    """Report whether Firebase credentials are configured and the database is reachable"""
    status = {
        "firebase": {
            "credentialsPath": _presence(settings.FIREBASE_CREDENTIALS_PATH),
            "projectId": _presence(settings.FIREBASE_PROJECT_ID),
            "clientEmail": _presence(settings.FIREBASE_CLIENT_EMAIL),
            "privateKey": _presence(settings.FIREBASE_PRIVATE_KEY),
            "messagingInitialized": gateway.configured,
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    try:
        directory.ping()
        status["database"] = "connected"
    except Exception as e:
        logger.error(f"❌ Database check failed: {e}")
        status["database"] = "error"

    return status
