from fastapi import APIRouter, Depends, HTTPException
from ..schemas.device import DeviceRegister, DeviceUnregister
from ..dependencies import get_directory
from ..services.token_directory import TokenDirectory
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

VALID_PLATFORMS = ["android", "ios", "web"]

@router.post("/register-device")
def register_device(payload: DeviceRegister, directory: TokenDirectory = Depends(get_directory)):
    """Register an FCM token for a Nostr pubkey (called on wallet create/restore)"""
    if not payload.fcmToken or not payload.nostrPubkey:
        raise HTTPException(status_code=400, detail="fcmToken and nostrPubkey are required")

    platform = payload.platform.lower() if payload.platform else None
    if platform and platform not in VALID_PLATFORMS:
        raise HTTPException(status_code=400, detail="Invalid platform")

    directory.register_token(
        payload.nostrPubkey,
        payload.fcmToken,
        platform=platform,
        app_version=payload.appVersion,
    )
    return {"success": True, "message": "Device registered"}


@router.post("/unregister-device")
def unregister_device(payload: DeviceUnregister, directory: TokenDirectory = Depends(get_directory)):
    """Unregister a device (logout / delete account)"""
    if not payload.fcmToken:
        raise HTTPException(status_code=400, detail="fcmToken is required")

    directory.unregister_token(payload.nostrPubkey, payload.fcmToken)
    return {"success": True, "message": "Device unregistered"}
