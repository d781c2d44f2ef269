"""
Request logging middleware
"""
from fastapi import Request
from typing import Callable
import logging
import time

logger = logging.getLogger(__name__)

# Polled by uptime checks; logged at DEBUG to keep the webhook trail readable
QUIET_PATHS = {"/health", "/"}


async def logging_middleware(request: Request, call_next: Callable):
    """
    Log one line per request with status and duration, and expose the
    duration as X-Process-Time. Failures are logged by the app's exception
    handlers, not here.
    """
    start_time = time.time()
    response = await call_next(request)
    duration = (time.time() - start_time) * 1000  # ms

    client_ip = request.client.host if request.client else "unknown"
    status_emoji = "✅" if response.status_code < 400 else "❌"
    level = logging.DEBUG if request.url.path in QUIET_PATHS else logging.INFO
    logger.log(
        level,
        f"{status_emoji} {request.method} {request.url.path} from {client_ip} "
        f"→ {response.status_code} ({duration:.0f}ms)",
    )

    response.headers["X-Process-Time"] = f"{duration:.2f}ms"
    return response
