from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError
from firebase_admin import exceptions as firebase_exceptions
import logging
from .routers import devices, webhooks, diagnostics
from .middleware import logging_middleware
from apscheduler.schedulers.background import BackgroundScheduler
from sabi_push.config import settings
from sabi_push.database import SessionLocal
from sabi_push.services.cleanup_service import cleanup_stale_tokens
from sabi_push.services.push_gateway import PushGateway

# Scheduler is created here but started on application startup to avoid
# duplicate jobs when Uvicorn's auto-reload restarts the process.
scheduler = BackgroundScheduler(timezone=settings.SWEEP_TIMEZONE)


def run_cleanup():
    db = SessionLocal()
    try:
        cleanup_stale_tokens(db, retention_days=settings.STALE_TOKEN_RETENTION_DAYS)
    except Exception as e:
        logger.error(f"❌ Error in stale token cleanup job: {str(e)}")
        db.rollback()
    finally:
        db.close()


scheduler.add_job(run_cleanup, "cron", hour=settings.SWEEP_CRON_HOUR)  # daily, local to SWEEP_TIMEZONE


# Setup basic logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s %(name)s %(message)s',
)

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION)

# Mobile clients and webhook senders come from anywhere
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.middleware("http")(logging_middleware)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid {field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(SQLAlchemyError)
@app.exception_handler(firebase_exceptions.FirebaseError)
async def infrastructure_exception_handler(request: Request, exc: Exception):
    logger.error(f"❌ {request.method} {request.url.path} failed: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


app.include_router(devices.router, tags=["Devices"])
app.include_router(webhooks.router, tags=["Webhooks"])
app.include_router(diagnostics.router, tags=["Diagnostics"])

@app.get("/")
def root():
    return {"message": f"{settings.PROJECT_NAME} running"}


@app.on_event("startup")
def startup():
    app.state.gateway = PushGateway.from_settings(settings)
    if settings.ENABLE_SCHEDULER and not scheduler.running:
        scheduler.start()


@app.on_event("shutdown")
def stop_scheduler():
    try:
        if scheduler.running:
            scheduler.shutdown(wait=False)
    except Exception as e:
        logger.warning(f"Scheduler shutdown failed: {e}")


def run():
    """Serve the relay with uvicorn (``sabi-push-relay`` console script)."""
    import uvicorn

    uvicorn.run("sabi_push.main:app", host=settings.HOST, port=settings.PORT)
