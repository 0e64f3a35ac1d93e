from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.core.config import Settings
from app.core.context import AppContext
from app.core.errors import BookingAppError
from app.core.security import TokenService
from app.api import auth, bookings
from app.core.logger import setup_logging, logger
from app.services.db_service import BookingStore
from app.services.notification_service import BookingNotifier, Mailer, NullMailer, SmtpMailer
from contextlib import asynccontextmanager
from datetime import datetime
import secrets
from typing import Optional


def build_mailer(settings: Settings) -> Mailer:
    if not settings.EMAIL_USER or not settings.EMAIL_PASS:
        logger.warning("⚠️ EMAIL_USER/EMAIL_PASS missing, booking emails are disabled")
        return NullMailer()
    return SmtpMailer(
        settings.SMTP_SERVER,
        settings.SMTP_PORT,
        settings.EMAIL_USER,
        settings.EMAIL_PASS,
        sender_name=settings.BUSINESS_NAME,
    )


def signing_secret(settings: Settings) -> str:
    """
    The configured JWT_SECRET, or a per-process random one in development.
    Outside development a missing secret refuses to start.
    """
    if settings.JWT_SECRET:
        return settings.JWT_SECRET
    if settings.ENVIRONMENT != "development":
        raise RuntimeError("JWT_SECRET must be set outside development")
    logger.warning("⚠️ JWT_SECRET missing, using a random per-process secret (tokens die on restart)")
    return secrets.token_urlsafe(32)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    ctx: AppContext = app.state.context
    logger.info(f"🚀 Starting {ctx.settings.PROJECT_NAME}")
    if ctx.store is None:
        try:
            ctx.store = await BookingStore.connect(ctx.settings)
        except Exception as e:
            logger.critical(f"❌ Document store connection error: {e}")
            raise
    yield
    # Shutdown
    logger.info("🛑 Shutting down backend")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[BookingStore] = None,
    mailer: Optional[Mailer] = None,
) -> FastAPI:
    """
    Builds the application with explicitly injected handles.
    When no store is given, one is connected during startup.
    """
    settings = settings or Settings()
    setup_logging(settings.LOG_LEVEL, settings.ERROR_LOG_FILE)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="0.1.0",
        lifespan=lifespan
    )
    app.state.context = AppContext(
        settings=settings,
        tokens=TokenService(signing_secret(settings), settings.TOKEN_TTL_HOURS),
        notifier=BookingNotifier(mailer or build_mailer(settings), settings.BUSINESS_NAME, settings.ADMIN_EMAIL),
        store=store,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(BookingAppError)
    async def booking_error_handler(request: Request, exc: BookingAppError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info(f"📥 Invalid request body on {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"message": "Invalid request body"})

    # Global Exception Handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.opt(exception=exc).error(f"🔥 UNHANDLED ERROR on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"message": "Server error"})

    # Include routers
    app.include_router(auth.router, tags=["Auth"])
    app.include_router(bookings.router, prefix=settings.API_PREFIX, tags=["Bookings"])

    @app.get("/health")
    async def health_check():
        return {
            "status": "Server is running properly",
            "environment": settings.ENVIRONMENT,
            "timestamp": datetime.now().isoformat(),
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=app.state.context.settings.PORT)
