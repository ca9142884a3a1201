import asyncio
import logging
import time
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from parity.api.deps import get_token_settings
from parity.api.v1.auth import router as auth_router
from parity.api.v1.users import router as user_router
from parity.core.config import get_settings
from parity.core.database import AsyncSessionLocal
from parity.core.exceptions import AppException
from parity.tasks.cleanup_tokens import cleanup_expired_tokens


settings = get_settings()

# Logger setup
logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)

CLEANUP_INTERVAL_SECONDS = 86400


async def periodic_cleanup():
    while True:
        await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
        try:
            async with AsyncSessionLocal() as session:
                await cleanup_expired_tokens(session)
        except Exception:
            logger.exception("Token cleanup failed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Missing or shared signing secrets stop the process here, not per request
    get_token_settings()
    logger.info("Starting up the %s API...", settings.PROJECT_NAME)
    task = asyncio.create_task(periodic_cleanup())
    app.state.cleanup_task = task
    yield
    task.cancel()
    with suppress(asyncio.CancelledError):
        await task
    logger.info("Shutting down the %s API...", settings.PROJECT_NAME)


app = FastAPI(lifespan=lifespan, title=f"{settings.PROJECT_NAME} API", version="1.0.0")

# CORS setup

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Rate Limiting setup
limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Include API routers
app.include_router(auth_router, prefix="/api/v1", tags=["Authentication"])
app.include_router(user_router, prefix="/api/v1/users", tags=["Users"])


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "%s %s status=%d duration=%.3fs",
        request.method,
        request.url.path,
        response.status_code,
        time.perf_counter() - start,
    )
    return response


# Global exception handler
@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
        detail = "Internal server error"
    else:
        detail = exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": detail}
    )


@app.get("/")
def read_root():
    return {"status": "Green", "message": f"The {settings.PROJECT_NAME} API is alive!"}
