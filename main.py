import uvicorn
import asyncio
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from cachetools import TTLCache

from core.config import PORT, FRONTEND_URL, ADMIN_API_TOKEN
from core.logger import setup_logger
from database.db import init_db, dispose_engine

import run_youtube
import run_subscribers

logger = setup_logger("GATEWAY")

RATE_WINDOW_SECONDS = 5
RATE_LIMIT_PER_WINDOW = 50
MAX_REQUEST_SIZE = 1_000_000  # 1MB

# ip -> (window_start, count); a write does not move window_start
request_rate = TTLCache(maxsize=500000, ttl=RATE_WINDOW_SECONDS)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}


async def rate_limit(request: Request):
    client_ip = request.client.host if request.client else "unknown"
    now = request_rate.timer()
    window_start, count = request_rate.get(client_ip, (now, 0))
    if now - window_start >= RATE_WINDOW_SECONDS:
        window_start, count = now, 0
    count += 1
    request_rate[client_ip] = (window_start, count)
    return count <= RATE_LIMIT_PER_WINDOW


async def check_request_size(request: Request):
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > MAX_REQUEST_SIZE:
        return False
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 SITE BACKEND STARTING")
    if not ADMIN_API_TOKEN:
        logger.critical("⚠️ ADMIN_API_TOKEN is not set! Admin routes are disabled.")

    await init_db()

    try:
        await run_youtube.start_service()
        logger.info("✅ YOUTUBE SYNC started")
    except Exception as e:
        logger.error(f"YOUTUBE SYNC failed to start: {e}", exc_info=True)

    yield

    logger.info("🛑 SITE BACKEND SHUTDOWN")
    try:
        await asyncio.wait_for(run_youtube.stop_service(), timeout=10.0)
    except asyncio.TimeoutError:
        logger.error("⚠️ Force closing: YouTube sync refused to shut down in time.")
    await dispose_engine()


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def global_protection(request: Request, call_next):
    if not await check_request_size(request):
        return JSONResponse({"error": "Payload too large. Max 1MB."}, status_code=413)

    if not await rate_limit(request):
        return JSONResponse({"error": "Rate Limit Exceeded."}, status_code=429)

    response = await call_next(request)

    for header, value in SECURITY_HEADERS.items():
        response.headers[header] = value

    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse({"error": "An internal error occurred"}, status_code=500)


app.include_router(run_youtube.router)
app.include_router(run_subscribers.router)


@app.get("/health")
async def health():
    return JSONResponse({"status": "ok", "message": "Server is running"})


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=PORT)
