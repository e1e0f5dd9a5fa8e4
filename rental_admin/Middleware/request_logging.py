import logging
import os
import time
from typing import Optional
from fastapi import Request
from jose import JWTError
from rental_admin.config import settings
from rental_admin.services.auth_service import decode_access_token

logger = logging.getLogger("rental_admin.requests")

SKIP_PATHS = {"/healthy", "/docs", "/openapi.json", "/redoc"}


def _session_email(request: Request) -> Optional[str]:
    token = None
    auth_header = request.headers.get("authorization", "")
    if auth_header.lower().startswith("bearer "):
        token = auth_header.split(" ", 1)[1].strip()
    else:
        token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None
    try:
        return decode_access_token(token).get("sub")
    except JWTError:
        # Endpoint dependencies reject bad tokens; here it is only a label
        return None


async def request_logging_middleware(request: Request, call_next):
    """Log one line per request: who, what, outcome and duration.

    Disabled in the test environment.
    """
    if os.getenv("TESTING") == "true":
        return await call_next(request)

    path = request.url.path
    if path in SKIP_PATHS or path.startswith(settings.UPLOAD_URL_PREFIX + "/"):
        return await call_next(request)

    start_time = time.time()
    email = _session_email(request) or "-"
    try:
        response = await call_next(request)
    except Exception:
        duration_ms = int((time.time() - start_time) * 1000)
        logger.exception(
            "%s %s by %s failed after %dms", request.method, path, email, duration_ms
        )
        raise

    duration_ms = int((time.time() - start_time) * 1000)
    level = logging.WARNING if response.status_code >= 400 else logging.INFO
    logger.log(
        level,
        "%s %s by %s -> %s (%dms)",
        request.method,
        path,
        email,
        response.status_code,
        duration_ms,
    )
    return response
