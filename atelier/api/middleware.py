"""Request logging middleware"""

import logging
import time
from fastapi import Request

logger = logging.getLogger("atelier.access")


async def log_api_requests(request: Request, call_next):
    """Log method, path, status and duration of every /api request"""
    if not request.url.path.startswith("/api"):
        return await call_next(request)

    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = int((time.perf_counter() - start) * 1000)

    line = f"{request.method} {request.url.path} {response.status_code} in {duration_ms}ms"
    if response.status_code >= 400:
        logger.warning(line)
    else:
        logger.info(line)
    return response
