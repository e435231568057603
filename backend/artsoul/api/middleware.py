import time
import logging
import uuid
from typing import Callable
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with a short id and logs its outcome and duration"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"{request_id} {request.method} {request.url.path} failed after "
                f"{time.perf_counter() - started:.3f}s: {e}",
                exc_info=True
            )
            raise

        duration = time.perf_counter() - started
        logger.info(
            f"{request_id} {request.method} {request.url.path} -> "
            f"{response.status_code} in {duration:.3f}s"
        )
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response


def setup_middleware(app: FastAPI) -> None:
    from ..config import settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time"]
    )
    app.add_middleware(RequestLoggingMiddleware)

    logger.info("Middleware setup complete")
