"""
APIRouter with request logging

Every route built from this router logs the request line and the time spent,
and logs unhandled errors with their traceback before they propagate.
"""

import logging
import time
from typing import Any, Callable, Coroutine

from fastapi import APIRouter as FastAPIRouter, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute

logger = logging.getLogger("app.request")


class LoggedRoute(APIRoute):
    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        handler = super().get_route_handler()

        async def logged_handler(request: Request) -> Response:
            started = time.perf_counter()
            logger.debug("[REQUEST RECEIVED] %s %s", request.method, request.url.path)
            try:
                response = await handler(request)
            except (HTTPException, RequestValidationError):
                raise
            except Exception:
                logger.exception("[REQUEST FAILED] %s %s", request.method, request.url.path)
                raise
            logger.info(
                "%s %s -> %s (%.1f ms)",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - started) * 1000,
            )
            return response

        return logged_handler


class APIRouter(FastAPIRouter):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("route_class", LoggedRoute)
        super().__init__(*args, **kwargs)
