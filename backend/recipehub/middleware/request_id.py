"""
RecipeHub Backend — Request ID Middleware
===========================================

What:  Gives every request a correlation id and echoes it in X-Request-ID.
How:   Reuses a client-supplied X-Request-ID when it looks sane (printable,
       at most 64 characters), otherwise generates a short uuid4 prefix.
       The id is stored in a ContextVar so loggers, exception handlers and
       the auth dependency can tag their output without access to the Request.
       Uncaught errors from downstream are answered here with the shared
       500 body, so the id still reaches the client.
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

REQUEST_ID_HEADER = "X-Request-ID"
MAX_CLIENT_ID_LENGTH = 64

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again or contact support."

logger = logging.getLogger(__name__)

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def accept_client_id(value: str) -> bool:
    return 0 < len(value) <= MAX_CLIENT_ID_LENGTH and value.isprintable()


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        supplied = request.headers.get(REQUEST_ID_HEADER, "")
        rid = supplied if accept_client_id(supplied) else new_request_id()

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        except Exception as exc:
            # Layers outside this one run without request_id_var set
            logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
            response = JSONResponse(
                status_code=500,
                content={
                    "error": "internal_server_error",
                    "message": UNEXPECTED_ERROR_MESSAGE,
                    "request_id": rid,
                },
            )
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
