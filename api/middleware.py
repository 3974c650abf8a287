"""Request-scoped middleware for API requests."""

from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns a unique request ID to every request."""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class StoreModeMiddleware(BaseHTTPMiddleware):
    """
    Reports the store mode on every response (X-Store-Mode: ONLINE/OFFLINE).

    Read after the request is handled, so a request that lost the connection
    already reports OFFLINE. Clients use it to show the offline banner.
    """

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        store = getattr(request.app.state, "store", None)
        if store is not None:
            response.headers["X-Store-Mode"] = store.mode.value
        return response
