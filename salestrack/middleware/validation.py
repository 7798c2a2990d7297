"""Request body size and JSON structure checks."""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
import structlog
import orjson

log = structlog.get_logger()


def _too_large(max_size: int, received: int) -> JSONResponse:
    return JSONResponse(
        status_code=413,
        content={
            "error": "PayloadTooLarge",
            "message": f"Request payload exceeds maximum size of {max_size} bytes",
            "max_size": max_size,
            "received_size": received,
        },
    )


class PayloadValidationMiddleware(BaseHTTPMiddleware):
    """Rejects oversized bodies (413) and malformed JSON (400) before routing."""

    def __init__(self, app, max_size: int):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next):
        if request.method not in ("POST", "PUT", "PATCH"):
            return await call_next(request)

        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_size:
            log.warning("payload.too_large", size=int(content_length), max_size=self.max_size)
            return _too_large(self.max_size, int(content_length))

        if request.headers.get("content-type", "").startswith("application/json"):
            # body is cached on the request and replayed to the route
            body = await request.body()
            if len(body) > self.max_size:
                log.warning("payload.too_large", size=len(body), max_size=self.max_size)
                return _too_large(self.max_size, len(body))

            if body:
                try:
                    orjson.loads(body)
                except orjson.JSONDecodeError as e:
                    log.warning("invalid.json", error=str(e))
                    return JSONResponse(
                        status_code=400,
                        content={
                            "error": "InvalidJSON",
                            "message": "Request body is not valid JSON",
                            "detail": str(e),
                        },
                    )

        return await call_next(request)
