# ruff: noqa: I001
import logging
import os
import time
import traceback
import uuid

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from linedesk_api.logging_config import configure_logging, request_id_var
from linedesk_api.admin import setup_admin
from linedesk_api.routers.dialogs import router as dialogs_router
from linedesk_api.routers.languages import router as languages_router
from linedesk_api.routers.projects import router as projects_router

configure_logging(
    service_name=os.getenv("LOG_SERVICE_NAME", "api"),
)

app = FastAPI(title="linedesk API")

REQUEST_ID_HEADER = "X-Request-ID"


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        start = time.perf_counter()
        try:
            response = await call_next(request)
            # Log 5xx responses too (even if handled downstream)
            if 500 <= response.status_code < 600:
                duration_ms = int((time.perf_counter() - start) * 1000)
                logging.getLogger(__name__).error(
                    "HTTP 5xx response",
                    extra={
                        "method": request.method,
                        "path": request.url.path,
                        "status_code": response.status_code,
                        "client": request.client.host if request.client else None,
                        "duration_ms": duration_ms,
                    },
                )
            return response
        except Exception as exc:  # noqa: BLE001 - we want to log all unhandled exceptions
            duration_ms = int((time.perf_counter() - start) * 1000)
            logging.getLogger(__name__).error(
                "Unhandled exception during request",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "client": request.client.host if request.client else None,
                    "duration_ms": duration_ms,
                    "exception_type": type(exc).__name__,
                    "exception_message": str(exc),
                    "traceback": traceback.format_exc(),
                },
            )
            raise


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind a request id to every log record emitted while serving a request."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


app.add_middleware(ErrorLoggingMiddleware)
# Added last so it wraps the error logger and its records carry the id
app.add_middleware(RequestIdMiddleware)


@app.get("/health")
def healthcheck() -> dict:
    return {"status": "ok"}


app.include_router(languages_router)
app.include_router(projects_router)
app.include_router(dialogs_router)

setup_admin(app)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("linedesk_api.main:app", host="0.0.0.0", port=8000, log_config=None)
