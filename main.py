from __future__ import annotations
from dotenv import load_dotenv
load_dotenv()  # Load .env file before importing app modules

import time
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable
import uvicorn
from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from slider_bridge.config import AUTOSTART
from slider_bridge import routes
from slider_bridge.routes import router, get_service

# Configure logging to show all INFO level logs from our modules
logging.basicConfig(
    level=logging.INFO,
    format='%(levelname)s: %(name)s: %(message)s'
)
logging.getLogger("slider_bridge").setLevel(logging.INFO)

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log request and response information."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        client_ip = request.client.host if request.client else "unknown"

        logger.info(
            f"Request: {request.method} {request.url.path} | "
            f"IP: {client_ip}"
        )

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"Response: {request.method} {request.url.path} | "
            f"Status: {response.status_code} | "
            f"Time: {process_time:.3f}s"
        )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    if AUTOSTART:
        ok, msg = get_service().start()
        logger.info(f"Autostart: {msg}")
    yield
    # the service may have been created lazily by a request
    if routes.svc is not None:
        routes.svc.shutdown()


def create_app() -> FastAPI:
    app = FastAPI(title="ESPHome Slider Bridge", version="0.1.0", lifespan=lifespan)
    app.add_middleware(LoggingMiddleware)
    app.include_router(router)
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
