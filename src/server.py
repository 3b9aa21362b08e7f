"""Main FastAPI server for the voice relay."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

import uvicorn  # noqa: E402
from fastapi import FastAPI, WebSocket  # noqa: E402
from fastapi.responses import ORJSONResponse  # noqa: E402

from src.config.server import SERVER_HOST, SERVER_PORT  # noqa: E402
from src.config.websocket import WS_ENDPOINT_PATH  # noqa: E402
from src.runtime.logging import configure_logging  # noqa: E402
from src.handlers.context_api import router as context_router  # noqa: E402
from src.runtime.dependencies import build_runtime_deps  # noqa: E402
from src.handlers.websocket.manager import handle_websocket_connection  # noqa: E402

logger = logging.getLogger(__name__)

configure_logging()


@asynccontextmanager
async def _lifespan(app: FastAPI):
    # Tests may pre-install deps with a fake upstream.
    runtime_deps = getattr(app.state, "runtime_deps", None) or await build_runtime_deps()
    app.state.runtime_deps = runtime_deps
    logger.info("runtime: ready")
    try:
        yield
    finally:
        deps = getattr(app.state, "runtime_deps", None)
        if deps is not None:
            await deps.shutdown()


app = FastAPI(default_response_class=ORJSONResponse, lifespan=_lifespan)
app.include_router(context_router)


@app.get("/")
async def root() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.websocket(WS_ENDPOINT_PATH)
async def websocket_endpoint(websocket: WebSocket) -> None:
    runtime_deps = getattr(app.state, "runtime_deps", None)
    if runtime_deps is None:
        raise RuntimeError("Runtime dependencies are not initialized")
    await handle_websocket_connection(websocket, runtime_deps)


def main() -> None:
    uvicorn.run(app, host=SERVER_HOST, port=SERVER_PORT, log_config=None)


if __name__ == "__main__":
    main()
