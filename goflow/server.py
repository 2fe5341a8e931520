"""HTTP transport: FastAPI app exposing the trace endpoint."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .api import build_trace_response, error_response
from .run_types import TraceConfig

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_TRACE_TIMEOUT = 10.0


@dataclass(frozen=True)
class ServerSettings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    trace_timeout: float = DEFAULT_TRACE_TIMEOUT
    trace_config: TraceConfig = field(default_factory=TraceConfig)

    @classmethod
    def from_env(cls) -> ServerSettings:
        """Read ``GOFLOW_HOST``, ``GOFLOW_PORT`` and ``GOFLOW_TRACE_TIMEOUT``."""
        return cls(
            host=os.environ.get("GOFLOW_HOST", DEFAULT_HOST),
            port=int(os.environ.get("GOFLOW_PORT", DEFAULT_PORT)),
            trace_timeout=float(
                os.environ.get("GOFLOW_TRACE_TIMEOUT", DEFAULT_TRACE_TIMEOUT)
            ),
        )


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TraceRequest(_CamelModel):
    code: str = ""


class TraceResponse(_CamelModel):
    success: bool
    error: Optional[str] = None
    source_code: str = ""
    total_steps: int = 0
    ast: Optional[dict[str, Any]] = None
    trace: list[dict[str, Any]] = []
    final_output: str = ""


def _respond(body: dict[str, Any], status_code: int) -> JSONResponse:
    response = TraceResponse.model_validate(body)
    return JSONResponse(
        status_code=status_code,
        content=response.model_dump(by_alias=True, exclude_none=True),
    )


def create_app(settings: ServerSettings | None = None) -> FastAPI:
    settings = settings or ServerSettings.from_env()
    app = FastAPI(title="goflow")
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/api/trace")
    async def trace_code(request: TraceRequest):
        try:
            body = await asyncio.wait_for(
                asyncio.to_thread(
                    build_trace_response, request.code, settings.trace_config
                ),
                timeout=settings.trace_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Trace abandoned after %.1fs", settings.trace_timeout)
            return _respond(
                error_response(
                    f"Execution timed out after {settings.trace_timeout:g}s"
                ),
                504,
            )
        return _respond(body, 200 if body["success"] else 400)

    return app


def main(argv: list[str] | None = None):
    import uvicorn

    env_settings = ServerSettings.from_env()
    parser = argparse.ArgumentParser(description="goflow trace server")
    parser.add_argument("--host", default=env_settings.host)
    parser.add_argument("--port", type=int, default=env_settings.port)
    parser.add_argument(
        "--timeout",
        type=float,
        default=env_settings.trace_timeout,
        help="Seconds allowed per trace request",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    settings = ServerSettings(
        host=args.host, port=args.port, trace_timeout=args.timeout
    )
    logger.info("goflow server starting on %s:%d", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
