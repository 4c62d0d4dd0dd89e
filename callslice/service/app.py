"""FastAPI application entrypoint for callslice service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..errors import CallSliceError, EntryPointNotFoundError
from ..extractor import ExtractionResult, Extractor


class ExtractRequest(BaseModel):
    path: str
    function: str
    package: Optional[str] = None
    exclude_root: Optional[bool] = None
    code_only: Optional[bool] = None
    depth: Optional[int] = None


class ExtractResponse(BaseModel):
    document: str
    entry: str
    visited: List[str]
    packages: List[str]


class HealthResponse(BaseModel):
    status: str


def _default_extractor() -> Extractor:
    return Extractor()


def create_app(
    extractor_factory: Callable[[], Extractor] = _default_extractor,
) -> FastAPI:
    """Create the FastAPI application exposing extraction."""

    app = FastAPI(title="callslice", version="0.1.0")

    async def get_extractor() -> Extractor:
        return extractor_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/extract", response_model=ExtractResponse)
    async def extract(
        payload: ExtractRequest,
        extractor: Extractor = Depends(get_extractor),
    ) -> ExtractResponse:
        def _run_extract() -> ExtractionResult:
            return extractor.run(
                payload.path,
                payload.function,
                package=payload.package,
                exclude_root=payload.exclude_root,
                code_only=payload.code_only,
                depth=payload.depth,
            )

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run_extract)
        return ExtractResponse(
            document=result.document,
            entry=str(result.entry),
            visited=[str(symbol) for symbol in result.visited],
            packages=result.packages,
        )

    @app.exception_handler(EntryPointNotFoundError)
    async def entry_point_not_found_handler(
        _: Any, exc: EntryPointNotFoundError
    ) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(CallSliceError)
    async def callslice_error_handler(_: Any, exc: CallSliceError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    try:
        import uvicorn
    except ModuleNotFoundError as exc:
        raise RuntimeError(
            "uvicorn is required to run the service. Install it with `pip install callslice[service]`."
        ) from exc

    app = create_app()
    uvicorn.run(app, host=host, port=port)


__all__ = ["ExtractRequest", "ExtractResponse", "HealthResponse", "create_app", "run_service"]
