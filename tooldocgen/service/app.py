"""FastAPI application entrypoint for tooldocgen service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import load_config
from ..errors import ToolDocGenError
from ..naming import FragmentKind, explain
from ..pipeline import Pipeline
from ..report import BatchSummary

T = TypeVar("T")


class ResolveRequest(BaseModel):
    command: str


class ResolveResponse(BaseModel):
    command: str
    base_slug: str
    prefix_source: str
    file_names: Dict[str, str]


class FamiliesRequest(BaseModel):
    families: Optional[List[str]] = None


class FailureModel(BaseModel):
    item: str
    reason: str
    stage: str = ""


class SummaryResponse(BaseModel):
    stage: str
    ok: bool
    succeeded: List[str]
    skipped: List[str]
    failed: List[FailureModel]
    warnings: List[str]


class HealthResponse(BaseModel):
    status: str


def _summary_response(summary: BatchSummary) -> SummaryResponse:
    return SummaryResponse(
        stage=summary.stage,
        ok=summary.ok,
        succeeded=summary.succeeded,
        skipped=summary.skipped,
        failed=[FailureModel(item=f.item, reason=f.reason, stage=f.stage) for f in summary.failed],
        warnings=summary.warnings,
    )


def _default_pipeline_factory(config_path: Path) -> Callable[[], Pipeline]:
    def factory() -> Pipeline:
        return Pipeline(load_config(config_path))

    return factory


async def _in_executor(func: Callable[[], T]) -> T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func)


def create_app(
    pipeline_factory: Callable[[], Pipeline] | None = None,
    *,
    config_path: Path = Path("."),
) -> FastAPI:
    """Create the FastAPI application exposing tooldocgen operations."""
    factory = pipeline_factory or _default_pipeline_factory(config_path)
    app = FastAPI(title="tooldocgen service", version="0.1.0")

    async def get_pipeline() -> Pipeline:
        # Fresh pipeline per request so cancellation state never leaks between runs.
        return factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/resolve", response_model=ResolveResponse)
    async def resolve(
        payload: ResolveRequest,
        pipeline: Pipeline = Depends(get_pipeline),
    ) -> ResolveResponse:
        resolved = explain(payload.command, pipeline.name_context)
        return ResolveResponse(
            command=payload.command,
            base_slug=resolved.base_slug,
            prefix_source=resolved.prefix_source.value,
            file_names={kind.value: resolved.file_name(kind) for kind in FragmentKind},
        )

    @app.post("/compose", response_model=SummaryResponse)
    async def compose(pipeline: Pipeline = Depends(get_pipeline)) -> SummaryResponse:
        summary = await _in_executor(pipeline.run_compose)
        return _summary_response(summary)

    @app.post("/families", response_model=SummaryResponse)
    async def families(
        payload: FamiliesRequest,
        pipeline: Pipeline = Depends(get_pipeline),
    ) -> SummaryResponse:
        summary = await _in_executor(lambda: pipeline.run_families(payload.families))
        return _summary_response(summary)

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ToolDocGenError)
    async def tooldocgen_error_handler(_: Any, exc: ToolDocGenError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000, *, config_path: Path = Path(".")
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app(config_path=config_path)
    uvicorn.run(app, host=host, port=port)
