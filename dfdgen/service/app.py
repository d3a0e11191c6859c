"""FastAPI application entrypoint for dfdgen service mode."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

try:  # pragma: no cover - optional dependency
    from fastapi import Depends, FastAPI
    from fastapi.responses import JSONResponse
    from pydantic import BaseModel

    _FASTAPI_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - service mode optional
    FastAPI = None  # type: ignore[assignment]
    Depends = None  # type: ignore[assignment]
    JSONResponse = None  # type: ignore[assignment]
    BaseModel = object  # type: ignore[assignment]
    _FASTAPI_AVAILABLE = False

from ..config import DFDGenConfig
from ..logging import get_logger
from ..models import NotAnalyzable
from ..pipeline import DFDPipeline

logger = get_logger("service")


class AnalyzeRequest(BaseModel):
    document: Dict[str, Any]
    source: Optional[str] = None


class AnalyzeResponse(BaseModel):
    analyzable: bool
    graph: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None


class ProcessorInfo(BaseModel):
    id: str
    library: str
    priority: int
    description: str = ""
    frameworks: List[str] = []


class ProcessorsResponse(BaseModel):
    processors: List[ProcessorInfo]


class HealthResponse(BaseModel):
    status: str


def _default_pipeline() -> DFDPipeline:
    return DFDPipeline()


def create_app(
    pipeline_factory: Callable[[], DFDPipeline] = _default_pipeline,
) -> FastAPI:
    """Create the FastAPI application exposing dfdgen analysis."""

    if not _FASTAPI_AVAILABLE:  # pragma: no cover - validated via unit tests
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install dfdgen[service]`."
        )

    app = FastAPI(title="DFDGen Service", version="0.1.0")

    async def get_pipeline() -> DFDPipeline:
        return pipeline_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/processors", response_model=ProcessorsResponse)
    async def processors(pipeline: DFDPipeline = Depends(get_pipeline)) -> ProcessorsResponse:
        return ProcessorsResponse(
            processors=[
                ProcessorInfo(
                    id=processor.metadata.id,
                    library=processor.metadata.library,
                    priority=processor.metadata.priority,
                    description=processor.metadata.description,
                    frameworks=list(processor.metadata.frameworks),
                )
                for processor in pipeline.processors()
            ]
        )

    @app.post("/analyze", response_model=AnalyzeResponse)
    async def analyze(
        payload: AnalyzeRequest,
        pipeline: DFDPipeline = Depends(get_pipeline),
    ) -> AnalyzeResponse:
        result = await pipeline.analyze_document(payload.document, payload.source)
        if isinstance(result, NotAnalyzable):
            return AnalyzeResponse(analyzable=False, reason=result.reason)
        return AnalyzeResponse(analyzable=True, graph=result.to_dict())

    @app.exception_handler(ValueError)
    async def value_error_handler(
        _: Any, exc: ValueError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        logger.warning("Request failed: %s", exc)
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000, config: DFDGenConfig | None = None
) -> None:  # pragma: no cover - integration path
    if not _FASTAPI_AVAILABLE:
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install dfdgen[service]`."
        )

    try:
        import uvicorn
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "uvicorn is required to run the service. Install it with `pip install uvicorn`."
        ) from exc

    app = create_app(lambda: DFDPipeline(config))
    uvicorn.run(app, host=host, port=port)


__all__ = ["AnalyzeRequest", "AnalyzeResponse", "create_app", "run_service"]
