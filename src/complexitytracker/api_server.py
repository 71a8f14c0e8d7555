"""
FastAPI server exposing complexity analysis over HTTP.
"""

import asyncio
import logging
from typing import List, Optional, Dict, Any
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
import uvicorn

from . import __version__
from .core.analyzer import AnalysisEngine
from .exceptions import ConfigError, EmptyInputError
from .patterns import CHECKERS
from .result_aggregator import ResultAggregator
from .services.configuration_service import AnalysisConfig, ThresholdConfig, get_config_service

logger = logging.getLogger(__name__)


# Pydantic models for API requests/responses
class ThresholdModel(BaseModel):
    """Complexity limits for one request."""
    cyclomatic_limit: int = Field(10, ge=1, description="Maximum cyclomatic complexity")
    cognitive_limit: int = Field(15, ge=1, description="Maximum cognitive complexity")
    nesting_limit: int = Field(3, ge=1, description="Maximum nesting depth")
    line_limit: int = Field(50, ge=1, description="Maximum lines per function")


class AnalyzeRequest(BaseModel):
    """Request model for analyzing source code."""
    source: str = Field(..., min_length=1, description="Python source code to analyze")
    file_path: Optional[str] = Field(None, description="File path for context")
    thresholds: Optional[ThresholdModel] = Field(None, description="Limits (server defaults if omitted)")
    include_all: bool = Field(False, description="Include functions within the limits")
    suggestions: bool = Field(True, description="Compute refactoring suggestions")


class AnalyzeResponse(BaseModel):
    """Response model for analysis."""
    summary: Dict[str, Any] = Field(..., description="Run summary and limits used")
    violations: List[Dict[str, Any]] = Field(..., description="Functions over a limit, most complex first")
    failures: List[Dict[str, Any]] = Field(..., description="Parse errors")
    functions: Optional[List[Dict[str, Any]]] = Field(None, description="All functions when include_all is set")


class PatternInfo(BaseModel):
    """A refactoring pattern the advisor can suggest."""
    name: str
    priority: int
    description: str


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app."""
    # Startup: invalid configuration must stop the server before it serves
    config = get_config_service().get_config()
    logger.info(f"API server started with limits {config.thresholds}")

    yield

    # Shutdown
    logger.info("API server shutting down")


# Create FastAPI app
app = FastAPI(
    title="ComplexityTracker API",
    description="Cyclomatic and cognitive complexity analysis with refactoring suggestions",
    version=__version__,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "message": "ComplexityTracker API is running"}


@app.get("/patterns", response_model=List[PatternInfo])
async def list_patterns():
    """List refactoring patterns in tie-break priority order."""
    return [
        PatternInfo(name=checker.kind.value, priority=index, description=(checker.__doc__ or "").strip())
        for index, checker in enumerate(CHECKERS, 1)
    ]


@app.post("/analyze", response_model=AnalyzeResponse)
async def analyze_code(request: AnalyzeRequest):
    """Analyze a Python module and report complexity per function."""
    try:
        thresholds = _thresholds_for(request)
    except ConfigError as e:
        raise HTTPException(status_code=422, detail=str(e))

    engine = AnalysisEngine(
        thresholds=thresholds,
        config=AnalysisConfig(parallel_processing=False, suggestions=request.suggestions),
    )
    try:
        report = await asyncio.to_thread(engine.analyze_source, request.source, request.file_path)
    except EmptyInputError as e:
        # Nothing analyzable is still a valid answer over HTTP
        report = ResultAggregator(thresholds).aggregate([], e.failures, files_analyzed=1)

    logger.info(f"Analyzed {report.analyzed_units} functions, {len(report.violations)} over limits")
    return AnalyzeResponse(**report.to_dict(include_all=request.include_all))


def _thresholds_for(request: AnalyzeRequest) -> ThresholdConfig:
    if request.thresholds is None:
        return get_config_service().get_threshold_config()
    limits = request.thresholds
    return ThresholdConfig(
        cyclomatic_limit=limits.cyclomatic_limit,
        cognitive_limit=limits.cognitive_limit,
        nesting_limit=limits.nesting_limit,
        line_limit=limits.line_limit,
    )


async def serve(host: str = "127.0.0.1", port: int = 8000):
    """Serve the API from inside a running event loop."""
    config = uvicorn.Config("complexitytracker.api_server:app", host=host, port=port, log_level="info")
    await uvicorn.Server(config).serve()


def run_server(host: str = "127.0.0.1", port: int = 8000, reload: bool = False):
    """Run the FastAPI server."""
    uvicorn.run(
        "complexitytracker.api_server:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info"
    )


if __name__ == "__main__":
    run_server()
