"""
zipsearch - FastAPI application serving BM25 search over archive listings

Endpoints:
- POST /search: rank archives by an explicit term list
- POST /search_by_file: rank archives by similarity to an uploaded zip
- GET /health: index statistics and uptime
- /dashboard: static dashboard (when the static directory exists)

The index is loaded once at startup and held in a ServingState. Search
endpoints are plain (sync) functions so FastAPI runs them on its thread
pool; they only ever take the read side of the serving lock.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from . import config
from .logging_config import setup_logging

setup_logging(
    log_file=config.LOG_FILE,
    console_level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    file_level=logging.DEBUG  # Always DEBUG in file for troubleshooting
)

logger = logging.getLogger(__name__)


from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from .archive import ArchiveError, list_entry_names
from .bm25 import BM25Scorer, SearchOutcome, load_index, query_terms_from_entries
from .serving import ServingState

APP_START_TIME = datetime.utcnow().isoformat() + "Z"

# Global instances
serving_state: Optional[ServingState] = None
scorer = BM25Scorer()


def install_serving_state(state: Optional[ServingState]) -> None:
    """Set the state served by this process (CLI startup, tests)"""
    global serving_state
    serving_state = state


def get_serving_state() -> ServingState:
    """Dependency: the loaded serving state, or 503 while none is loaded"""
    if serving_state is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="No index loaded",
        )
    return serving_state


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the index when started without one (e.g. `uvicorn zipsearch.main:app`)"""
    if serving_state is None:
        if not config.INDEX_PATH:
            logger.warning("ZIPSEARCH_INDEX_PATH not set and no index installed - search endpoints will return 503")
        else:
            # Load errors propagate: uvicorn aborts startup instead of serving a partial state
            logger.info(f"Loading index from {config.INDEX_PATH}...")
            install_serving_state(ServingState(load_index(config.INDEX_PATH), source=config.INDEX_PATH))

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title="zipsearch API",
    description="BM25 search over the file listings of archives",
    version=config.APP_VERSION,
    lifespan=lifespan,
)

if Path(config.STATIC_DIR).is_dir():
    app.mount("/dashboard", StaticFiles(directory=config.STATIC_DIR, html=True), name="dashboard")
else:
    logger.debug(f"Static directory {config.STATIC_DIR} not found - dashboard disabled")


# Request/Response models
class HealthResponse(BaseModel):
    status: str
    version: str
    index_path: Optional[str] = None
    documents: int
    terms: int
    started_at: str
    uptime_seconds: float


class SearchRequest(BaseModel):
    terms: List[str] = Field(..., description="Query terms (path components); repeats count")
    max_length: Optional[int] = Field(
        default=None,
        ge=0,
        description="Maximum number of matches returned (default: unbounded)"
    )
    min_score: Optional[float] = Field(
        default=None,
        description="Only matches scoring strictly above this are returned (default: 0)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "terms": ["lombok", "AUTHORS", "README.md"],
                "max_length": 10,
                "min_score": 0.5,
            }
        }


class SearchMatch(BaseModel):
    md5: str
    score: float


class SearchResult(BaseModel):
    matches: List[SearchMatch]
    total: int
    time: int = Field(..., description="Computation time in milliseconds")


def _to_result(outcome: SearchOutcome) -> SearchResult:
    return SearchResult(
        matches=[SearchMatch(md5=doc, score=score) for doc, score in outcome.matches],
        total=outcome.total,
        time=outcome.time_ms,
    )


# Routes
@app.get("/", response_model=dict)
async def root():
    """Root endpoint"""
    return {
        "message": "Hello, welcome to our server!",
        "service": "zipsearch",
        "version": config.APP_VERSION,
    }


@app.get("/health", response_model=HealthResponse)
def health(state: ServingState = Depends(get_serving_state)):
    """Health check with loaded index statistics"""
    start_time = datetime.fromisoformat(APP_START_TIME.rstrip('Z'))
    uptime = (datetime.utcnow() - start_time).total_seconds()

    with state.read() as index:
        documents = index.document_count
        terms = index.term_count

    return HealthResponse(
        status="healthy",
        version=config.APP_VERSION,
        index_path=state.source,
        documents=documents,
        terms=terms,
        started_at=APP_START_TIME,
        uptime_seconds=round(uptime, 2),
    )


@app.post("/search", response_model=SearchResult)
def search(request: SearchRequest, state: ServingState = Depends(get_serving_state)):
    """
    Rank archives by BM25 score for the given terms.

    Terms are matched exactly (case-sensitive path components).

    Example:
        POST /search
        {"terms": ["lombok", "AUTHORS", "README.md"], "max_length": 10}
    """
    try:
        with state.read() as index:
            outcome = scorer.search(index, request.terms, request.min_score, request.max_length)
        logger.debug(f"Search: {len(request.terms)} terms → {outcome.total} matches in {outcome.time_ms}ms")
        return _to_result(outcome)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Search failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Search failed: {str(e)}",
        )


@app.post("/search_by_file", response_model=SearchResult)
def search_by_file(
    file: UploadFile = File(...),
    max_length: Optional[int] = Form(None, ge=0),
    min_score: Optional[float] = Form(None),
    state: ServingState = Depends(get_serving_state),
):
    """
    Rank archives by similarity to an uploaded zip archive.

    The archive's entry names are tokenized the same way indexed archives
    were, and used as the query terms.

    Example:
        POST /search_by_file
        Content-Type: multipart/form-data
        file: project.zip
        max_length: 20
    """
    try:
        content = file.file.read()
        try:
            entry_names = list_entry_names(content)
        except ArchiveError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(e)
            )

        terms = query_terms_from_entries(entry_names)
        logger.info(f"Search by file: {file.filename} ({len(entry_names)} entries, {len(terms)} terms)")

        with state.read() as index:
            outcome = scorer.search(index, terms, min_score, max_length)
        return _to_result(outcome)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Search by file failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Search failed: {str(e)}",
        )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": str(exc),
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "zipsearch.main:app",
        host=config.HOST,
        port=config.PORT,
    )
