"""
FastAPI web application for gittempo.

Serves the repository form, the chart page, and the JSON API behind it.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, Field

from gittempo.activity_binner import TimeWindow, bin_records
from gittempo.chart import build_chart_config, calculate_totals, ensure_chart_registered
from gittempo.commit_filters import filter_records, list_authors, make_zoom_key
from gittempo.commit_parser import parse_repo_url
from gittempo.config import (
    GITHUB_TOKEN,
    TIME_RANGE_CHOICES,
    get_cache_minutes,
    get_default_hours,
    get_dependency_files,
    get_max_commits,
    validate_config,
)
from gittempo.github_client import GitHubClient, GitHubClientError
from gittempo.logging_config import setup_logging
from gittempo.storage import CommitStorage, get_change_records
from gittempo.zoom_planner import ZoomState, compute_zoom_window, reset_zoom_state

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    ensure_chart_registered()
    yield


app = FastAPI(
    title="gittempo",
    description="Commit activity charts for GitHub repositories",
    version="0.1.0",
    lifespan=lifespan,
)

templates = Jinja2Templates(directory=Path(__file__).parent / "templates")


class ZoomStatePayload(BaseModel):
    """Zoom state round-tripped through the browser."""

    min_index: int | None = Field(None, ge=0)
    max_index: int | None = Field(None, ge=0)
    last_zoom_key: str = ""
    last_zoom_range: tuple[int, int] | None = None

    def to_state(self) -> ZoomState:
        return ZoomState(
            min_index=self.min_index,
            max_index=self.max_index,
            last_zoom_key=self.last_zoom_key,
            last_zoom_range=self.last_zoom_range,
        )

    @classmethod
    def from_state(cls, state: ZoomState) -> "ZoomStatePayload":
        return cls(
            min_index=state.min_index,
            max_index=state.max_index,
            last_zoom_key=state.last_zoom_key,
            last_zoom_range=state.last_zoom_range,
        )


class GraphRequest(BaseModel):
    """Request model for building a commit chart."""

    repo: str = Field(..., min_length=1, description="GitHub repo URL or owner/name")
    hours: int | None = Field(None, ge=1, le=24 * 365, description="Look-back window in hours")
    start: datetime | None = Field(None, description="Custom range start")
    end: datetime | None = Field(None, description="Custom range end")
    authors: list[str] | None = Field(None, description="Authors to include (null = all)")
    include_initial: bool = Field(True, description="Include the repository's first commit")
    hide_dependencies: bool = Field(False, description="Count only non-dependency changes")
    mode: Literal["bar", "line"] = "bar"
    show_trend: bool = True
    auto_zoom: bool = Field(False, description="Compute an auto-zoom window")
    zoom_state: ZoomStatePayload | None = None


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _resolve_window(request: GraphRequest) -> tuple[TimeWindow, TimeWindow | int]:
    """
    Build the time window and the value it is keyed by.

    Raises:
        ValueError: If the custom range is incomplete or inverted
    """
    if request.start is not None or request.end is not None:
        if request.start is None or request.end is None:
            raise ValueError("A custom range needs both start and end.")
        window = TimeWindow(start=_as_utc(request.start), end=_as_utc(request.end))
        return window, window

    hours = request.hours or get_default_hours()
    return TimeWindow.from_hours_back(hours), hours


def _load_records(repo: str):
    """
    Fetch (or read cached) change records for a repository.

    Raises:
        HTTPException: on configuration or GitHub API errors
    """
    # Validate configuration
    try:
        validate_config()
    except ValueError as e:
        raise HTTPException(status_code=500, detail=f"Configuration error: {e}")

    client = GitHubClient(GITHUB_TOKEN)
    storage = CommitStorage()

    try:
        return get_change_records(
            client,
            repo,
            storage,
            max_commits=get_max_commits(),
            dependency_files=get_dependency_files(),
            cache_minutes=get_cache_minutes(),
        )
    except GitHubClientError as e:
        logger.warning("GitHub request for %s failed: %s", repo, e)
        raise HTTPException(status_code=502, detail=str(e))


def _parse_repo_or_400(repo: str) -> str:
    try:
        return parse_repo_url(repo)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/", response_class=HTMLResponse)
def index(request: Request):
    """Render the repository form."""
    return templates.TemplateResponse(request, "index.html", {"error": None, "repo_url": ""})


@app.get("/graph", response_class=HTMLResponse)
def graph_page(request: Request, repo: str = ""):
    """Render the chart page for a repository."""
    try:
        repo_name = parse_repo_url(repo)
    except ValueError as e:
        return templates.TemplateResponse(
            request,
            "index.html",
            {"error": str(e), "repo_url": repo},
            status_code=400,
        )

    return templates.TemplateResponse(
        request,
        "graph.html",
        {
            "repo": repo_name,
            "repo_short_name": repo_name.split("/")[-1],
            "default_hours": get_default_hours(),
            "time_ranges": TIME_RANGE_CHOICES,
            "chart_components": ensure_chart_registered(),
        },
    )


@app.get("/api/commits")
def get_commits(repo: str | None = None):
    """
    Get change records for a repository.

    Returns:
        JSON list of change records, newest first
    """
    if not repo:
        raise HTTPException(status_code=400, detail="Repository is required")

    records = _load_records(_parse_repo_or_400(repo))
    return [record.to_dict() for record in records]


@app.post("/api/graph")
def build_graph(graph_request: GraphRequest):
    """
    Bin a repository's commits and build the chart payload.

    Args:
        graph_request: GraphRequest with filters, chart mode and zoom state

    Returns:
        JSON with authors, binned series, totals, chart config and zoom result
    """
    repo = _parse_repo_or_400(graph_request.repo)

    try:
        window, window_key = _resolve_window(graph_request)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    records = _load_records(repo)
    filtered = filter_records(
        records,
        authors=graph_request.authors,
        include_initial=graph_request.include_initial,
    )
    series = bin_records(filtered, window, graph_request.hide_dependencies)

    zoom_key = make_zoom_key(
        window_key,
        graph_request.authors,
        graph_request.hide_dependencies,
        graph_request.include_initial,
    )
    prior = graph_request.zoom_state.to_state() if graph_request.zoom_state else ZoomState()
    if prior.last_zoom_key != zoom_key:
        prior = reset_zoom_state(prior)

    zoom_applied = False
    state = prior
    if graph_request.auto_zoom:
        zoom_window, state = compute_zoom_window(series, window.total_hours, zoom_key, prior)
        zoom_applied = zoom_window is not None

    return {
        "repo": repo,
        "authors": list_authors(records),
        "window": {
            "start": window.start.isoformat(),
            "end": window.end.isoformat(),
            "total_hours": window.total_hours,
        },
        "series": series.to_dict(),
        "totals": calculate_totals(series),
        "chart": build_chart_config(
            series,
            mode=graph_request.mode,
            show_trend=graph_request.show_trend,
            window=state.window,
        ),
        "zoom": {
            "key": zoom_key,
            "applied": zoom_applied,
            "state": ZoomStatePayload.from_state(state).model_dump(),
        },
    }
