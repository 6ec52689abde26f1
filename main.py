"""
Main API module for shortlink.

Responsibilities:
    - Expose REST endpoints for creating short links and redirecting
    - Map service errors to HTTP status codes
    - Own the process lifecycle: build store and service, close the store exactly once

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - In-memory storage by default; swappable through the storage factory.
    - LinkService orchestrates generation, collision retry and visit tracking.

Run:
    uvicorn main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from shortlink.config import load_settings
from shortlink.context import RequestContext
from shortlink.errors import (
    DeadlineExceededError,
    InvalidLongURLError,
    LinkNotFoundError,
    ShortCodeTooShortError,
    ShortlinkError,
)
from shortlink.idgen.generator import Generator
from shortlink.shortener.service import LinkService
from shortlink.storage.base import BaseStorage
from shortlink.storage.storage_factory import get_storage
from shortlink.tracking.tracker import VisitTracker


class CreateShortLinkRequest(BaseModel):
    """Request payload for creating a new short link."""
    long_url: str


class CreateShortLinkResponse(BaseModel):
    short_code: str
    short_url: str


class LinkInfo(BaseModel):
    short_code: str
    long_url: str
    visit_count: int
    created_at: Optional[datetime] = None


def _to_http_error(exc: ShortlinkError) -> HTTPException:
    """
    Map the service error taxonomy to HTTP status codes.

        invalid input      -> 400
        unknown short code -> 404
        request deadline   -> 504
        anything else      -> 500
    """
    if isinstance(exc, (InvalidLongURLError, ShortCodeTooShortError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, LinkNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link not found")
    if isinstance(exc, DeadlineExceededError):
        return HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail="Request timed out")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error")


def create_app(settings=None, storage: Optional[BaseStorage] = None) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        settings: Settings object; defaults to a fresh read of the environment.
        storage (Optional[BaseStorage]): Pre-built store (tests); defaults to the factory choice.

    Returns:
        FastAPI: A fully configured application instance with its own store and service.

    Lifecycle:
        The lifespan handler shuts down the visit tracker (draining background increments)
        and then closes the store, in a `finally` block so every shutdown path runs it once.
    """
    settings = settings or load_settings()
    log = logging.getLogger("shortlink")

    # basic console logging (optional)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=settings.LOG_LEVEL)
    log.setLevel(settings.LOG_LEVEL)

    # ----------------------------------------------------------------
    # Per-app instances (isolated for tests, swappable for production)
    # ----------------------------------------------------------------
    if storage is None:
        storage = get_storage(settings.STORAGE_BACKEND)
    tracker = VisitTracker(storage, max_workers=settings.TRACKER_WORKERS, logger=log)
    service = LinkService(
        storage=storage,
        generator=Generator(),
        tracker=tracker,
        logger=log,
        max_gen_attempts=settings.MAX_GEN_ATTEMPTS,
        min_short_code_len=settings.MIN_SHORT_CODE_LEN,
    )
    log.info("shortlink starting: %r", settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            log.info("shortlink shutting down")
            tracker.shutdown(wait=True)
            storage.close()

    app = FastAPI(
        title="shortlink",
        description="URL shortener with collision-safe code generation and visit counting",
        lifespan=lifespan,
    )
    app.state.service = service
    app.state.storage = storage
    app.state.tracker = tracker

    def _request_context() -> RequestContext:
        # Each request gets its own deadline; background increments never inherit it.
        return RequestContext(timeout=settings.REQUEST_TIMEOUT)

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.post("/api/links", status_code=status.HTTP_201_CREATED, response_model=CreateShortLinkResponse)
    def create_link(req: CreateShortLinkRequest, request: Request) -> CreateShortLinkResponse:
        """
        Create a short link for a given URL.

        Raises:
            HTTPException: 400 for a blank URL, 504 past the request deadline,
                500 for generation/storage failures.
        """
        log.info("Create short link requested from %s, long_url=%s", request.client, req.long_url)
        try:
            short_code = service.create_short_link(req.long_url, ctx=_request_context())
        except ShortlinkError as exc:
            log.error("Failed to create short link: %s", exc)
            raise _to_http_error(exc)

        short_url = str(request.url_for("redirect_link", short_code=short_code))
        return CreateShortLinkResponse(short_code=short_code, short_url=short_url)

    @app.get("/api/links/{short_code}", response_model=LinkInfo)
    def link_info(short_code: str) -> LinkInfo:
        """Return the stored record, including visit_count. Does not count as a visit."""
        try:
            link = service.get_link(short_code, ctx=_request_context())
        except ShortlinkError as exc:
            raise _to_http_error(exc)
        return LinkInfo(**link.to_dict())

    @app.get("/{short_code}")
    def redirect_link(short_code: str) -> RedirectResponse:
        """
        Redirect to the long URL and record the visit in the background.

        Raises:
            HTTPException: 400 for a too-short code, 404 for an unknown one.
        """
        try:
            long_url = service.get_and_track_long_url(short_code, ctx=_request_context())
        except ShortlinkError as exc:
            log.warning("Failed to resolve short code %s: %s", short_code, exc)
            raise _to_http_error(exc)
        log.info("Redirecting %s to %s", short_code, long_url)
        return RedirectResponse(url=long_url, status_code=status.HTTP_302_FOUND)

    return app


# Backward compatibility for uvicorn and legacy imports:
# `uvicorn main:app --reload` and `from main import app` continue to work.
app = create_app()
