"""FastAPI application factory and routing definitions."""

from __future__ import annotations

import secrets
from pathlib import Path
from typing import Any, Callable

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from loguru import logger
from markupsafe import Markup

from pulsedigest.config.app import AppConfig
from pulsedigest.config.web import WebAuthConfig
from pulsedigest.digest.renderer import DigestRenderer
from pulsedigest.digest.service import DigestService
from pulsedigest.scheduler.service import GENERATION_JOB_ID, SchedulerService

EMPTY_MESSAGE = 'Unable to load digest. Click "Generate Digest" to create one.'


def create_app(
    digest_service: DigestService,
    scheduler_service: SchedulerService | None = None,
    config: AppConfig | None = None,
) -> FastAPI:
    """Creates the API and HTML page around an explicit :class:`DigestService`."""
    web_config = config.web if config and config.web else None
    auth_config = web_config.auth if web_config and web_config.auth else None
    auth_dependency = _build_auth_dependency(auth_config)
    auth_required = bool(auth_config and auth_config.enabled)
    renderer = DigestRenderer()

    app = FastAPI(
        title="pulsedigest API",
        description="Serve, refresh and regenerate the portfolio digest.",
        version="0.1.0",
    )

    templates = Jinja2Templates(directory=str(_templates_dir()))

    @app.get("/health", summary="Health Check", tags=["Monitoring"])
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/digest", summary="Current Digest", tags=["Digest"])
    async def get_digest() -> dict[str, Any]:
        """Return the currently loaded digest as JSON."""
        digest = digest_service.current
        if digest is None:
            detail = digest_service.state().last_error or "No digest loaded."
            raise HTTPException(status_code=404, detail=detail)
        return digest.to_dict()

    @app.get("/digest/status", summary="Digest Status", tags=["Digest"])
    async def digest_status() -> dict[str, Any]:
        return digest_service.state().to_dict()

    @app.post("/digest/refresh", summary="Reload Latest Digest", tags=["Digest"])
    def refresh_digest(_: None = Depends(auth_dependency)) -> dict[str, Any]:
        """Reload the newest digest from the object store."""
        digest = digest_service.refresh()
        if digest is None:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=digest_service.state().last_error or "Digest refresh failed.",
            )
        return {"status": "success", "articles": len(digest.articles)}

    @app.post("/digest/generate", summary="Generate Digest", tags=["Digest"], response_model=None)
    async def generate_digest(request: Request, _: None = Depends(auth_dependency)) -> Any:
        """Queue the generation job to run immediately; browser form posts are redirected to the page."""
        logger.info("Manual digest generation requested.")
        if scheduler_service is None or not scheduler_service.trigger_job(GENERATION_JOB_ID):
            raise HTTPException(status_code=404, detail="Generation job is not configured.")
        if "text/html" in request.headers.get("accept", ""):
            return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
        return {"status": "success", "message": "Digest generation has been scheduled."}

    @app.get("/jobs", summary="List All Scheduled Jobs", tags=["Scheduler"])
    async def list_jobs(_: None = Depends(auth_dependency)) -> list[dict[str, Any]]:
        return scheduler_service.list_jobs() if scheduler_service else []

    @app.get("/metrics", response_class=PlainTextResponse, tags=["Monitoring"])
    async def metrics() -> PlainTextResponse:
        payload = scheduler_service.export_metrics() if scheduler_service else ""
        return PlainTextResponse(payload, media_type="text/plain; version=0.0.4")

    @app.get("/", response_class=HTMLResponse, include_in_schema=False)
    async def page(request: Request) -> HTMLResponse:
        """Render the digest page, or the empty state when nothing is loaded."""
        if web_config is not None and not web_config.enabled:
            raise HTTPException(status_code=404, detail="Web page is disabled.")

        state = digest_service.state()
        if state.digest is not None:
            body = renderer.render(state.digest)
        else:
            body = renderer.render_empty(EMPTY_MESSAGE)

        context = {
            "title": web_config.title if web_config else "Portfolio Pulse",
            "status": state.status,
            "active": state.status == "active",
            "can_generate": digest_service.can_generate and scheduler_service is not None and not auth_required,
            "body": Markup(body),
        }
        return templates.TemplateResponse(request, "digest.html", context)

    return app


def _templates_dir() -> Path:
    return Path(__file__).resolve().parent / "templates"


def _build_auth_dependency(auth_config: WebAuthConfig | None) -> Callable[..., Any]:
    """Return a dependency that validates the configured auth token."""

    if not auth_config or not auth_config.enabled:
        async def _no_auth() -> None:
            return None

        return _no_auth

    expected_token = auth_config.token_secret
    header_alias = auth_config.header_name

    async def _verify_token(
        provided_token: str | None = Header(default=None, alias=header_alias),
    ) -> None:
        if provided_token is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Missing authentication token.",
            )
        if not secrets.compare_digest(provided_token, expected_token):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication token.",
            )

    return _verify_token


__all__ = ["create_app"]
