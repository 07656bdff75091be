"""Command line interface for pulsedigest."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NoReturn

import click
import typer
import uvicorn
from loguru import logger

from .config import AppConfig, load_config
from .config.inspector import check_config, explain_config
from .digest import DigestLoadError, DigestRenderer, DigestService
from .parser import BlockKind, Digest, parse_digest
from .scheduler import SchedulerService
from .store import StoreRequestError
from .web import create_app

_OUTPUT_FORMATS = ("json", "html", "text")


@dataclass(slots=True)
class CLIState:
    """Holds shared state between Typer commands."""

    config_path: Path
    _config: AppConfig | None = None

    def ensure_config(self) -> AppConfig:
        if self._config is None:
            logger.info("Loading configuration from {}", self.config_path)
            self._config = load_config(AppConfig, self.config_path)
        return self._config


app = typer.Typer(help="Portfolio digest parsing, fetching and serving")
config_app = typer.Typer(help="Validate and document configuration files")
app.add_typer(config_app, name="config")


def _default_config_path() -> Path:
    repo_root = Path(__file__).resolve().parents[1]
    return repo_root / "config" / "example.toml"


def _normalize_format(value: str) -> str:
    value = value.lower()
    if value not in _OUTPUT_FORMATS:
        raise typer.BadParameter(f"Unsupported format '{value}'")
    return value


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):  # pragma: no cover
        raise RuntimeError("CLI context is not initialised")
    return state


def _exit(code: int) -> NoReturn:
    raise typer.Exit(code)


def _load_config_or_exit(state: CLIState) -> AppConfig:
    try:
        return state.ensure_config()
    except FileNotFoundError as exc:
        logger.error("{}", exc)
        _exit(2)
    except ValueError as exc:
        logger.error("Invalid configuration {}: {}", state.config_path, exc)
        _exit(3)


def _build_digest_service(config: AppConfig) -> DigestService:
    try:
        return DigestService.from_config(config)
    except (ValueError, EnvironmentError) as exc:
        logger.error("Cannot initialise digest service: {}", exc)
        _exit(1)


def format_digest_text(digest: Digest) -> str:
    """Plain-text rendering used by the ``text`` output format."""

    lines: list[str] = [digest.title]
    if digest.created_at:
        lines.append(f"Created: {digest.created_at.isoformat()}")
    for index, article in enumerate(digest.articles, start=1):
        lines.append("")
        lines.append(f"{index}. {article.title}")
        for block in article.content_blocks:
            prefix = "  - " if block.kind is BlockKind.LIST_ITEM else "  "
            lines.append(f"{prefix}{block.text}")
        for citation in article.citations:
            lines.append(f"  [{citation.label}] {citation.url}")
    return "\n".join(lines)


def _emit(digest: Digest, output_format: str) -> None:
    if output_format == "json":
        typer.echo(json.dumps(digest.to_dict(), indent=2, ensure_ascii=False))
    elif output_format == "html":
        typer.echo(DigestRenderer().render(digest), nl=False)
    else:
        typer.echo(format_digest_text(digest))


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config: Path = typer.Option(
        _default_config_path(),
        help="Path to the TOML configuration file",
    ),
) -> None:
    """Initialise CLI state."""

    ctx.obj = CLIState(config_path=config.resolve())
    if ctx.invoked_subcommand is None:
        logger.warning("No command provided. Try 'parse <file>' or 'status'.")
        _exit(0)


@app.command(help="Parse a local digest file and print the structured result")
def parse(
    path: Path = typer.Argument(..., help="Digest text file to parse"),
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "json",
        "--format",
        case_sensitive=False,
        help="Output format: json, html or text",
        callback=_normalize_format,
    ),
) -> None:
    if not path.is_file():
        logger.error("Digest file not found: {}", path)
        _exit(2)

    raw_text = path.read_text(encoding="utf-8")
    digest = parse_digest(raw_text)
    if not digest.articles:
        logger.warning("No articles found in {}", path)
    _emit(digest, format)


@app.command(help="Load the latest digest from the object store")
def fetch(
    ctx: typer.Context,
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "json",
        "--format",
        case_sensitive=False,
        help="Output format: json, html or text",
        callback=_normalize_format,
    ),
) -> None:
    config = _load_config_or_exit(_get_state(ctx))
    service = _build_digest_service(config)

    digest = service.refresh()
    if digest is None:
        logger.error("Unable to load digest: {}", service.state().last_error)
        _exit(1)
    _emit(digest, format)


@app.command(help="Trigger remote digest generation")
def generate(
    ctx: typer.Context,
    wait: bool = typer.Option(
        True,
        "--wait/--no-wait",
        help="Wait for the configured interval and reload the latest digest",
    ),
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for the reloaded digest",
        callback=_normalize_format,
    ),
) -> None:
    config = _load_config_or_exit(_get_state(ctx))
    service = _build_digest_service(config)
    if not service.can_generate:
        logger.error("Generation is not configured")
        _exit(1)

    try:
        digest = service.generate(wait=wait)
    except (DigestLoadError, StoreRequestError) as exc:
        logger.error("Generation failed: {}", exc)
        _exit(1)

    if digest is None:
        logger.info("Generation triggered; digest was not reloaded.")
        return
    _emit(digest, format)


@app.command(help="Run the scheduler and web server")
def serve(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", help="Host to bind the server to"),
    port: int = typer.Option(8000, help="Port to bind the server to"),
    dry_run: bool = typer.Option(
        False,
        help="Set up the scheduler and report status without running the server",
    ),
) -> None:
    config = _load_config_or_exit(_get_state(ctx))
    digest_service = _build_digest_service(config)

    scheduler_service = SchedulerService(config, digest_service, dry_run=dry_run)
    scheduler_service.setup_jobs()

    if dry_run:
        logger.info("[Dry Run] Server will not be started.")
        scheduler_service.shutdown()
        return

    app_instance = create_app(digest_service, scheduler_service, config)

    @app_instance.on_event("startup")
    async def startup_event() -> None:
        logger.info("Application startup...")
        scheduler_service.start()
        digest_service.refresh()

    @app_instance.on_event("shutdown")
    async def shutdown_event() -> None:
        logger.info("Application shutdown...")
        scheduler_service.shutdown()

    uvicorn.run(app_instance, host=host, port=port, log_level=config.logging_level.lower())


@app.command(help="Show configuration status")
def status(ctx: typer.Context) -> None:
    config = _load_config_or_exit(_get_state(ctx))
    _report_system_status(config)


@config_app.command(help="Validate the configuration file")
def check(
    ctx: typer.Context,
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for validation results (text or json)",
        callback=lambda value: value.lower(),
    ),
) -> None:
    state = _get_state(ctx)
    result, exit_code, _ = check_config(state.config_path)

    if format == "json":
        typer.echo(json.dumps(result, indent=2, ensure_ascii=False, default=str))
        _exit(exit_code)

    if result["status"] == "ok":
        logger.info("Configuration OK: {}", result["config_path"])
        for warning in result["warnings"]:
            logger.warning(warning)
    else:
        error: dict[str, Any] = result["error"]
        logger.error(
            "Configuration error ({}) for {}: {}",
            error["type"],
            result["config_path"],
            error["message"],
        )
        for detail in error.get("details", []):
            logger.error("  - {}: {} ({})", detail["loc"] or "<root>", detail["message"], detail["type"])

    _exit(exit_code)


@config_app.command(help="Describe available configuration fields")
def explain(
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for configuration schema (text or json)",
        callback=lambda value: value.lower(),
    ),
) -> None:
    fields = explain_config()

    if format == "json":
        typer.echo(json.dumps({"fields": fields}, indent=2, ensure_ascii=False, default=str))
        return

    logger.info("Configuration schema ({} fields):", len(fields))
    for field in fields:
        logger.info(
            "  - {name}: type={type}, required={required}, default={default}, description={description}",
            name=field["name"],
            type=field["type"],
            required="yes" if field["required"] else "no",
            default=json.dumps(field["default"], ensure_ascii=False, default=str),
            description=field["description"] or "(no description)",
        )


def _report_system_status(config: AppConfig) -> None:
    """Log configuration and subsystem availability."""
    logger.info("=== General Configuration ===")
    logger.info("Logging level: {}", config.logging_level)

    logger.info("=== Object Store ===")
    if config.store:
        logger.info("Base URL: {}", config.store.base_url)
        logger.info("Timeout: {}s, Max retries: {}", config.store.timeout, config.store.max_retries)
        logger.info("Page limit: {}", config.store.page_limit)
    else:
        logger.info("Not configured")

    logger.info("=== Digest Lookup ===")
    logger.info("Keywords: {}", ", ".join(config.loader.keywords))
    logger.info("Minimum content length: {}", config.loader.min_content_length)

    logger.info("=== Generation ===")
    if config.generation:
        gen = config.generation
        logger.info("Interaction: {} (environment={}, model={})", gen.interaction, gen.environment_id, gen.model)
        logger.info("Wait after trigger: {}s", gen.wait_seconds)
    else:
        logger.info("Not configured")

    logger.info("=== Scheduler ===")
    scheduler = config.scheduler
    if scheduler:
        logger.info("Enabled: {}, timezone: {}", scheduler.enabled, scheduler.timezone)
        job = scheduler.generation_job
        if job:
            logger.info("Generation job '{}': cron='{}' enabled={}", job.name, job.cron, job.enabled)
        else:
            logger.info("No generation job configured")
    else:
        logger.info("Not configured")


def main(argv: list[str] | None = None) -> int:
    """Entry point compatible with setuptools console scripts."""

    try:
        result = app(args=argv, standalone_mode=False)
    except typer.Exit as exc:  # pragma: no cover - Typer translates exit codes
        return exc.exit_code
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    if isinstance(result, int):
        return result
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
