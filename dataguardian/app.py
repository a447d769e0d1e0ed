"""
Server entry point: FastAPI app setup and route configuration.

Builds the analysis stack (site store, summary agent, summarizer,
orchestrator) once per process and exposes it through the routes in
:mod:`dataguardian.routes.sites`.
"""

from __future__ import annotations

import contextlib
from collections.abc import AsyncGenerator

import dotenv
import fastapi
import uvicorn
from fastapi.middleware import cors

from dataguardian import agents
from dataguardian.agents import config as agent_config
from dataguardian.agents import observability_setup
from dataguardian.pipeline import analyzer, summarizer
from dataguardian.routes import sites
from dataguardian.storage import site_store
from dataguardian.utils import logger, settings as settings_mod

dotenv.load_dotenv()

log = logger.create_logger("Server")


def build_analyzer(settings: settings_mod.AppSettings) -> analyzer.SiteAnalyzer:
    """Wire store, summary agent and summarizer into an orchestrator."""
    problem = agent_config.validate_llm_config()
    if problem:
        log.warn("AI summaries disabled, using rule-based fallback", {"reason": problem.splitlines()[0]})

    privacy_summarizer = summarizer.PrivacySummarizer(
        agents.get_privacy_summary_agent(),
        ttl_s=settings.summary_cache_ttl_s,
        max_entries=settings.summary_cache_max_entries,
    )
    return analyzer.SiteAnalyzer(site_store.create_site_store(settings.store_dir), privacy_summarizer, settings)


def create_app(
    settings: settings_mod.AppSettings | None = None,
    site_analyzer: analyzer.SiteAnalyzer | None = None,
) -> fastapi.FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Overrides the environment-derived settings.
        site_analyzer: Pre-built orchestrator; built on start-up
            from *settings* when omitted.
    """
    settings = settings or settings_mod.get_settings()
    logger.set_level(settings.log_level)

    @contextlib.asynccontextmanager
    async def lifespan(app: fastapi.FastAPI) -> AsyncGenerator[None]:
        if getattr(app.state, "analyzer", None) is None:
            app.state.analyzer = build_analyzer(settings)
        log.section("DataGuardian Server Started")
        log.info("Environment", {"env": settings.environment, "store": settings.store_dir or "memory"})
        yield
        log.info("Server shutting down")

    app = fastapi.FastAPI(title="DataGuardian Privacy Analysis Server", lifespan=lifespan)
    app.state.settings = settings
    app.state.analyzer = site_analyzer

    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(sites.router)
    sites.register_error_handlers(app)
    return app


def main() -> None:
    """Entry point for running the server."""
    settings = settings_mod.get_settings()
    # Configure observability before any agents are created.
    observability_setup.setup()

    log.success(f"Server listening on {settings.host}:{settings.port}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
