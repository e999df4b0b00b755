from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from reposcout.core.config import settings
from reposcout.api.health import router as health_router
from reposcout.api.search import router as search_router
from reposcout.pipeline.orchestrator import PipelineDependencies
from reposcout.services.github import build_github_client, has_github_credentials
from reposcout.services.llm import build_llm_client, has_llm_credentials
from reposcout.services.search_cache import SearchCache

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.environment == "development" else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="RepoScout - natural-language GitHub repository search and ranking",
    version="1.0.0"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify your frontend domain
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(search_router, prefix="/api/v1")   # /api/v1/search
app.include_router(health_router, prefix="/api")      # /api/health


@app.on_event("startup")
async def on_startup():
    """
    Startup:
    1. Initialize structured logging
    2. Create the result cache
    3. Build the GitHub and LLM clients (only when credentials exist)
    """
    logger.info("Starting RepoScout backend...")

    from reposcout.utils.logging import setup_logging
    setup_logging()

    app.state.search_cache = SearchCache(
        ttl_seconds=settings.cache_ttl_minutes * 60,
        max_entries=settings.cache_max_entries,
    )

    app.state.pipeline_deps = None
    if not has_github_credentials(settings):
        logger.warning("GITHUB_TOKEN is not set; /api/v1/search will return MISSING_ENV_VAR")
        return
    if not has_llm_credentials(settings):
        logger.warning("No LLM API key is set; /api/v1/search will return MISSING_ENV_VAR")
        return

    app.state.pipeline_deps = PipelineDependencies(
        index=build_github_client(settings),
        llm=build_llm_client(settings),
        settings=settings,
    )
    logger.info("[OK] Search pipeline ready")


@app.on_event("shutdown")
async def on_shutdown():
    deps = getattr(app.state, "pipeline_deps", None)
    if deps is None:
        return
    await deps.index.aclose()
    await deps.llm.close()
    logger.info("Search pipeline clients closed")
