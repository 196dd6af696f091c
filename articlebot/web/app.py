"""FastAPI web interface for article generation."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from articlebot import __version__
from articlebot.core.exceptions import InvalidInput
from articlebot.core.generator import ArticleGenerator
from articlebot.models.content import ArticleRequest
from articlebot.models.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_STATIC_DIR = Path(__file__).parent / "static"


def create_app(
    settings: Optional[Settings] = None,
    generator_factory: Optional[Callable[..., ArticleGenerator]] = None,
) -> FastAPI:
    """Build the web app.

    Args:
        settings: Settings instance; loaded from the environment if omitted
        generator_factory: Builds a generator from (settings, request)
    """
    settings = settings or Settings()
    generator_factory = generator_factory or ArticleGenerator.from_request
    static_dir = Path(settings.static_dir) if settings.static_dir else DEFAULT_STATIC_DIR

    app = FastAPI(
        title="Article Generator",
        description="Generate articles with cover images and commit them to GitHub",
        version=__version__,
    )

    @app.get("/", include_in_schema=False)
    async def index():
        """Serve the generator UI."""
        return FileResponse(static_dir / "index.html")

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": __version__,
            "api_keys": {
                "openai": bool(settings.openai_api_key),
                "github": bool(settings.github_token),
            },
        }

    @app.post("/api/generate")
    async def generate(request: ArticleRequest):
        """Generate and publish the requested number of articles."""
        try:
            generator = generator_factory(settings, request)
            report = await generator.generate(request)
        except InvalidInput as e:
            logger.warning(f"Rejected generation request: {e}")
            return JSONResponse(status_code=400, content={"error": str(e)})
        except Exception as e:
            logger.error(f"Generation error: {e}")
            return JSONResponse(status_code=500, content={"error": str(e)})

        if not report.success:
            return JSONResponse(
                status_code=500,
                content={
                    "error": report.message,
                    "rounds": [r.model_dump() for r in report.rounds],
                },
            )

        return {
            "success": True,
            "message": report.message,
            "rounds": [r.model_dump() for r in report.rounds],
        }

    app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    return app
