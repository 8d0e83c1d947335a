"""Run the Catalyst API with uvicorn; reloads on source changes in debug mode."""
import uvicorn

from be.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "be.api:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        reload_dirs=["be", "ai", "config"] if settings.debug else None,
        log_level=settings.logging.level.lower(),
    )
