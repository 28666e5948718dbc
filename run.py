import uvicorn

from profquery.core.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "profquery.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",  # Only reload in development
        log_level=settings.log_level.lower(),
    )
