"""
Run FieldWorkBook with `python -m app`.
"""
import uvicorn
from app.core.config import Environment, settings
from app.core.logging import logger


def main():
    api = settings.api
    backend = "SQLite" if settings.database.is_sqlite else "PostgreSQL"
    logger.info(f"Serving {api.title} v{api.version} on {api.host}:{api.port} ({settings.environment.value})")
    logger.info(f"Database backend: {backend}; attachments in {settings.uploads.directory}")

    uvicorn.run(
        "app.main:app",
        host=api.host,
        port=api.port,
        reload=settings.environment == Environment.DEVELOPMENT and settings.debug,
        log_level=settings.logging.level.lower(),
        access_log=False,
    )


if __name__ == "__main__":
    main()
