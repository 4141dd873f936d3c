"""Main entry point for the pg-crud admin service.

Run the server:
    >>> python -m pg_crud

Run with environment variables:
    >>> DATABASE_HOST=localhost DATABASE_NAME=zoo ADMIN_ALLOWED_TABLES=visitors,tickets pg-crud
"""

import uvicorn

from pg_crud.api.app import create_app
from pg_crud.config.settings import get_settings
from pg_crud.observability.logging import configure_logging


def main() -> None:
    """Configure logging and serve the admin API with uvicorn."""
    settings = get_settings()
    configure_logging(
        level=settings.observability.log_level,
        log_format=settings.observability.log_format,
    )
    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
