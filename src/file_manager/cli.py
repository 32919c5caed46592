# cli.py
import logging
import sys

import click
import uvicorn

from file_manager.config.settings import get_settings
from file_manager.errors import ConfigurationError
from file_manager.logging_config import configure_logging

logger = logging.getLogger(__name__)


@click.group()
def cli():
    """CLI commands for the File Manager"""
    pass


@cli.command()
@click.option("--host", default=None, help="Interface to bind (defaults to HOST setting)")
@click.option("--port", type=int, default=None, help="Port to listen on (defaults to PORT setting)")
@click.option("--reload", is_flag=True, help="Restart on code changes (development only)")
def serve(host, port, reload):
    """Run the HTTP server. Exits with status 1 if the storage credential is missing."""
    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        settings.require_storage_credentials()
    except ConfigurationError as e:
        logger.error(e.message)
        sys.exit(1)

    host = host or settings.host
    port = port or settings.port
    logger.info(f"{settings.app_name} running on port {port}")
    logger.info(f"Access the application at: http://localhost:{port}")
    uvicorn.run(
        "file_manager.main:create_app_from_env",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    print("Current Configuration:")
    for label, value in settings.describe().items():
        print(f"  {label}: {value}")


if __name__ == "__main__":
    cli()
