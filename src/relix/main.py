import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from relix import __version__
from relix.config import get_config
from relix.logger import LEVELS, configure_logging, get_logger
from relix.routers import repositories_api as repositories_router
from relix.services.sources import SourcesManager

if not logging.getLogger().handlers:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Load the repository list once before serving requests."""
    manager = repositories_router.get_manager()
    if manager.read_only:
        logger.warning("Read-only mode, mutations are refused")
    logger.info("relix ready", repositories=len(manager.store.entries))
    yield


app = FastAPI(title="relix", version=__version__, lifespan=lifespan)

app.include_router(repositories_router.router)
app.include_router(repositories_router.status_router)


def run_server(host: str | None = None, port: int | None = None, read_only: bool = False) -> None:
    """Run the relix API server.

    Args:
        host: Optional host to override config.
        port: Optional port number to override config.
        read_only: Refuse every mutation even when running as root.
    """
    config = get_config()
    if read_only:
        repositories_router._manager = SourcesManager(config, read_only=True)
        repositories_router._manager.load_all()
    uvicorn.run(app, host=host or config.server.host, port=port or config.server.port)


def main() -> None:
    """Main entry point with CLI argument parsing."""
    import argparse

    parser = argparse.ArgumentParser(
        description="relix - APT repository manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sudo relix                   # Serve on the configured host/port
  relix --port 9000            # Read-only when not run as root
  sudo relix --read-only       # Browse and probe without editing
        """,
    )

    parser.add_argument("--host", metavar="HOST", help="Interface to bind")
    parser.add_argument("--port", type=int, metavar="PORT", help="Port number to run the server on")
    parser.add_argument("--read-only", action="store_true", help="Never modify repository files")
    parser.add_argument("--log-level", choices=sorted(LEVELS), help="Override advanced.log_level")
    parser.add_argument(
        "--version",
        action="version",
        version=f"relix {__version__}",
    )

    args = parser.parse_args()

    if args.log_level:
        configure_logging(args.log_level)

    run_server(host=args.host, port=args.port, read_only=args.read_only)


if __name__ == "__main__":
    main()
