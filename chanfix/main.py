#!/usr/bin/env python3
"""
Main entry point for the ChanFix service
"""

import asyncio
import logging
import sys

from .bot.manager import run_bot
from .config import ConfigError, ConfigLoader
from .enrollment.repository import EnrollmentRepository
from .errors.handling import log_error
from .errors.internal import ParsingError

# Configure logging after imports to prevent other modules from configuring it
from .logging_config import LoggerConfigurator

configurator = LoggerConfigurator()
configurator.configure()


def health_check(loader: ConfigLoader | None = None) -> bool:
    """Validate the configuration and the enrollment file without connecting."""
    loader = loader or ConfigLoader()
    logging.info("🏥 Health check mode")
    try:
        config = loader.load()
        channels = EnrollmentRepository(config.enrollment_file).load()
    except FileNotFoundError:
        logging.error(f"❌ Health check failed: {loader.path} does not exist")
        return False
    except (ConfigError, ParsingError) as e:
        logging.error(f"❌ Health check failed: {e}")
        return False
    logging.info(
        f"✅ Health check passed - server={config.server} channels={len(channels)}"
    )
    return True


async def main() -> None:
    """Load configuration and run the service until it is told to stop.

    Raises:
        SystemExit: If configuration or enrollments cannot be loaded.
    """
    try:
        logging.info("🚀 Starting ChanFix")
        config = ConfigLoader().get_configuration()
        await run_bot(config)
    except asyncio.CancelledError:
        raise
    except KeyboardInterrupt:
        pass
    except ParsingError as e:
        log_error("Enrollment file could not be loaded", e)
        sys.exit(1)
    finally:
        logging.info("✅ Application shutdown complete")


def run(argv: list[str] | None = None) -> None:
    """Synchronous entry point for the application.

    Raises:
        SystemExit: With status 0/1 for ``--health-check`` or on failure.
    """
    args = sys.argv[1:] if argv is None else argv
    if args and args[0] == "--health-check":
        sys.exit(0 if health_check() else 1)
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        sys.exit(0)
    except asyncio.CancelledError:
        sys.exit(0)
    except Exception as e:
        log_error("Top-level error", e)
        sys.exit(1)


if __name__ == "__main__":
    run()
