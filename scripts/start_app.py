#!/usr/bin/env python3
"""Start the FastAPI application with Logfire error tracking for startup errors."""

import sys
import logfire
import uvicorn

from kycauth.config import Settings
from kycauth.util.logging import setup_logging
from kycauth.util.observability import configure_logfire


def main() -> int:
    """Start the application and log any startup errors to Logfire."""
    settings = Settings()

    # Configure Logfire and logging early to catch startup errors
    configure_logfire(settings)
    setup_logging(settings)

    try:
        # Production refuses placeholder JWT secrets before binding the port
        settings.validate_secrets()

        logfire.info("Starting FastAPI application", environment=settings.environment)

        uvicorn.run(
            "kycauth.interface.api.app:app",
            host="0.0.0.0",
            port=settings.port,
            log_level="debug" if settings.debug else "info",
        )

        return 0

    except Exception as e:
        logfire.error(
            "Application startup failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        # Re-raise so the container fails properly
        raise


if __name__ == "__main__":
    sys.exit(main())
