"""Service bootstrap: tracing first, then the HTTP listener.

Usage:
    fabric-telemetry            # console script
    python -m fabric_telemetry.server
"""

import signal
import sys
from types import FrameType
from typing import Optional

import uvicorn

from fabric_telemetry.core import settings, setup_logging
from fabric_telemetry.core.config import Settings
from fabric_telemetry.core.logging import get_logger
from fabric_telemetry.core.tracing import TracingSubsystem
from fabric_telemetry.main import create_app

logger = get_logger(__name__)


def install_signal_handlers(tracing: TracingSubsystem) -> None:
    """Shut tracing down on SIGTERM, then exit.

    uvicorn captures SIGTERM while serving and re-raises it once the server
    has stopped, so this handler runs after in-flight requests are drained.
    Shutdown failure is logged but never prevents the exit.
    """

    def _handle_sigterm(signum: int, frame: Optional[FrameType]) -> None:
        logger.info("Received signal %s, shutting down", signal.Signals(signum).name)
        tracing.shutdown()
        sys.exit(0)

    signal.signal(signal.SIGTERM, _handle_sigterm)


def run(app_settings: Settings) -> None:
    """Start tracing, build the app and serve it until terminated."""
    tracing = TracingSubsystem(app_settings)
    tracing.start(set_global=True)
    install_signal_handlers(tracing)

    try:
        app = create_app(settings=app_settings, tracing=tracing)

        logger.info("Server is running on http://localhost:%d", app_settings.port)
        logger.info(
            'Use `curl -H "%s: tenant-a" http://localhost:%d%s/fabric/discover` to test!',
            app_settings.tenant_header,
            app_settings.port,
            app_settings.api_prefix,
        )

        uvicorn.run(
            app,
            host=app_settings.host,
            port=app_settings.port,
            log_level=app_settings.log_level.lower(),
            log_config=None,
        )
    finally:
        # No-op when the SIGTERM handler already terminated tracing.
        tracing.shutdown()


def main() -> None:
    setup_logging()
    run(settings)


if __name__ == "__main__":
    main()
