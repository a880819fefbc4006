"""
Logging and Logfire observability configuration for VariantSite.

Services log through the standard ``logging`` module; when a Logfire token
is present, records are forwarded to Logfire and outgoing httpx calls to the
content backend are traced.

Usage:
    # At app startup (API or CLI)
    from variantsite.core.observability import configure_logging, setup_logfire
    configure_logging()
    setup_logfire()

Environment Variables:
    LOG_LEVEL: Root log level (default INFO)
    LOGFIRE_TOKEN: Your Logfire write token (required to send data)
    LOGFIRE_PROJECT_NAME: Project name in Logfire dashboard
    LOGFIRE_ENVIRONMENT: Environment name (development, staging, production)
"""

import os
import logging
from typing import Optional

import logfire

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_logfire_configured = False


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging with the shared format."""
    logging.basicConfig(
        level=(level or os.environ.get("LOG_LEVEL", "INFO")).upper(),
        format=LOG_FORMAT
    )


def setup_logfire(
    project_name: Optional[str] = None,
    environment: Optional[str] = None,
    service_name: str = "variantsite"
) -> bool:
    """
    Configure Logfire for observability.

    Args:
        project_name: Logfire project name (or LOGFIRE_PROJECT_NAME env var)
        environment: Environment name (or LOGFIRE_ENVIRONMENT env var)
        service_name: Service name for tracing

    Returns:
        True if Logfire was configured, False if skipped (no token)
    """
    global _logfire_configured

    if _logfire_configured:
        logger.debug("Logfire already configured")
        return True

    token = os.environ.get("LOGFIRE_TOKEN")
    if not token:
        logger.info("LOGFIRE_TOKEN not set, skipping Logfire configuration")
        return False

    project = project_name or os.environ.get("LOGFIRE_PROJECT_NAME", "variantsite")
    env = environment or os.environ.get("LOGFIRE_ENVIRONMENT", "development")

    try:
        logfire.configure(
            token=token,
            project_name=project,
            service_name=service_name,
            environment=env,
            send_to_logfire=True,
        )

        # Wire up stdlib logging to logfire
        logging.getLogger().addHandler(logfire.LogfireLoggingHandler())

        # Trace model validation of backend documents
        logfire.instrument_pydantic()

        # Trace outgoing requests to the content backend
        logfire.instrument_httpx()

        _logfire_configured = True
        logger.info(f"Logfire configured: project={project}, environment={env}")
        return True

    except Exception as e:
        logger.error(f"Failed to configure Logfire: {e}")
        return False


def is_logfire_configured() -> bool:
    return _logfire_configured
