"""
Logfire observability configuration for AdStudio.

Provides tracing for:
- Backend requests made by ApiClient (one span per request)
- httpx transport calls (via logfire's httpx instrumentation)
- Pydantic validation of API envelopes

Usage:
    # At startup (e.g., in the CLI entry point)
    from adstudio.core.observability import setup_logfire
    setup_logfire()

    # Around an operation
    from adstudio.core.observability import span

    with span("load_metrics", experiment_id=experiment_id):
        ...

Environment Variables:
    LOGFIRE_TOKEN: Your Logfire write token (required for sending data)
    LOGFIRE_PROJECT_NAME: Project name in Logfire dashboard
    LOGFIRE_ENVIRONMENT: Environment name (development, staging, production)
"""

import contextlib
import logging
import os
from typing import Any, ContextManager, Optional

import logfire

logger = logging.getLogger(__name__)

_logfire_configured = False


def setup_logfire(
    project_name: Optional[str] = None,
    environment: Optional[str] = None,
    service_name: str = "adstudio"
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

    project = project_name or os.environ.get("LOGFIRE_PROJECT_NAME", "adstudio")
    env = environment or os.environ.get("LOGFIRE_ENVIRONMENT", "development")

    try:
        logfire.configure(
            token=token,
            service_name=service_name,
            environment=env,
            send_to_logfire=True,
        )
        logfire.instrument_httpx()
        logfire.instrument_pydantic()

        _logfire_configured = True
        logger.info(f"Logfire configured: project={project}, environment={env}")
        return True

    except Exception as e:
        logger.error(f"Failed to configure Logfire: {e}")
        return False


def is_configured() -> bool:
    return _logfire_configured


def span(name: str, **attributes: Any) -> ContextManager[Any]:
    """Open a logfire span, or a null context when Logfire is not configured."""
    if not _logfire_configured:
        return contextlib.nullcontext()
    return logfire.span(name, **attributes)
