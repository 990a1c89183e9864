"""
Configuration management for AdStudio
"""

import os
from typing import Any, List, Optional
from urllib.parse import urlsplit

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _default_health_url(api_base: str) -> str:
    """Health endpoint lives at the server root, not under the API prefix."""
    parts = urlsplit(api_base)
    if not parts.scheme or not parts.netloc:
        return "/health"
    return f"{parts.scheme}://{parts.netloc}/health"


class Config:
    """Application configuration"""

    # Backend
    API_BASE: str = os.getenv('ADSTUDIO_API_BASE', 'http://localhost:4000/api/v1').rstrip('/')
    API_BASE_FALLBACK: str = os.getenv(
        'ADSTUDIO_API_BASE_FALLBACK', 'http://localhost:4000/api/v1'
    ).rstrip('/')
    HEALTH_URL: str = os.getenv('ADSTUDIO_HEALTH_URL', '') or _default_health_url(API_BASE)

    # Read cache
    CACHE_TTL_SECONDS: float = float(os.getenv('ADSTUDIO_CACHE_TTL_SECONDS', '60'))

    # Transport timeouts (seconds)
    REQUEST_TIMEOUT_SECONDS: float = float(os.getenv('ADSTUDIO_REQUEST_TIMEOUT', '15'))
    CONNECT_TIMEOUT_SECONDS: float = float(os.getenv('ADSTUDIO_CONNECT_TIMEOUT', '10'))

    # Task polling
    TASK_POLL_INTERVAL_SECONDS: float = float(os.getenv('ADSTUDIO_TASK_POLL_INTERVAL', '3'))
    TASK_POLL_TIMEOUT_SECONDS: float = float(os.getenv('ADSTUDIO_TASK_POLL_TIMEOUT', '600'))

    # Workflow defaults
    DEFAULT_FORMATS: List[str] = ['1:1']
    DEFAULT_NUM_VARIANTS: int = 2
    DEFAULT_LANGUAGE: str = 'auto'
    DEFAULT_PAGE_SIZE: int = int(os.getenv('ADSTUDIO_PAGE_SIZE', '100'))

    @classmethod
    def validate(cls) -> bool:
        """Validate configuration values"""
        problems = []

        for key in ('API_BASE', 'API_BASE_FALLBACK'):
            value = getattr(cls, key)
            if not value.startswith(('http://', 'https://')):
                problems.append(f"{key} must be an http(s) URL, got '{value}'")

        for key in ('CACHE_TTL_SECONDS', 'REQUEST_TIMEOUT_SECONDS', 'CONNECT_TIMEOUT_SECONDS'):
            if getattr(cls, key) <= 0:
                problems.append(f"{key} must be positive")

        if problems:
            raise ValueError(f"Invalid configuration: {'; '.join(problems)}")

        return True

    @classmethod
    def get(cls, key: str, default: Optional[Any] = None) -> Optional[Any]:
        """Get configuration value"""
        return getattr(cls, key, default)
