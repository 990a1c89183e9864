"""
Error types raised by the AdStudio client core.

Three kinds of failure reach callers:
- TransportError: the request never produced a usable response
  (network failure, timeout, non-2xx HTTP status, undecodable body)
- ApiError: the backend answered with an envelope whose code != 0
- WorkflowValidationError: a workflow guard rejected the action before
  any request was made
"""

from typing import Optional


class AdStudioError(Exception):
    """Base class for all client-side errors."""

    pass


class TransportError(AdStudioError):
    """Network failure, timeout or non-2xx HTTP response."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class ApiError(AdStudioError):
    """Well-formed envelope with a non-zero code."""

    def __init__(self, code: int, message: Optional[str] = None, endpoint: Optional[str] = None):
        self.code = code
        self.message = message or f"API returned error code: {code}"
        self.endpoint = endpoint
        super().__init__(self.message)


class WorkflowValidationError(AdStudioError):
    """Guard failure detected before any network call."""

    pass
