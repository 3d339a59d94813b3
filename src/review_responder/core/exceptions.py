"""
Exception taxonomy for Review Responder Service
"""
from typing import Optional


class ReviewResponderError(Exception):
    """Base class for service errors"""


class NotConfiguredError(ReviewResponderError):
    """An integration is missing its credentials"""


class ResourceNotFoundError(ReviewResponderError):
    """A requested company or review does not exist"""


class UpstreamAPIError(ReviewResponderError):
    """An external API answered with a non-success status or was unreachable"""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class TokenRefreshError(UpstreamAPIError):
    """The token endpoint did not hand back an access token"""


class ResponseDecodeError(ReviewResponderError):
    """An external API answered 2xx but the payload could not be parsed"""
