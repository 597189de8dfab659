from typing import Optional


class SharpApiError(Exception):
    """Base class for every error raised by the client"""


class ConfigurationError(SharpApiError):
    """Missing or invalid client configuration, such as an empty API key"""


class TransportError(SharpApiError):
    """A request failed on the network or came back with a non-2xx status"""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
        url: Optional[str] = None,
    ):
        super().__init__(message)
        self.status = status
        self.body = body
        self.url = url


class DecodingError(SharpApiError):
    """A response body could not be decoded into the expected shape"""


class TaskParameterError(SharpApiError):
    """Task parameters do not match the catalog entry for the task"""
