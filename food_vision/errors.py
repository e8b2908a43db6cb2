"""Error taxonomy for the on-device pipeline and the remote worker client.

On-device errors are caught at the ``analyze_food`` boundary and turned into
the fallback result. Remote errors are always raised to the caller.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    LOAD_DEGRADATION = "load_degradation"
    IMAGE_ACCESS = "image_access"
    FORMAT = "format"
    INFERENCE = "inference"
    REMOTE_RATE_LIMITED = "remote_rate_limited"
    REMOTE_INVALID_IMAGE = "remote_invalid_image"
    REMOTE_HTTP = "remote_http"
    REMOTE_MALFORMED = "remote_malformed"


class PipelineError(Exception):
    """Base class for on-device stage failures."""

    kind: ErrorKind = ErrorKind.INFERENCE


class ImageAccessError(PipelineError):
    kind = ErrorKind.IMAGE_ACCESS


class FormatError(PipelineError):
    kind = ErrorKind.FORMAT


class InferenceError(PipelineError):
    kind = ErrorKind.INFERENCE


class TableValidationError(ValueError):
    """Raised when a class or nutrition table fails load-time validation."""


class RemoteAnalysisError(Exception):
    """Base class for remote worker failures."""

    kind: ErrorKind = ErrorKind.REMOTE_HTTP

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(RemoteAnalysisError):
    kind = ErrorKind.REMOTE_RATE_LIMITED


class InvalidImageError(RemoteAnalysisError):
    kind = ErrorKind.REMOTE_INVALID_IMAGE


class MalformedResponseError(RemoteAnalysisError):
    kind = ErrorKind.REMOTE_MALFORMED

