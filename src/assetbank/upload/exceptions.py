"""Custom exceptions for the upload client."""

from typing import Optional


class UploadException(Exception):
    """Base exception for upload failures."""

    kind = "upload"


class TransportError(UploadException):
    """Exception raised when a request fails on the network or with a non-2xx status."""

    kind = "transport"

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        path: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.method = method
        self.path = path
        self.status_code = status_code


class InvalidMetadataError(UploadException):
    """Exception raised when the asset metadata cannot be committed."""

    kind = "validation"


class FileReadError(UploadException):
    """Exception raised when the source file is unreadable or changes mid-upload."""

    kind = "io"


class UploadAborted(UploadException):
    """Exception raised when an upload is cancelled between steps."""

    kind = "aborted"
