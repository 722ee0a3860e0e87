"""
Chunked upload client

Uploads local files to the asset service: prepare, chunked transfer with
per-chunk SHA-256 verification, finalize, and save as a new asset or as a
new version of an existing one.
"""

from assetbank.upload.chunker import CHUNK_SIZE, FileChunker
from assetbank.upload.exceptions import (
    FileReadError,
    InvalidMetadataError,
    TransportError,
    UploadAborted,
    UploadException,
)
from assetbank.upload.models import UploadFailure, UploadResult, UploadState
from assetbank.upload.uploader import FileUploader

__all__ = [
    "CHUNK_SIZE",
    "FileChunker",
    "FileUploader",
    "UploadResult",
    "UploadFailure",
    "UploadState",
    "UploadException",
    "TransportError",
    "InvalidMetadataError",
    "FileReadError",
    "UploadAborted",
]
