"""Upload data models."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

ERROR_PREFIX = "Unable to upload file. "


class UploadState(str, Enum):
    """Lifecycle of a single upload."""

    INIT = "init"
    PREPARED = "prepared"  # file_id issued by the service
    UPLOADING = "uploading"  # chunk loop in progress
    FINALIZED = "finalized"  # service holds the complete file
    COMMITTED = "committed"  # saved as an asset
    FAILED = "failed"  # terminal, entered on the first fault
    ABORTED = "aborted"  # terminal, entered on cancellation


class UploadRequest(BaseModel):
    """File to upload together with the asset metadata bag."""

    file_path: Path
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def media_id(self) -> Optional[str]:
        """Existing asset to add a version to, if any."""
        value = self.metadata.get("mediaId")
        return None if value is None else str(value)

    @property
    def brand_id(self) -> Optional[str]:
        value = self.metadata.get("brandId")
        return None if value is None else str(value)


@dataclass
class ChunkDescriptor:
    """One chunk of the source file, alive only while it is being sent."""

    file_id: str
    index: int
    data: bytes
    sha256: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class UploadSummary:
    """Aggregate state of the chunk loop, consumed by finalize."""

    file_id: str
    file_name: str
    file_size: int
    chunks_count: int
    sha256: str

    def to_form(self) -> Dict[str, Any]:
        """Form fields of the finalize request."""
        return {
            "fileName": self.file_name,
            "fileSize": self.file_size,
            "chunksCount": self.chunks_count,
            "sha256": self.sha256,
        }


class UploadResult(BaseModel):
    """Response of the save call for a committed asset.

    Keys the service returns beyond the documented ones are kept.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    success: bool = False
    # Identifiers and items are passed through with whatever types the service uses
    media_items: Optional[List[Any]] = Field(default_factory=list, alias="mediaitems")
    batch_id: Optional[Any] = Field(None, alias="batchId")
    media_id: Optional[Any] = Field(None, alias="mediaid")

    @property
    def ok(self) -> bool:
        return True

    def to_payload(self) -> Dict[str, Any]:
        """Return the result in the shape the service produced it."""
        return self.model_dump(by_alias=True)


class UploadFailure(BaseModel):
    """Error variant returned instead of raising out of ``upload``."""

    model_config = ConfigDict(populate_by_name=True)

    error: str = Field(..., alias="Error")
    kind: str = Field(..., description="transport, validation, io, aborted or upload")
    state: UploadState = Field(..., description="Terminal state, failed or aborted")
    last_state: UploadState = Field(..., description="Last state the upload reached before the fault")
    file_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        kind: str,
        last_state: UploadState,
        file_id: Optional[str] = None,
    ) -> "UploadFailure":
        state = UploadState.ABORTED if kind == "aborted" else UploadState.FAILED
        return cls(
            error=f"{ERROR_PREFIX}{exc}",
            kind=kind,
            state=state,
            last_state=last_state,
            file_id=file_id,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {"Error": self.error}


UploadOutcome = Union[UploadResult, UploadFailure]
