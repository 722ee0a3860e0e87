"""
Chunked file uploader.

Drives one upload through the asset service protocol:

1. ``prepare`` issues a file_id for the transfer.
2. The file is sent in 5 MiB chunks, each with a ``content-sha256`` header,
   one request at a time and in file order.
3. ``finalise_api`` declares the transfer complete with the file size,
   chunk count and whole-file SHA-256.
4. ``save`` commits the file as a new asset (``brandId`` required) or as a
   new version of an existing one (``mediaId``).

A failing step stops the upload. Nothing is retried and server-side
sessions left incomplete are not cleaned up.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

from pydantic import ValidationError

from assetbank.api.base import AuthenticatedRequestSender
from assetbank.core.logging import upload_file_id_context
from assetbank.upload.chunker import FileChunker
from assetbank.upload.exceptions import (
    FileReadError,
    InvalidMetadataError,
    TransportError,
    UploadAborted,
    UploadException,
)
from assetbank.upload.models import (
    ChunkDescriptor,
    UploadFailure,
    UploadOutcome,
    UploadRequest,
    UploadResult,
    UploadState,
    UploadSummary,
)

logger = logging.getLogger(__name__)

PREPARE_PATH = "v7/file_cmds/upload/prepare"
CHUNK_PATH = "v7/file_cmds/upload/{file_id}/chunk/{index}"
FINALIZE_PATH = "v7/file_cmds/upload/{file_id}/finalise_api"
SAVE_NEW_PATH = "api/v4/media/save/{file_id}"
SAVE_VERSION_PATH = "api/v4/media/{media_id}/save/{file_id}"

ChunkCallback = Callable[[int, int, int], None]


class _UploadProgress:
    """Where a single upload currently stands; local to one ``upload`` call."""

    def __init__(self) -> None:
        self.state = UploadState.INIT
        self.file_id: Optional[str] = None


class FileUploader:
    """Uploads local files to the asset service."""

    def __init__(self, request_sender: AuthenticatedRequestSender, chunker: Optional[FileChunker] = None):
        """
        Args:
            request_sender: Sender used for every API call
            chunker: File chunker, defaults to the protocol's 5 MiB chunks
        """
        self.request_sender = request_sender
        self.chunker = chunker or FileChunker()

    @classmethod
    def create(cls, request_sender: AuthenticatedRequestSender) -> "FileUploader":
        return cls(request_sender)

    async def upload(
        self,
        file_path: Union[str, Path],
        metadata: Optional[Mapping[str, Any]] = None,
        *,
        cancel_event: Optional[asyncio.Event] = None,
        on_chunk: Optional[ChunkCallback] = None,
    ) -> UploadOutcome:
        """Upload a file and commit it as an asset.

        Args:
            file_path: Local file to upload
            metadata: Asset fields; ``mediaId`` saves a new version of that
                asset, otherwise ``brandId`` is required. Everything else is
                sent as-is with the save request.
            cancel_event: When set, the upload stops before the next step
            on_chunk: Called with (index, chunks_count, bytes_sent) after
                each acknowledged chunk

        Returns:
            UploadResult on success, UploadFailure otherwise. This method
            does not raise for upload faults.
        """
        request = UploadRequest(file_path=Path(file_path), metadata=dict(metadata or {}))
        progress = _UploadProgress()
        token = upload_file_id_context.set(None)

        try:
            result = await self._run(request, progress, cancel_event, on_chunk)
        except UploadAborted as e:
            logger.warning(
                "Upload aborted",
                extra={
                    "file_path": str(request.file_path),
                    "file_id": progress.file_id,
                    "state": progress.state.value,
                },
            )
            last_state = progress.state
            progress.state = UploadState.ABORTED
            return UploadFailure.from_exception(e, e.kind, last_state, progress.file_id)
        except (UploadException, OSError) as e:
            kind = e.kind if isinstance(e, UploadException) else FileReadError.kind
            logger.error(
                f"Upload failed in state {progress.state.value}: {e}",
                extra={
                    "file_path": str(request.file_path),
                    "file_id": progress.file_id,
                    "state": progress.state.value,
                    "error_type": kind,
                    "error": str(e),
                },
            )
            last_state = progress.state
            progress.state = UploadState.FAILED
            return UploadFailure.from_exception(e, kind, last_state, progress.file_id)
        finally:
            upload_file_id_context.reset(token)

        return result

    async def _run(
        self,
        request: UploadRequest,
        progress: _UploadProgress,
        cancel_event: Optional[asyncio.Event],
        on_chunk: Optional[ChunkCallback],
    ) -> UploadResult:
        self._check_cancelled(cancel_event)

        file_id = await self.prepare()
        progress.file_id = file_id
        progress.state = UploadState.PREPARED
        upload_file_id_context.set(file_id)

        file_size = await self.chunker.file_size(request.file_path)
        file_sha256 = await self.chunker.compute_file_hash(request.file_path)
        chunks_count = self.chunker.get_chunk_count(file_size)

        logger.info(
            "Uploading file",
            extra={
                "file_id": file_id,
                "file_path": str(request.file_path),
                "size_bytes": file_size,
                "chunks_count": chunks_count,
            },
        )

        progress.state = UploadState.UPLOADING
        chunks_sent = await self._upload_chunks(
            request.file_path, file_id, chunks_count, cancel_event, on_chunk
        )
        if chunks_sent != chunks_count:
            raise FileReadError(
                f"File changed during upload: sent {chunks_sent} chunks, expected {chunks_count}"
            )

        summary = UploadSummary(
            file_id=file_id,
            file_name=request.file_path.name,
            file_size=file_size,
            chunks_count=chunks_count,
            sha256=file_sha256,
        )
        self._check_cancelled(cancel_event)
        await self.finalize(summary)
        progress.state = UploadState.FINALIZED

        self._check_cancelled(cancel_event)
        result = await self.save(file_id, request)
        progress.state = UploadState.COMMITTED

        logger.info(
            "Upload committed",
            extra={
                "file_id": file_id,
                "media_id": result.media_id,
                "batch_id": result.batch_id,
                "success": result.success,
            },
        )
        return result

    async def prepare(self) -> str:
        """Request a new file_id for an upload."""
        response = await self.request_sender.send("POST", PREPARE_PATH)
        file_id = response.get("file_id") if isinstance(response, dict) else None
        if not file_id:
            raise TransportError("Prepare response did not contain a file_id", "POST", PREPARE_PATH)

        logger.debug("Upload prepared", extra={"file_id": file_id})
        return str(file_id)

    async def _upload_chunks(
        self,
        file_path: Path,
        file_id: str,
        chunks_count: int,
        cancel_event: Optional[asyncio.Event],
        on_chunk: Optional[ChunkCallback],
    ) -> int:
        chunks_sent = 0
        bytes_sent = 0

        chunks = self.chunker.iter_chunks(file_path, file_id)
        try:
            async for chunk in chunks:
                self._check_cancelled(cancel_event)
                await self.upload_chunk(chunk)
                chunks_sent += 1
                bytes_sent += chunk.size
                if on_chunk is not None:
                    on_chunk(chunk.index, chunks_count, bytes_sent)
        finally:
            await chunks.aclose()

        return chunks_sent

    async def upload_chunk(self, chunk: ChunkDescriptor) -> None:
        """Send one chunk and wait for the service to acknowledge it."""
        path = CHUNK_PATH.format(file_id=chunk.file_id, index=chunk.index)
        await self.request_sender.send(
            "POST",
            path,
            headers={"content-sha256": chunk.sha256},
            content=chunk.data,
        )
        logger.debug(
            "Chunk uploaded",
            extra={"file_id": chunk.file_id, "chunk_index": chunk.index, "size_bytes": chunk.size},
        )

    async def finalize(self, summary: UploadSummary) -> None:
        """Declare the transfer complete."""
        await self.request_sender.send(
            "POST",
            FINALIZE_PATH.format(file_id=summary.file_id),
            data=summary.to_form(),
        )
        logger.debug(
            "Upload finalized",
            extra={"file_id": summary.file_id, "chunks_count": summary.chunks_count},
        )

    async def save(self, file_id: str, request: UploadRequest) -> UploadResult:
        """Commit a finalized upload as a new asset or a new version of one.

        Raises:
            InvalidMetadataError: If neither mediaId nor a non-blank brandId is given
        """
        fields: Dict[str, Any] = dict(request.metadata)
        fields.pop("mediaId", None)

        media_id = request.media_id
        if media_id is not None:
            path = SAVE_VERSION_PATH.format(media_id=media_id, file_id=file_id)
        else:
            brand_id = request.brand_id
            if brand_id is None or brand_id.strip() == "":
                raise InvalidMetadataError("Invalid or Empty brandId")
            path = SAVE_NEW_PATH.format(file_id=file_id)

        response = await self.request_sender.send("POST", path, data=fields)
        if not isinstance(response, dict):
            raise TransportError("Save response was not a JSON object", "POST", path)

        try:
            return UploadResult.model_validate(response)
        except ValidationError as e:
            raise TransportError(f"Malformed save response: {e}", "POST", path) from e

    @staticmethod
    def _check_cancelled(cancel_event: Optional[asyncio.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise UploadAborted("Upload cancelled")
