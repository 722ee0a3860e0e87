"""
File chunker for the upload protocol.

The asset service accepts files in fixed 5 MiB chunks, each verified
server-side against a SHA-256 header, and verifies the reassembled file
against a whole-file SHA-256 sent with finalize. Chunks are produced
strictly in file order; the last one may be short.
"""

import hashlib
import logging
from pathlib import Path
from typing import AsyncIterator

import aiofiles
import aiofiles.os

from assetbank.upload.exceptions import FileReadError
from assetbank.upload.models import ChunkDescriptor

logger = logging.getLogger(__name__)

# Chunk size: 5 MiB, fixed by the service
CHUNK_SIZE = 5 * 1024 * 1024  # 5,242,880 bytes


class FileChunker:
    """
    Splits a local file into upload chunks.

    Features:
    - Fixed-size chunks with SHA-256 hex digest per chunk
    - Whole-file SHA-256 independent of chunk boundaries
    - Async file reading; handles are closed on every exit path
    """

    def __init__(self, chunk_size: int = CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size

    def get_chunk_count(self, file_size: int) -> int:
        """Calculate number of chunks for a file of given size."""
        return (file_size + self.chunk_size - 1) // self.chunk_size

    async def file_size(self, file_path: Path) -> int:
        """Size of a regular file in bytes."""
        try:
            stat_result = await aiofiles.os.stat(file_path)
        except OSError as e:
            raise FileReadError(f"Cannot stat {file_path}: {e}") from e
        return stat_result.st_size

    async def compute_file_hash(self, file_path: Path) -> str:
        """
        Compute SHA-256 hex digest of the entire file.

        This is the checksum sent with finalize.
        """
        hasher = hashlib.sha256()

        try:
            async with aiofiles.open(file_path, "rb") as f:
                while True:
                    block = await f.read(self.chunk_size)
                    if not block:
                        break
                    hasher.update(block)
        except OSError as e:
            raise FileReadError(f"Cannot read {file_path}: {e}") from e

        return hasher.hexdigest()

    async def iter_chunks(self, file_path: Path, file_id: str) -> AsyncIterator[ChunkDescriptor]:
        """
        Read the file sequentially and yield one descriptor per non-empty block.

        Yields:
            ChunkDescriptor with index starting at 0
        """
        try:
            async with aiofiles.open(file_path, "rb") as f:
                index = 0
                while True:
                    data = await f.read(self.chunk_size)
                    if not data:
                        break
                    yield ChunkDescriptor(
                        file_id=file_id,
                        index=index,
                        data=data,
                        sha256=hashlib.sha256(data).hexdigest(),
                    )
                    index += 1
        except OSError as e:
            raise FileReadError(f"Cannot read {file_path}: {e}") from e
