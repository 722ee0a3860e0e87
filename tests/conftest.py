"""Pytest configuration and shared fixtures."""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import pytest

from assetbank.api.base import AuthenticatedRequestSender
from assetbank.upload.exceptions import TransportError

FILE_ID = "9f8c5b2e-4d1a-4c3b-8e7f-0a1b2c3d4e5f"

SAVE_RESPONSE = {
    "success": True,
    "mediaitems": [{"original": "https://cdn.example.com/original.png", "type": "original"}],
    "batchId": "batch-1",
    "mediaid": "media-1",
}


@dataclass
class SentRequest:
    """One request recorded by the fake sender."""

    method: str
    path: str
    headers: Dict[str, str]
    data: Optional[Dict[str, Any]]
    content: Optional[bytes]


class FakeRequestSender(AuthenticatedRequestSender):
    """In-memory asset service that records every request it receives."""

    def __init__(
        self,
        file_id: Optional[str] = FILE_ID,
        save_response: Any = None,
        fail_on: Optional[Callable[[str], bool]] = None,
    ):
        self.file_id = file_id
        self.save_response = dict(SAVE_RESPONSE) if save_response is None else save_response
        self.fail_on = fail_on
        self.calls: List[SentRequest] = []

    async def send(self, method, path, *, headers=None, data=None, content=None):
        self.calls.append(
            SentRequest(
                method=method,
                path=path,
                headers=dict(headers or {}),
                data=dict(data) if data is not None else None,
                content=content,
            )
        )
        if self.fail_on is not None and self.fail_on(path):
            raise TransportError(f"{method} {path} failed with status 500", method, path, 500)

        if path.endswith("/prepare"):
            return {"file_id": self.file_id} if self.file_id else {}
        if "/chunk/" in path or path.endswith("/finalise_api"):
            return None
        return self.save_response

    @property
    def paths(self) -> List[str]:
        return [call.path for call in self.calls]

    @property
    def chunk_calls(self) -> List[SentRequest]:
        return [call for call in self.calls if "/chunk/" in call.path]

    @property
    def finalize_calls(self) -> List[SentRequest]:
        return [call for call in self.calls if call.path.endswith("/finalise_api")]

    @property
    def save_calls(self) -> List[SentRequest]:
        return [call for call in self.calls if call.path.startswith("api/v4/media/")]


@pytest.fixture
def request_sender():
    """Fake request sender with a successful save response."""
    return FakeRequestSender()


@pytest.fixture
def make_file(tmp_path):
    """Write a file with deterministic content of the given size."""

    def _make_file(size: int, name: str = "asset.bin"):
        pattern = bytes(range(256))
        content = (pattern * (size // len(pattern) + 1))[:size]
        path = tmp_path / name
        path.write_bytes(content)
        return path, content

    return _make_file


@pytest.fixture
def make_sender():
    """Factory for fake request senders with custom behaviour."""
    return FakeRequestSender
