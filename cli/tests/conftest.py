"""Shared pytest fixtures for gscp tests."""

import io
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

CLI_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(CLI_ROOT / "src"))
sys.path.insert(0, str(CLI_ROOT / "scripts"))
sys.path.append(str(CLI_ROOT))


class FakeWriter(io.BytesIO):
    """Stands in for a BlobWriter: records what was committed on close."""

    def __init__(self, fail_on_close=None):
        super().__init__()
        self.closes = 0
        self.terminates = 0
        self.committed = None
        self.fail_on_close = fail_on_close

    def close(self):
        self.closes += 1
        if self.fail_on_close is not None:
            raise self.fail_on_close
        if not self.closed:
            self.committed = self.getvalue()
        super().close()

    def terminate(self):
        self.terminates += 1
        super().close()


class FakeBlob:
    """Stands in for google.cloud.storage.Blob."""

    def __init__(self, data=b""):
        self.data = data
        self.size = len(data)
        self.reload = MagicMock()
        self.open_calls = []
        self.writer = FakeWriter()

    def open(self, mode, **kwargs):
        self.open_calls.append((mode, kwargs))
        if mode == "rb":
            return io.BytesIO(self.data)
        return self.writer


@pytest.fixture
def settings() -> dict:
    """Default settings without touching any config file."""
    import config

    return dict(config.DEFAULTS)


@pytest.fixture
def fake_blob() -> FakeBlob:
    return FakeBlob(b"remote object payload")


@pytest.fixture
def storage_client(fake_blob: FakeBlob) -> MagicMock:
    """A storage client whose every bucket/blob lookup returns fake_blob."""
    client = MagicMock()
    client.bucket.return_value.blob.return_value = fake_blob
    return client
