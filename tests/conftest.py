from __future__ import annotations

from collections.abc import Iterator

import pytest

from shellpipe.config.settings import reset_settings


@pytest.fixture
def anyio_backend() -> str:
    """Process handling relies on asyncio subprocess transports."""
    return "asyncio"


@pytest.fixture(autouse=True)
def isolate_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Prevent the developer's SHELLPIPE_* environment from leaking into tests."""
    for key in (
        "SHELLPIPE_READ_CHUNK_SIZE",
        "SHELLPIPE_ENCODING",
        "SHELLPIPE_LOG_LEVEL",
        "SHELLPIPE_LOG_FILE",
    ):
        monkeypatch.delenv(key, raising=False)
    reset_settings()
    try:
        yield
    finally:
        reset_settings()

