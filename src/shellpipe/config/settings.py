"""Environment-driven settings for the piping engine."""

from __future__ import annotations

import codecs
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

ENV_PREFIX = "SHELLPIPE_"
DEFAULT_READ_CHUNK_SIZE = 4096
DEFAULT_ENCODING = "utf-8"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True, slots=True)
class PipingSettings:
    """Tunables for process I/O and logging."""

    read_chunk_size: int = DEFAULT_READ_CHUNK_SIZE
    encoding: str = DEFAULT_ENCODING
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> PipingSettings:
        """Build settings from ``SHELLPIPE_*`` environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            read_chunk_size=_read_positive_int(
                env, f"{ENV_PREFIX}READ_CHUNK_SIZE", DEFAULT_READ_CHUNK_SIZE
            ),
            encoding=_read_encoding(env, f"{ENV_PREFIX}ENCODING"),
            log_level=(
                env.get(f"{ENV_PREFIX}LOG_LEVEL", "").strip().upper()
                or DEFAULT_LOG_LEVEL
            ),
            log_file=env.get(f"{ENV_PREFIX}LOG_FILE", "").strip() or None,
        )


def _read_positive_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", key, raw)
        return default
    if value < 1:
        logger.warning("Ignoring %s=%r: must be at least 1", key, raw)
        return default
    return value


def _read_encoding(env: Mapping[str, str], key: str) -> str:
    raw = env.get(key, "").strip()
    if not raw:
        return DEFAULT_ENCODING
    try:
        codecs.lookup(raw)
    except LookupError:
        logger.warning("Ignoring %s=%r: unknown encoding", key, raw)
        return DEFAULT_ENCODING
    return raw


_settings: PipingSettings | None = None


def get_settings() -> PipingSettings:
    """Get the shared settings instance, reading the environment once."""
    global _settings
    if _settings is None:
        _settings = PipingSettings.from_env()
    return _settings


def reset_settings() -> None:
    """Forget cached settings (for testing)."""
    global _settings
    _settings = None
