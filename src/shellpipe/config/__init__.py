"""Configuration management for shellpipe."""

from __future__ import annotations

from shellpipe.config.settings import PipingSettings, get_settings, reset_settings

__all__ = [
    "PipingSettings",
    "get_settings",
    "reset_settings",
]
