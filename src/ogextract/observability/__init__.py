"""Logging setup."""

from __future__ import annotations

from .logging import add_source_host, configure_logging

__all__ = ["add_source_host", "configure_logging"]
