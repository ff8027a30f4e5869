"""Mixins for the Shortcode Language Server."""

from __future__ import annotations

from .base import LSPServerBase
from .completion import CompletionMixin

__all__ = ["CompletionMixin", "LSPServerBase"]
