"""
Engine components - the stages behind CompletionEngine.

The synthesizer turns the context built by the locator and classifier into
ranked candidates, drawing on the registry and the file system sources.
"""

from __future__ import annotations

from .registry import SpecRegistry
from .synthesizer import CompletionSynthesizer

__all__ = [
    "CompletionSynthesizer",
    "SpecRegistry",
]
