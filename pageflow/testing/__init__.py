"""Test doubles for code built on pageflow."""

from .recorder import StateRecorder
from .sources import ScriptedPageSource
from .stores import RecordingCacheStore

__all__ = [
    "RecordingCacheStore",
    "ScriptedPageSource",
    "StateRecorder",
]
