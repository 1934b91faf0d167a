"""
Capture package.
Failure screenshots for element resolution.
"""

from .artifacts import DiagnosticSink, NullSink, ScreenshotSink

__all__ = [
    "DiagnosticSink",
    "ScreenshotSink",
    "NullSink",
]
