# resilient_ui/capture/artifacts.py
from __future__ import annotations

"""Failure artifacts
--------------------
Best-effort screenshot capture for failed element resolution. A sink never
raises: a failed capture is logged and reported as `None` so the primary
error is never masked.
"""

import time
from pathlib import Path
from typing import Any, Optional, Protocol, runtime_checkable

from resilient_ui.utils.config import get_settings
from resilient_ui.utils.logger import get_logger


@runtime_checkable
class DiagnosticSink(Protocol):
    async def capture(self, scope: Any, name: str) -> Optional[Path]:
        ...


def slugify(text: str) -> str:
    out = "".join(ch.lower() if ch.isalnum() else "-" for ch in text)
    while "--" in out:
        out = out.replace("--", "-")
    return out.strip("-")


def artifact_name(diagnostic_context: Optional[str] = None) -> str:
    """
    `locator-failure-<context>-<epoch ms>`; the context is typically a test id
    and only affects the file name.
    """
    ctx = slugify(diagnostic_context) if diagnostic_context else ""
    return f"locator-failure-{ctx or 'unknown-test'}-{int(time.time() * 1000)}"


def _screenshot_target(scope: Any) -> Any:
    # Frames and locators have no page-level screenshot; use the owning page
    if hasattr(scope, "screenshot") and not hasattr(scope, "first"):
        return scope
    page = getattr(scope, "page", None)
    if page is not None and hasattr(page, "screenshot"):
        return page
    return None


class ScreenshotSink:
    """Writes a PNG of the page under the artifacts directory."""

    def __init__(self, artifacts_dir: Optional[Path] = None, *, full_page: Optional[bool] = None):
        settings = get_settings()
        self.artifacts_dir = Path(artifacts_dir) if artifacts_dir else settings.ARTIFACTS_DIR
        self.full_page = settings.FULL_PAGE_SCREENSHOT if full_page is None else full_page
        self.log = get_logger(__name__)

    def _build_path(self, name: str) -> Path:
        safe = "".join(ch if ch.isalnum() or ch in ("-", "_") else "_" for ch in name)
        return self.artifacts_dir / f"{safe}.png"

    async def capture(self, scope: Any, name: str) -> Optional[Path]:
        target = _screenshot_target(scope)
        if target is None:
            self.log.debug(f"No screenshot-capable page for {type(scope).__name__}; skipping capture")
            return None
        out_path = self._build_path(name)
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            await target.screenshot(path=str(out_path), full_page=self.full_page)
        except Exception as e:
            self.log.debug(f"Failure screenshot not captured: {e!r}")
            return None
        return out_path


class NullSink:
    """Captures nothing."""

    async def capture(self, scope: Any, name: str) -> Optional[Path]:
        return None


__all__ = ["DiagnosticSink", "ScreenshotSink", "NullSink", "artifact_name", "slugify"]
