# resilient_ui/core/errors.py
from __future__ import annotations

"""Error taxonomy
-----------------
Failures surfaced by element resolution, the locator registry and retries.
Retryable vs fatal is decided by a policy predicate, not by class; an
exhausted retry budget re-raises the last original error unchanged.
"""

import functools
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from resilient_ui.selectors.descriptor import ElementDescriptor
    from resilient_ui.selectors.resolver import ResolutionAttempt


class ResilientUIError(Exception):
    """Base class for all package errors."""


class ElementNotFound(ResilientUIError):
    """Every descriptor exhausted its polling budget with zero matches."""

    def __init__(
        self,
        descriptors: Sequence["ElementDescriptor"],
        *,
        attempts: Sequence["ResolutionAttempt"] = (),
        elapsed_ms: int = 0,
        artifact_path: Optional[Path] = None,
        diagnostic_context: Optional[str] = None,
    ) -> None:
        self.descriptors = tuple(descriptors)
        self.attempts = tuple(attempts)
        self.elapsed_ms = elapsed_ms
        self.artifact_path = artifact_path
        self.diagnostic_context = diagnostic_context
        super().__init__(self._build_message())

    def __reduce__(self):
        # args only holds the rendered message; rebuild from the payload instead
        state = {
            "attempts": self.attempts,
            "elapsed_ms": self.elapsed_ms,
            "artifact_path": self.artifact_path,
            "diagnostic_context": self.diagnostic_context,
        }
        return (functools.partial(type(self), **state), (self.descriptors,))

    @property
    def payloads(self) -> list[str]:
        return [d.payload for d in self.descriptors]

    def _build_message(self) -> str:
        tried = ", ".join(d.describe() for d in self.descriptors) or "<none>"
        lines = [f"No candidate matched after {self.elapsed_ms} ms. Tried: {tried}"]
        for a in self.attempts:
            detail = f"  - {a.descriptor.describe()}: {a.tries} poll(s) in {a.elapsed_ms} ms"
            if a.last_error is not None:
                detail += f" (last error: {a.last_error})"
            lines.append(detail)
        if self.diagnostic_context:
            lines.append(f"context: {self.diagnostic_context}")
        lines.append(f"screenshot: {self.artifact_path if self.artifact_path else '<not captured>'}")
        return "\n".join(lines)


class TransientQueryError(ResilientUIError):
    """A poll raised while evaluating a descriptor; recorded, never raised to callers."""

    def __init__(self, descriptor: "ElementDescriptor", cause: BaseException) -> None:
        self.descriptor = descriptor
        self.cause = cause
        super().__init__(f"{descriptor.describe()} -> {cause!r}")

    def __reduce__(self):
        return (type(self), (self.descriptor, self.cause))


class LocatorNotRegistered(ResilientUIError, KeyError):
    """Registry lookup for an unknown section or key."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "locator not registered"


class RegistryError(ResilientUIError, ValueError):
    """Locator registry file could not be parsed or validated."""


__all__ = [
    "ResilientUIError",
    "ElementNotFound",
    "TransientQueryError",
    "LocatorNotRegistered",
    "RegistryError",
]
