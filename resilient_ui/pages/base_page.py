# resilient_ui/pages/base_page.py
from __future__ import annotations

from typing import Any, Iterable, Optional, Union

from playwright.async_api import Locator, Page

from resilient_ui.core.retry import with_page_retry
from resilient_ui.selectors.descriptor import DescriptorLike, ElementDescriptor, as_descriptors
from resilient_ui.selectors.registry import LocatorRegistry, get_registry
from resilient_ui.selectors.resolver import LocatorResolver
from resilient_ui.utils.config import Settings, get_settings
from resilient_ui.utils.logger import get_logger

Target = Union[str, DescriptorLike, Iterable[DescriptorLike]]


class BasePage:
    """
    Page-object base. Targets may be descriptors, descriptor chains, or a
    registry reference such as "cart.proceedToCheckoutButton".
    """

    def __init__(
        self,
        page: Page,
        *,
        resolver: Optional[LocatorResolver] = None,
        registry: Optional[LocatorRegistry] = None,
        settings: Optional[Settings] = None,
        diagnostic_context: Optional[str] = None,
    ) -> None:
        self.page = page
        self.settings = settings or get_settings()
        self.resolver = resolver or LocatorResolver()
        self._registry = registry
        self.diagnostic_context = diagnostic_context or type(self).__name__
        self.log = get_logger(type(self).__module__)

    @property
    def registry(self) -> LocatorRegistry:
        if self._registry is None:
            self._registry = get_registry()
        return self._registry

    @property
    def action_timeout_ms(self) -> int:
        return self.settings.ACTION_TIMEOUT_MS

    def descriptors(self, target: Target) -> tuple[ElementDescriptor, ...]:
        # Bare strings are registry references; CSS must be wrapped with css()
        if isinstance(target, str):
            return self.registry.lookup(target)
        return as_descriptors(target)

    @staticmethod
    def _short(chain: tuple[ElementDescriptor, ...]) -> str:
        first = chain[0].describe()
        return first if len(first) <= 40 else first[:40] + "..."

    async def goto(self, url: str) -> Any:
        self.log.info(f"[nav] Navigating to: {url}")
        response = await with_page_retry(
            lambda: self.page.goto(url, timeout=self.action_timeout_ms, wait_until="domcontentloaded")
        )
        self.log.info("[nav] Navigation completed")
        return response

    async def find(self, target: Target, *, timeout_ms: Optional[int] = None) -> Locator:
        """Resolve `target`; each descriptor gets `action_timeout_ms` unless overridden."""
        return await self.resolver.resolve(
            self.page,
            self.descriptors(target),
            timeout_ms=timeout_ms if timeout_ms is not None else self.action_timeout_ms,
            diagnostic_context=self.diagnostic_context,
        )

    async def click(self, target: Target) -> None:
        chain = self.descriptors(target)
        self.log.info(f"[action] Clicking element: {self._short(chain)}")
        el = await self.find(chain)
        await el.click(timeout=self.action_timeout_ms)

    async def type(self, target: Target, value: str) -> None:
        chain = self.descriptors(target)
        self.log.info(f"[input] Typing into element: {self._short(chain)}")
        el = await self.find(chain)
        await el.fill(value, timeout=self.action_timeout_ms)

    async def wait_for(self, target: Target) -> Locator:
        chain = self.descriptors(target)
        self.log.info(f"[wait] Waiting for element: {self._short(chain)}")
        return await self.find(chain)


__all__ = ["BasePage", "Target"]
