from pathlib import Path

import pytest

from resilient_ui.core import retry as retry_module
from resilient_ui.selectors import resolver as resolver_module
from resilient_ui.utils.config import get_settings


class FakeClock:
    """Virtual milliseconds; sleeping advances time instantly."""

    def __init__(self):
        self.t = 0.0
        self.sleeps = []

    def now_ms(self):
        return int(self.t)

    async def sleep_ms(self, ms):
        self.sleeps.append(ms)
        if ms > 0:
            self.t += ms


class FakeElement:
    def __init__(self, name):
        self.name = name
        self.clicks = 0
        self.filled = []

    async def click(self, timeout=None):
        self.clicks += 1

    async def fill(self, value, timeout=None):
        self.filled.append(value)

    def __repr__(self):
        return f"FakeElement({self.name!r})"


class FakeQuery:
    """Stands in for a Playwright Locator produced by page.locator()/get_by_text()."""

    def __init__(self, page, key):
        self.page = page
        self.key = key

    async def count(self):
        self.page.queries.append((self.page.clock.now_ms(), self.key))
        if self.page.failures.get(self.key, 0) > 0:
            self.page.failures[self.key] -= 1
            raise RuntimeError("Execution context was destroyed, most likely because of a navigation")
        return len(self.page.matches(self.key))

    @property
    def first(self):
        return self.page.matches(self.key)[0]


class FakePage:
    def __init__(self, clock):
        self.clock = clock
        self._elements = {}
        self.failures = {}
        self.queries = []
        self.screenshots = []
        self.screenshot_error = None
        self.goto_calls = []
        self.goto_errors = []

    def add(self, key, name=None, appear_at_ms=0):
        el = FakeElement(name or key)
        self._elements.setdefault(key, []).append((appear_at_ms, el))
        return el

    def matches(self, key):
        now = self.clock.now_ms()
        return [el for at, el in self._elements.get(key, []) if now >= at]

    def queried_keys(self):
        keys = []
        for _, k in self.queries:
            if not keys or keys[-1] != k:
                keys.append(k)
        return keys

    def locator(self, selector):
        return FakeQuery(self, selector)

    def get_by_text(self, value, exact=False):
        return FakeQuery(self, f"text={value}")

    async def screenshot(self, path, full_page=True):
        if self.screenshot_error is not None:
            raise self.screenshot_error
        Path(path).write_bytes(b"\x89PNG")
        self.screenshots.append(path)

    async def goto(self, url, timeout=None, wait_until=None):
        self.goto_calls.append(url)
        if self.goto_errors:
            raise self.goto_errors.pop(0)
        return {"url": url}


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setenv("ARTIFACTS_DIR", str(tmp_path / "artifacts"))
    monkeypatch.setenv("LOCATORS_FILE", str(tmp_path / "locators.json"))
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def clock(monkeypatch):
    c = FakeClock()
    monkeypatch.setattr(resolver_module, "now_ms", c.now_ms)
    monkeypatch.setattr(resolver_module, "async_sleep_ms", c.sleep_ms)
    monkeypatch.setattr(retry_module, "async_sleep_ms", c.sleep_ms)
    return c


@pytest.fixture
def page(clock):
    return FakePage(clock)
