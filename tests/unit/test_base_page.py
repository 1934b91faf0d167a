import asyncio

import pytest

from resilient_ui.capture.artifacts import NullSink, ScreenshotSink, artifact_name, slugify
from resilient_ui.core.errors import ElementNotFound
from resilient_ui.pages.base_page import BasePage
from resilient_ui.selectors.descriptor import css, text
from resilient_ui.selectors.registry import LocatorRegistry
from resilient_ui.selectors.resolver import LocatorResolver
from resilient_ui.utils.config import Settings


def run(coro):
    return asyncio.run(coro)


REGISTRY = LocatorRegistry.from_mapping(
    {
        "common": {"searchInput": [{"type": "css", "value": "#gh-ac"}]},
        "product": {
            "addToCartButton": [
                {"type": "text", "value": "Add to cart"},
                {"type": "css", "value": "#atc-btn"},
            ]
        },
    }
)


class ProductPage(BasePage):
    async def add_to_cart(self):
        await self.click("product.addToCartButton")


def make_page_object(page, **kwargs):
    return ProductPage(page, resolver=LocatorResolver(timeout_ms=1000, sink=NullSink()), registry=REGISTRY, **kwargs)


def test_click_through_registry_reference(page, clock):
    btn = page.add("#atc-btn")
    run(make_page_object(page).add_to_cart())
    assert btn.clicks == 1
    assert page.queried_keys() == ["text=Add to cart", "#atc-btn"]


def test_type_fills_resolved_element(page, clock):
    box = page.add("#gh-ac")
    run(make_page_object(page).type("common.searchInput", "wireless mouse"))
    assert box.filled == ["wireless mouse"]


def test_descriptor_targets_bypass_registry(page, clock):
    el = page.add("#checkout")
    po = make_page_object(page)
    assert run(po.wait_for([text("Checkout"), css("#checkout")])) is el
    assert run(po.find(css("#checkout"))) is el


def test_missing_element_reports_page_context(page, clock):
    with pytest.raises(ElementNotFound) as ei:
        run(make_page_object(page).add_to_cart())
    assert ei.value.diagnostic_context == "ProductPage"


def test_actions_wait_the_action_timeout_per_descriptor(page, clock):
    # appears after the resolver default of 1000 ms but inside ACTION_TIMEOUT_MS
    late = page.add("#atc-btn", appear_at_ms=3000)
    run(make_page_object(page).click([css("#atc-btn")]))
    assert late.clicks == 1


def test_action_timeout_comes_from_settings(page, clock):
    po = make_page_object(page, settings=Settings(ACTION_TIMEOUT_MS=2000))
    with pytest.raises(ElementNotFound) as ei:
        run(po.wait_for("product.addToCartButton"))
    assert clock.now_ms() == 2 * 2000
    assert [a.elapsed_ms for a in ei.value.attempts] == [2000, 2000]


def test_find_timeout_override(page, clock):
    with pytest.raises(ElementNotFound):
        run(make_page_object(page).find(css("#never"), timeout_ms=500))
    assert clock.now_ms() == 500


def test_goto_retries_transient_navigation_errors(page, clock):
    page.goto_errors = [RuntimeError("page.goto: net::ERR_CONNECTION_RESET")]
    resp = run(make_page_object(page).goto("https://shop.test/item/1"))
    assert resp == {"url": "https://shop.test/item/1"}
    assert page.goto_calls == ["https://shop.test/item/1"] * 2


def test_goto_propagates_fatal_errors(page, clock):
    page.goto_errors = [ValueError("invalid url")]
    with pytest.raises(ValueError):
        run(make_page_object(page).goto("shop"))
    assert len(page.goto_calls) == 1


def test_slug_and_artifact_names():
    assert slugify("Add to cart / Chromium #2") == "add-to-cart-chromium-2"
    assert artifact_name("Cart Page").startswith("locator-failure-cart-page-")
    assert artifact_name().startswith("locator-failure-unknown-test-")


def test_screenshot_sink_uses_owning_page_for_locators(page, tmp_path):
    class LocatorLike:
        def __init__(self, owner):
            self.page = owner
            self.first = self

        async def screenshot(self, path):
            raise AssertionError("element screenshots are not used for failures")

    sink = ScreenshotSink(tmp_path / "shots", full_page=False)
    out = run(sink.capture(LocatorLike(page), "locator-failure-x"))
    assert out == tmp_path / "shots" / "locator-failure-x.png"
    assert out.exists()


def test_screenshot_sink_without_page_returns_none(tmp_path):
    assert run(ScreenshotSink(tmp_path).capture(object(), "x")) is None
    assert run(NullSink().capture(object(), "x")) is None
