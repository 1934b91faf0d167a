import json
from pathlib import Path
import textwrap

import pytest

from resilient_ui.core.errors import LocatorNotRegistered, RegistryError
from resilient_ui.selectors.descriptor import css, text, xpath
from resilient_ui.selectors.registry import LocatorRegistry, get_registry


def write_json(tmp_path: Path) -> Path:
    data = {
        "product": {
            "addToCartButton": [
                {"type": "text", "value": "Add to cart"},
                {"type": "css", "value": "#atc-btn"},
            ]
        },
        "cart": {
            "cartTotal": [{"type": "xpath", "value": "//span[@class='total']"}],
            "cartLink": "a[href*='cart']",
        },
    }
    p = tmp_path / "locators.json"
    p.write_text(json.dumps(data), encoding="utf-8")
    return p


def test_load_json_registry(tmp_path: Path):
    reg = LocatorRegistry(write_json(tmp_path))
    assert reg.get("product", "addToCartButton") == (text("Add to cart"), css("#atc-btn"))
    assert reg.get("cart", "cartTotal") == (xpath("//span[@class='total']"),)
    assert reg.get("cart", "cartLink") == (css("a[href*='cart']"),)
    assert reg.sections() == ["product", "cart"]
    assert set(reg.section("cart")) == {"cartTotal", "cartLink"}


def test_load_yaml_registry(tmp_path: Path):
    y = textwrap.dedent(
        """
        search:
          searchInput:
            - type: css
              value: "input[name='_nkw']"
            - kind: textual
              payload: "Search for anything"
        """
    )
    p = tmp_path / "locators.yaml"
    p.write_text(y, encoding="utf-8")

    assert LocatorRegistry(p).lookup("search.searchInput") == (
        css("input[name='_nkw']"),
        text("Search for anything"),
    )


def test_missing_entries_raise_not_registered(tmp_path: Path):
    reg = LocatorRegistry(write_json(tmp_path))
    with pytest.raises(LocatorNotRegistered, match="Locator not found: cart.subtotal"):
        reg.get("cart", "subtotal")
    with pytest.raises(KeyError):
        reg.section("variants")
    with pytest.raises(LocatorNotRegistered):
        reg.lookup("cartTotal")


def test_invalid_file_lists_every_problem(tmp_path: Path):
    p = tmp_path / "bad.json"
    p.write_text(
        json.dumps({"cart": {"total": [{"type": "role", "value": "x"}], "link": []}, "oops": ["x"]}),
        encoding="utf-8",
    )
    with pytest.raises(RegistryError) as ei:
        LocatorRegistry(p).sections()
    msg = str(ei.value)
    assert "cart.total.0" in msg
    assert "cart.link" in msg
    assert "oops" in msg


def test_missing_and_unparseable_files(tmp_path: Path):
    with pytest.raises(RegistryError, match="not found"):
        LocatorRegistry(tmp_path / "nope.json").sections()
    p = tmp_path / "broken.json"
    p.write_text("{not json", encoding="utf-8")
    with pytest.raises(RegistryError, match="JSON parse error"):
        LocatorRegistry(p).sections()


def test_non_utf8_file_is_a_registry_error(tmp_path: Path):
    p = tmp_path / "latin.json"
    p.write_bytes(b'{"cart": {"checkout": "\xff\xfe"}}')
    with pytest.raises(RegistryError, match="Encoding error"):
        LocatorRegistry(p).sections()


def test_reload_picks_up_patched_selectors(tmp_path: Path):
    p = write_json(tmp_path)
    reg = LocatorRegistry(p)
    assert reg.get("cart", "cartTotal") == (xpath("//span[@class='total']"),)

    p.write_text(json.dumps({"cart": {"cartTotal": [{"type": "css", "value": "#total"}]}}), encoding="utf-8")
    assert reg.get("cart", "cartTotal") == (xpath("//span[@class='total']"),)
    reg.reload()
    assert reg.get("cart", "cartTotal") == (css("#total"),)


def test_from_mapping():
    reg = LocatorRegistry.from_mapping({"common": {"cartLink": [{"type": "text", "value": "Cart"}]}})
    assert reg.lookup("common.cartLink") == (text("Cart"),)


def test_default_registry_uses_settings_path(isolated_settings):
    get_registry.cache_clear()
    try:
        write_json(isolated_settings.LOCATORS_FILE.parent)
        assert get_registry().path == isolated_settings.LOCATORS_FILE
        assert get_registry().get("product", "addToCartButton")[1] == css("#atc-btn")
    finally:
        get_registry.cache_clear()
