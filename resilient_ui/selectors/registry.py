# resilient_ui/selectors/registry.py
from __future__ import annotations

"""Locator registry
-------------------
Loads named descriptor chains from a JSON or YAML file laid out as
`{section: {key: [descriptor, ...]}}` so selectors can be patched without
touching page objects.
"""

import functools
import json
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import ValidationError

from resilient_ui.core.errors import LocatorNotRegistered, RegistryError
from resilient_ui.selectors.descriptor import ElementDescriptor
from resilient_ui.utils.config import get_settings
from resilient_ui.utils.logger import get_logger

log = get_logger(__name__)

Chains = dict[str, dict[str, tuple[ElementDescriptor, ...]]]


def _read_file(path: Path) -> Any:
    if not path.exists():
        raise RegistryError(f"Locators file not found: {path}")
    try:
        raw = path.read_text(encoding="utf-8")
        if path.suffix.lower() in (".yaml", ".yml"):
            return yaml.safe_load(raw)
        return json.loads(raw)
    except yaml.YAMLError as ye:
        raise RegistryError(f"YAML parse error in {path}: {ye}") from ye
    except json.JSONDecodeError as je:
        raise RegistryError(f"JSON parse error in {path}: {je}") from je
    except UnicodeDecodeError as ue:
        raise RegistryError(f"Encoding error in {path}: {ue}") from ue


def _validate(data: Any, origin: str) -> Chains:
    if not isinstance(data, Mapping):
        raise RegistryError(f"Locators in {origin} must be a mapping of sections at the top level.")

    problems: list[str] = []
    out: Chains = {}
    for section, entries in data.items():
        if not isinstance(entries, Mapping):
            problems.append(f"  - {section}: section must map keys to descriptor lists")
            continue
        chains: dict[str, tuple[ElementDescriptor, ...]] = {}
        for key, items in entries.items():
            if isinstance(items, (str, Mapping)):
                items = [items]
            if not isinstance(items, list) or not items:
                problems.append(f"  - {section}.{key}: expected a non-empty list of descriptors")
                continue
            parsed: list[ElementDescriptor] = []
            for idx, item in enumerate(items):
                try:
                    if isinstance(item, str):
                        parsed.append(ElementDescriptor(payload=item))
                    else:
                        parsed.append(ElementDescriptor.model_validate(item))
                except ValidationError as ve:
                    for e in ve.errors():
                        loc = ".".join(str(p) for p in e.get("loc", []))
                        msg = e.get("msg", "invalid value")
                        problems.append(f"  - {section}.{key}.{idx}{'.' + loc if loc else ''}: {msg}")
            chains[str(key)] = tuple(parsed)
        out[str(section)] = chains

    if problems:
        raise RegistryError("\n".join([f"Invalid locators in {origin}:"] + problems))
    return out


class LocatorRegistry:
    """Lazy, cached view of a locators file."""

    def __init__(self, path: Optional[Path | str] = None):
        self.path = Path(path) if path else get_settings().LOCATORS_FILE
        self._chains: Optional[Chains] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LocatorRegistry":
        reg = cls.__new__(cls)
        reg.path = None
        reg._chains = _validate(data, "<mapping>")
        return reg

    def _load(self) -> Chains:
        if self._chains is None:
            self._chains = _validate(_read_file(self.path), str(self.path))
            log.debug(f"Loaded {sum(len(v) for v in self._chains.values())} locator(s) from {self.path}")
        return self._chains

    def reload(self) -> None:
        if self.path is not None:
            self._chains = None
            self._load()

    def sections(self) -> list[str]:
        return list(self._load())

    def section(self, name: str) -> dict[str, tuple[ElementDescriptor, ...]]:
        data = self._load()
        if name not in data:
            raise LocatorNotRegistered(f"Section not found: {name}")
        return dict(data[name])

    def get(self, section: str, key: str) -> tuple[ElementDescriptor, ...]:
        data = self._load()
        if section not in data or key not in data[section]:
            raise LocatorNotRegistered(f"Locator not found: {section}.{key}")
        return data[section][key]

    def lookup(self, ref: str) -> tuple[ElementDescriptor, ...]:
        """`"section.key"` form of get()."""
        section, sep, key = ref.partition(".")
        if not sep or not key:
            raise LocatorNotRegistered(f"Locator reference must look like 'section.key': {ref!r}")
        return self.get(section, key)


@functools.lru_cache(maxsize=1)
def get_registry() -> LocatorRegistry:
    """Registry backed by Settings.LOCATORS_FILE, shared per process."""
    return LocatorRegistry(get_settings().LOCATORS_FILE)


__all__ = ["LocatorRegistry", "get_registry"]
