"""
Selectors package
-----------------
Element descriptors, the fallback-chain resolver, and the locator registry.
"""

from .descriptor import DescriptorKind, ElementDescriptor, as_descriptors, css, text, xpath
from .registry import LocatorRegistry, get_registry
from .resolver import LocatorResolver, ResolutionAttempt, resolve

__all__ = [
    "DescriptorKind",
    "ElementDescriptor",
    "as_descriptors",
    "css",
    "xpath",
    "text",
    "LocatorRegistry",
    "get_registry",
    "LocatorResolver",
    "ResolutionAttempt",
    "resolve",
]
