"""
resilient_ui
------------
Resilient element resolution and retry orchestration for Playwright
end-to-end suites.

    from resilient_ui import resolve, with_retry, css, text

    button = await resolve(page, [text("Add to cart"), css("#atc-btn")])
    await with_retry(lambda: button.click(), LOCATOR_RETRY)
"""

from resilient_ui.core.errors import ElementNotFound, LocatorNotRegistered, RegistryError, ResilientUIError
from resilient_ui.core.retry import (
    LOCATOR_RETRY,
    PAGE_RETRY,
    RetryPolicy,
    retrying,
    with_locator_retry,
    with_page_retry,
    with_retry,
)
from resilient_ui.selectors.descriptor import DescriptorKind, ElementDescriptor, css, text, xpath
from resilient_ui.selectors.resolver import LocatorResolver, resolve

__version__ = "0.1.0"

__all__ = [
    "DescriptorKind",
    "ElementDescriptor",
    "css",
    "xpath",
    "text",
    "LocatorResolver",
    "resolve",
    "RetryPolicy",
    "PAGE_RETRY",
    "LOCATOR_RETRY",
    "with_retry",
    "with_page_retry",
    "with_locator_retry",
    "retrying",
    "ResilientUIError",
    "ElementNotFound",
    "LocatorNotRegistered",
    "RegistryError",
]
