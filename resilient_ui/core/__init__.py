"""
Core package: retry orchestration and the error taxonomy.

Consumers should import submodules directly, e.g.:
  from resilient_ui.core.retry import with_retry, RetryPolicy
  from resilient_ui.core.errors import ElementNotFound
"""

__all__: list[str] = []
