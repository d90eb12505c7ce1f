"""
Top-level package for the record browser.

This package exposes the core architecture (domain, services, UI adapters).
Most code should import from submodules such as:
    record_browser.core
    record_browser.services
    record_browser.ui
"""

__all__: list[str] = []
