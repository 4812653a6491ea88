"""Presentation layer for the Agilow voice manager.

Everything here consumes the session core in `agilow` (resolver, recorder,
activity log) and only formats or forwards user actions. The modules avoid
hard dependencies on a display server so they import in headless test runs.
"""
