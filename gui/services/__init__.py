from . import clients, settings_service  # noqa: F401
