from capital_hub.core.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
