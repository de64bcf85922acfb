from .settings import SettingsSourceSystems

__all__ = ["SettingsSourceSystems"]
