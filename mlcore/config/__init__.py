from .settings import AppSettings, LoaderConfig, settings

__all__ = ["settings", "AppSettings", "LoaderConfig"]
