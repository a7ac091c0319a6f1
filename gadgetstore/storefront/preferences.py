# gadgetstore/storefront/preferences.py
from .storage import StorageAdapter

THEME_KEY = 'theme'
THEMES = ('light', 'dark')


class PreferencesStore:
    """Theme preference. Falls back to the system preference until the shopper picks one."""

    def __init__(self, storage: StorageAdapter, system_prefers_dark: bool = False):
        self.storage = storage
        self.system_theme = 'dark' if system_prefers_dark else 'light'

    @property
    def theme(self) -> str:
        stored = self.storage.load(THEME_KEY)
        return stored if stored in THEMES else self.system_theme

    def set_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme}")
        self.storage.save(THEME_KEY, theme)

    def toggle_theme(self) -> str:
        new_theme = 'light' if self.theme == 'dark' else 'dark'
        self.set_theme(new_theme)
        return new_theme
