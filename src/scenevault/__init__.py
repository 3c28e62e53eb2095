"""SceneVault: a personal scene tracker with YouTube playlist sync."""

__version__ = "0.1.0"
