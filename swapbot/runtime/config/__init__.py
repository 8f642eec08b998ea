"""Runtime configuration: environment settings and the bot keystore."""

from .keystore import Keystore, load_keystore
from .settings import Settings, cfg

__all__ = ["Keystore", "Settings", "cfg", "load_keystore"]
