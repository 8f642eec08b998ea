"""Start-up registries: supported assets and slash commands."""

from __future__ import annotations

from .assets import AssetDirectory, AssetReader, fetch_asset_directory, parse_asset_list
from .commands import CommandRegistry, default_registry

__all__ = [
    "AssetDirectory",
    "AssetReader",
    "CommandRegistry",
    "default_registry",
    "fetch_asset_directory",
    "parse_asset_list",
]
