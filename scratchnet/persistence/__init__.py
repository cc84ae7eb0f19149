"""Saving and loading trained parameters."""

from .codec import FORMAT_VERSION, load_network, read_manifest, save_network

__all__ = ["FORMAT_VERSION", "load_network", "read_manifest", "save_network"]
