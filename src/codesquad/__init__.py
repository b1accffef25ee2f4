"""Run several AI coding-agent threads side by side and route review comments to them."""

__version__ = "0.1.0"
