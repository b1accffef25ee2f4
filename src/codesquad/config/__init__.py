"""Configuration loading."""

from codesquad.config.loader import config_path_for, load_config
from codesquad.config.schema import CodesquadConfig

__all__ = ["CodesquadConfig", "config_path_for", "load_config"]
