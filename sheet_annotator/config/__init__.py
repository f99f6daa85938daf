from .loader import AnnotatorConfig, ConfigError, load_config

__all__ = ["AnnotatorConfig", "ConfigError", "load_config"]
