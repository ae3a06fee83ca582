from i18n_scanner.config import ConfigError, build_configuration, default_configuration, load_config
from i18n_scanner.pipeline import run_check

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "build_configuration",
    "default_configuration",
    "load_config",
    "run_check",
]
