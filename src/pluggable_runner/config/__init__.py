from .loader import ConfigError, load_config, load_yaml_config, parse_config
from .models import LoggingConfig, ReportConfig, RulesConfig, RunnerConfig, SequencingConfig

__all__ = [
    "ConfigError",
    "LoggingConfig",
    "ReportConfig",
    "RulesConfig",
    "RunnerConfig",
    "SequencingConfig",
    "load_config",
    "load_yaml_config",
    "parse_config",
]
