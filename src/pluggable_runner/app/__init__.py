from .cli import main
from .runtime import build_runner, resolve_target, run_targets

__all__ = ["build_runner", "main", "resolve_target", "run_targets"]
