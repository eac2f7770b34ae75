from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from pluggable_runner.app.runtime import run_targets
from pluggable_runner.config.loader import ConfigError, load_config, parse_config
from pluggable_runner.config.models import RunnerConfig
from pluggable_runner.kernel.methods import MethodDiscoveryError

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pluggable-runner", description="Run marker-discovered test methods")
    parser.add_argument("--config", help="Path to YAML config")
    parser.add_argument(
        "--target",
        action="append",
        default=[],
        help="Test class as package.module:ClassName (repeatable; replaces config targets)",
    )
    parser.add_argument(
        "--sequencing",
        choices=["name", "reverse_name", "declaration", "shuffle"],
        help="Override method ordering",
    )
    parser.add_argument("--seed", type=int, help="Seed for shuffle sequencing")
    parser.add_argument("--report-path", help="Write JSONL results to this path")
    parser.add_argument("--log-path", help="Write JSONL run events to this path")
    return parser


def parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def apply_cli_overrides(config: RunnerConfig, args: argparse.Namespace) -> RunnerConfig:
    # CLI flags take precedence over the file; the result is re-validated.
    raw = config.model_dump()
    if args.target:
        raw["targets"] = list(args.target)
    if args.sequencing is not None:
        raw["sequencing"]["mode"] = args.sequencing
    if args.seed is not None:
        raw["sequencing"]["seed"] = args.seed
    if args.report_path:
        raw["report"] = {"sink": "jsonl", "path": args.report_path}
    if args.log_path:
        raw["logging"] = {"sink": "jsonl", "path": args.log_path}
    return parse_config(raw)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        config = load_config(Path(args.config)) if args.config else RunnerConfig()
        config = apply_cli_overrides(config, args)
        if not config.targets:
            raise ConfigError("No targets configured; pass --target or set targets in the config")
        reports = run_targets(config)
    except (ConfigError, MethodDiscoveryError) as exc:
        sys.stderr.write(f"pluggable-runner: {exc}\n")
        return EXIT_CONFIG

    total = sum(len(report.results) for report in reports)
    failed = sum(len(report.failed) for report in reports)
    sys.stdout.write(f"{total - failed} passed, {failed} failed\n")
    return EXIT_OK if failed == 0 else EXIT_FAILED
