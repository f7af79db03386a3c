from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from enrollment_trends.config.loader import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    apply_env_overrides,
    load_config,
)
from enrollment_trends.logging.init import log_summary, setup_logging
from enrollment_trends.services.orchestrator import PipelineError, load_and_clean, run_pipeline
from enrollment_trends.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (overrides existing environment variables)
- Load and validate the YAML config, apply ENROLLMENT_* overrides
- Run load -> clean -> render, print the SUMMARY line

Exit codes: 0 success, 1 fatal (config, source, schema, rendering).
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1

INSPECT_ROWS = 12


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv. A broken .env only produces a warning."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except OSError as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="NRW guest student enrollment trends")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Pipeline config (YAML)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print the first cleaned rows then exit")
    p.add_argument("--no-animation", action="store_true", help="Write the static chart only")
    return p.parse_args(argv)


def _inspect_data(cfg) -> int:
    try:
        raw, cleaning = load_and_clean(cfg)
    except PipelineError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    print(f"RAW: rows={len(raw)} cols={list(raw.columns)}")
    print(f"CLEANED: rows={len(cleaning.table)} semesters={len(cleaning.semesters)}")
    print(cleaning.table.head(INSPECT_ROWS).to_string(index=False))
    for agg in cleaning.aggregate_rows():
        if agg.incomplete:
            print(f"incomplete aggregate: semester={agg.semester} total={agg.total}")
    if cleaning.missing_universities:
        print(f"missing_universities={cleaning.missing_universities}")
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    # NOTE: [] が渡された場合に sys.argv[1:] (pytest の引数) を読まないよう None のときのみ参照
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = apply_env_overrides(load_config(args.config))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    logger.info(f"Target universities: {', '.join(cfg.universities)}")

    if args.inspect_data:
        return _inspect_data(cfg)

    try:
        result = run_pipeline(cfg, animation=not args.no_animation)
    except PipelineError as e:
        logger.error(f"pipeline: {e}")
        return EXIT_FATAL

    summary_line = render_summary_line(result, configured_universities=len(cfg.universities))
    # log_summary が "SUMMARY " を付けるので除去
    log_summary(summary_line[len("SUMMARY "):])
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
