"""
Main entry point for the Trefoil interpreter.

Runs Trefoil program files in one shared environment, or starts the REPL
when no files are given.
"""

import argparse
import sys
from typing import List, Optional

from src.config.logging_config import get_logger, setup_logging
from src.config.settings import TrefoilSettings
from src.dispatcher import run_source
from src.repl.repl import Repl
from src.sexp_evaluator.sexp_environment import Environment
from src.sexp_evaluator.sexp_evaluator import TrefoilEvaluator
from src.system.errors import TrefoilError

logger = get_logger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trefoil",
        description="Run Trefoil programs, or start a REPL when no files are given.",
    )
    parser.add_argument("files", nargs="*", help="Trefoil source files, run in order in one environment")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL (env: TREFOIL_LOG_LEVEL)")
    parser.add_argument("--log-file", help="Write logs to this file instead of stderr (env: TREFOIL_LOG_FILE)")
    parser.add_argument("--recursion-limit", type=int, help="Python recursion limit (env: TREFOIL_RECURSION_LIMIT)")
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Continue with the next binding after an error instead of stopping",
    )
    return parser


def run_files(paths: List[str], settings: TrefoilSettings) -> int:
    """Runs each file in order in one environment. Returns the process exit code."""
    evaluator = TrefoilEvaluator()
    env = Environment.empty()
    failed = False

    def report_error(error: TrefoilError) -> None:
        print(f"error: {error}", file=sys.stderr)

    for path in paths:
        try:
            with open(path, "r") as f:
                source = f.read()
        except OSError as e:
            print(f"error: cannot read {path}: {e}", file=sys.stderr)
            return 1

        logger.info(f"Running {path}")
        result = run_source(
            source,
            env,
            evaluator=evaluator,
            report=print,
            on_error=report_error,
            stop_on_error=settings.stop_on_error,
        )

        env = result.environment
        if result.status == "FAILED":
            failed = True
            if settings.stop_on_error:
                return 1

    return 1 if failed else 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    settings = TrefoilSettings.from_env(
        log_level=args.log_level,
        log_file=args.log_file,
        recursion_limit=args.recursion_limit,
        stop_on_error=False if args.keep_going else None,
    )

    setup_logging(settings.log_level, settings.log_file)
    sys.setrecursionlimit(settings.recursion_limit)

    if args.files:
        return run_files(args.files, settings)

    Repl().start()
    return 0


if __name__ == "__main__":
    sys.exit(main())
