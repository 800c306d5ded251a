"""
Command line front-end.

    cargo check PROGRAM
    cargo run PROGRAM [--maze PATH] [--max-steps N] [--delay MS] [--realtime] [--trace]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .compiler.formatter import format_program, format_with_marker
from .compiler.parser import ParseError, parse
from .config import CargoConfig, configure_logging
from .events import Signal
from .session import Session
from .world.maze import MazeError, load_maze

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_FINISHED = 2


def _read_program(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def cmd_check(args: argparse.Namespace) -> int:
    try:
        text = _read_program(args.program)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read program: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        program = parse(text)
    except ParseError as e:
        line = f"line {e.line_number}: " if e.line_number else ""
        print(f"Error: {e.message}: {line}{e.line_text}", file=sys.stderr)
        return EXIT_ERROR

    if not program:
        print("Program is empty")
        return EXIT_OK
    print("\n".join(format_program(program)))
    return EXIT_OK


def cmd_run(args: argparse.Namespace, config: CargoConfig) -> int:
    try:
        maze_path = args.maze or config.maze_path
        maze = load_maze(maze_path) if maze_path else None
    except (OSError, MazeError) as e:
        print(f"Error: cannot load maze: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        text = _read_program(args.program)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read program: {e}", file=sys.stderr)
        return EXIT_ERROR

    session = Session(maze=maze, config=config)

    if args.trace:
        session.events.subscribe(
            Signal.STEP_EXECUTING,
            lambda line: print(format_with_marker(session.program, line) + "\n"),
        )

    if args.realtime:
        if not session.run(text):
            result = session.result(error=str(session.last_error) if session.last_error else "empty program")
        else:
            finished = session.wait(timeout=args.timeout)
            session.pause()
            if not finished:
                logger.warning(f"Timed out after {args.timeout}s")
            result = session.result()
    else:
        result = session.run_to_completion(text, max_steps=args.max_steps)

    print(session.grid.to_ascii())
    print()
    print(result)

    if result.error:
        return EXIT_ERROR
    return EXIT_OK if result.success else EXIT_NOT_FINISHED


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="cargo",
        description="Compile and run CarGo programs against a maze.",
    )
    p.add_argument("--log-level", default=None, help="Logging level (default: CARGO_LOG_LEVEL or INFO).")
    sub = p.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Parse a program and print it formatted.")
    check.add_argument("program", help="Path to the program text file.")

    run = sub.add_parser("run", help="Run a program and print the final grid.")
    run.add_argument("program", help="Path to the program text file.")
    run.add_argument("--maze", default=None, help="Maze JSON file (default: CARGO_MAZE_PATH or built-in maze).")
    run.add_argument("--max-steps", type=int, default=None, help="Step limit for headless runs.")
    run.add_argument("--delay", type=float, default=None, help="Delay between steps in ms (with --realtime).")
    run.add_argument("--realtime", action="store_true", help="Run on the timed step queue.")
    run.add_argument("--timeout", type=float, default=60.0, help="Seconds to wait in --realtime mode.")
    run.add_argument("--trace", action="store_true", help="Print the program with the active line at every step.")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = CargoConfig.from_env()
    if args.log_level:
        config.log_level = args.log_level
    if getattr(args, "delay", None) is not None:
        config.scheduler.step_delay = args.delay
    try:
        config.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    configure_logging(config)

    if args.command == "check":
        return cmd_check(args)
    return cmd_run(args, config)


if __name__ == "__main__":
    raise SystemExit(main())
