"""Application entry point."""

from __future__ import annotations

import argparse
import logging
import sys

from gomokie.ui.autoplay import AutoPlaySpeed
from gomokie.ui.settings import AppSettings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gomokie",
        description="Watch an engine-vs-engine gomoku game or run a "
        "self-play calibration against a gomoku engine process.",
    )
    parser.add_argument("engine", help="engine executable speaking JSON lines")
    parser.add_argument(
        "--engine-arg",
        action="append",
        default=[],
        metavar="ARG",
        help="extra argument passed to the engine (repeatable)",
    )
    parser.add_argument("--black", default="", help="profile id playing black")
    parser.add_argument("--white", default="", help="profile id playing white")
    parser.add_argument(
        "--speed",
        choices=[speed.value for speed in AutoPlaySpeed],
        default=AutoPlaySpeed.MEDIUM.value,
    )
    parser.add_argument(
        "--self-play",
        type=int,
        metavar="GAMES",
        help="run a calibration with GAMES games per pair instead of watching",
    )
    parser.add_argument("--parallelism", type=int, default=4)
    parser.add_argument("--sound", action="store_true", help="play a stone click")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> AppSettings:
    return AppSettings(
        engine_program=args.engine,
        engine_args=list(args.engine_arg),
        autoplay_speed=AutoPlaySpeed(args.speed),
        sound_enabled=args.sound,
        parallelism=max(1, args.parallelism),
    )


def main(argv: list[str] | None = None) -> None:
    """Launch the headless Gomokie client."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from gomokie.ui.bootstrap import run_headless

    sys.exit(
        run_headless(
            settings_from_args(args),
            black_id=args.black,
            white_id=args.white,
            self_play_games=args.self_play,
            argv=[sys.argv[0]],
        )
    )


if __name__ == "__main__":
    main()
