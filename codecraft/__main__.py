"""Entry point: ``python -m codecraft``.

Supports two modes:
  - ``python -m codecraft``                    → Launch the FastAPI server
  - ``python -m codecraft cli PROGRAM_FILE``   → Play a program headlessly
"""

from __future__ import annotations

import argparse
import logging
import sys

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Code Craft block-program playback engine")
    sub = parser.add_subparsers(dest="command")

    # --- Server mode (default) ---
    srv = sub.add_parser("serve", help="Start the FastAPI server (default)")
    srv.add_argument("--host", type=str, default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    srv.add_argument("--level", type=int, default=1)
    srv.add_argument("--step-delay", type=float, default=0.8)
    srv.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])

    # --- Headless CLI mode ---
    cli = sub.add_parser("cli", help="Play a program file against a level without a server")
    cli.add_argument("program", type=str, help="Path to a program file ('-' for stdin)")
    cli.add_argument("--level", type=int, default=1)
    cli.add_argument("--mode", type=str, default="run", choices=["run", "step"])
    cli.add_argument(
        "--replay", type=str, nargs="?", const="", default=None,
        help="Write a JSON replay (to replay.json when no path is given)",
    )
    cli.add_argument("--log-level", type=str, default="WARNING", choices=["DEBUG", "INFO", "WARNING"])

    return parser


def _run_server(args: argparse.Namespace) -> None:
    import uvicorn

    from codecraft.api.app import create_app
    from codecraft.config import GameConfig

    config = GameConfig(
        start_level_id=args.level,
        step_delay=args.step_delay,
        log_level=args.log_level,
    )
    app = create_app(config)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


def _run_cli(args: argparse.Namespace) -> int:
    from pathlib import Path

    from codecraft.api.session_manager import SessionManager
    from codecraft.config import GameConfig
    from codecraft.core.enums import Outcome, PlaybackPhase
    from codecraft.engine.scheduler import ManualScheduler
    from codecraft.utils.logging import setup_logging
    from codecraft.utils.replay import ReplayRecorder

    config = GameConfig(start_level_id=args.level, log_level=args.log_level)
    setup_logging(config.log_level, stream=sys.stderr)

    source = sys.stdin.read() if args.program == "-" else Path(args.program).read_text(encoding="utf-8")

    scheduler = ManualScheduler()
    manager = SessionManager(config, scheduler=scheduler)
    if manager.level.id != args.level:
        logger.warning("Level %d not in catalog; playing level %d", args.level, manager.level.id)
    manager.set_program(source)
    translation = manager.translate_program()

    recorder = ReplayRecorder(args.replay or config.replay_file, manager.level.id, translation.digest)
    recorder.record_commands(translation.commands)
    manager.controller.subscribe(recorder.record_snapshot)

    level = manager.level
    print(f"Level {level.id}: {level.title} ({level.grid_size}x{level.grid_size})")
    if translation.fault:
        print(f"  program stopped early: {translation.fault}")

    started = manager.run() if args.mode == "run" else manager.step()
    if not started:
        print(f"  {manager.get_snapshot().message}")
        return 1

    if args.mode == "run":
        scheduler.run_until_idle()
    else:
        scheduler.run_until_idle()
        while manager.controller.phase != PlaybackPhase.FINISHED:
            manager.step()

    for entry in recorder.steps:
        if entry["cursor"] == 0 or entry["phase"] in ("IDLE", "FINISHED"):
            continue
        note = f"  ({entry['message']})" if entry["message"] else ""
        print(f"  #{entry['cursor']:<3} {tuple(entry['pos'])} facing {entry['dir']}{note}")

    outcome = manager.controller.outcome
    print(f"Outcome: {outcome.value if outcome else 'none'}")
    if args.replay is not None:
        recorder.flush()
    return 0 if outcome == Outcome.GOAL_REACHED else 2


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    # Default to serve mode if no subcommand given
    if args.command is None or args.command == "serve":
        if args.command is None:
            args = parser.parse_args(["serve"])
        _run_server(args)
    elif args.command == "cli":
        sys.exit(_run_cli(args))


if __name__ == "__main__":
    main()
