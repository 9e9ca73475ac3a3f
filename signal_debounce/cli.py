from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from signal_debounce.analysis.analyze import analyze_session
from signal_debounce.realtime.app import ReplayApp
from signal_debounce.realtime.debounce import EdgeMode
from signal_debounce.realtime.logging_utils import setup_logging
from signal_debounce.utils.io_utils import file_sha256, load_yaml, prepare_session_dir, save_yaml


def main(argv: Optional[list[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "replay":
        _cmd_replay(args)
        return
    if args.command == "analyze_session":
        _cmd_analyze_session(args)
        return

    parser.print_help()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="signal-debounce", description="Boolean signal debouncing tools")
    sub = parser.add_subparsers(dest="command")

    p_rep = sub.add_parser("replay", help="Replay recorded raw samples through a debouncer")
    p_rep.add_argument("--config", required=True, help="Path to config YAML")
    p_rep.add_argument("--input", default=None, help="Samples CSV override (default: replay.input_csv)")
    p_rep.add_argument("--out_dir", default=None, help="Session output root override")
    p_rep.add_argument("--duration_ms", type=float, default=None, help="Debounce duration override in ms")
    p_rep.add_argument(
        "--edge",
        default=None,
        choices=[m.value for m in EdgeMode],
        help="Edge policy override",
    )

    p_an = sub.add_parser("analyze_session", help="Analyze one replay session directory")
    p_an.add_argument("--session_dir", required=True, help="Path to session directory")
    p_an.add_argument("--no_plots", action="store_true", help="Disable plot output")

    for p in (p_rep, p_an):
        p.add_argument("--verbose", action="store_true", help="Show DEBUG messages on the console")

    return parser


def _cmd_replay(args: argparse.Namespace) -> None:
    config_path = Path(args.config)
    config = load_yaml(config_path)

    debounce_cfg = config.setdefault("debounce", {})
    if args.duration_ms is not None:
        debounce_cfg["duration_ms"] = args.duration_ms
    if args.edge is not None:
        debounce_cfg["edge"] = args.edge
    if args.input is not None:
        config.setdefault("replay", {})["input_csv"] = args.input

    session_dir = prepare_session_dir(config, out_dir_override=args.out_dir)

    used_cfg_path = session_dir / "config_used.yaml"
    save_yaml(config, used_cfg_path)

    logger = setup_logging(session_dir, console_level=_console_level(args))
    logger.info("Config copied to: %s", used_cfg_path)
    logger.info("Config sha256: %s", file_sha256(used_cfg_path))

    app = ReplayApp(config=config, session_dir=session_dir, logger=logger)
    status = app.run()
    if status != 0:
        raise SystemExit(status)
    print(session_dir)


def _cmd_analyze_session(args: argparse.Namespace) -> None:
    session_dir = Path(args.session_dir)
    logger = setup_logging(session_dir, console_level=_console_level(args))
    summary_path = analyze_session(
        session_dir=session_dir,
        output_plots_override=(False if args.no_plots else None),
        logger=logger,
    )
    print(summary_path)


def _console_level(args: argparse.Namespace) -> int:
    return logging.DEBUG if getattr(args, "verbose", False) else logging.INFO


if __name__ == "__main__":
    main(sys.argv[1:])
