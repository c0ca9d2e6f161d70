# Area: Shared
"""
gameshow_sync.cli — Command-line interface
==========================================

Provides the CLI entry point.

Usage:
    python -m gameshow_sync replay actions.json           # Reduce a list of actions
    python -m gameshow_sync replay actions.json --strict  # Fail on the first invalid action
    python -m gameshow_sync demo                          # Four in-memory clients
    python -m gameshow_sync demo --config config.json     # Demo with a config file

The demo reads its configuration the same way a client does:
config file first, then GAMESHOW_* environment variables.
"""

import argparse
import asyncio
import json
import sys
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from ._core.actions import action_from_dict
from ._core.state import state_to_dict
from ._core.store import GameStore
from ._persistence.persistence import SqlitePersistence
from ._shared.config import SessionConfig, load_config
from ._shared.logging_config import log_error_block, setup_logging
from ._sync.memory_transport import InMemoryHub, InMemorySyncChannel
from .errors import ConfigError, InvalidActionError
from .session import GameSession
from .video import LocalVideoProvider

# participant id, kind, display name, drives the timer
DEMO_CLIENTS = (
    ("host-desktop", "host-desktop", "Dana", True),
    ("host-mobile", "host-mobile", "Dana (camera)", False),
    ("player-a", "playerA", "Avi", False),
    ("player-b", "playerB", "Bella", False),
)

DEMO_TICK_INTERVAL = 0.05


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="gameshow-sync",
        description="Game show session core - replay actions or run a local demo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m gameshow_sync replay actions.json
  python -m gameshow_sync replay actions.json --strict
  python -m gameshow_sync demo
  GAMESHOW_GAME_ID=G7 python -m gameshow_sync demo --config config.json
        """,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    replay = sub.add_parser("replay", help="Reduce a JSON list of actions and print the final state")
    replay.add_argument("actions", type=str, help="Path to a JSON file holding a list of actions")
    replay.add_argument(
        "--strict",
        action="store_true",
        help="Stop at the first invalid action instead of skipping it",
    )

    demo = sub.add_parser("demo", help="Run four in-memory clients through a short session")
    demo.add_argument("--config", type=str, help="Path to JSON config file")
    demo.add_argument("--db", type=str, help="SQLite file to use (default: temporary file)")

    return parser.parse_args(argv)


# ══════════════════════════════════════════════════════════════
# REPLAY
# ══════════════════════════════════════════════════════════════

def run_replay(path: str, strict: bool = False) -> int:
    """Reduce the actions in ``path`` from the initial state and print the result."""
    try:
        with open(path, encoding="utf-8") as f:
            raw_actions = json.load(f)
    except (OSError, ValueError) as e:
        print(f"Error: could not read {path}: {e}", file=sys.stderr)
        return 2
    if not isinstance(raw_actions, list):
        print("Error: actions file must hold a JSON list", file=sys.stderr)
        return 2

    store = GameStore(strict=strict)
    for index, raw in enumerate(raw_actions):
        try:
            action = action_from_dict(raw)
        except (AttributeError, ValueError) as e:
            print(f"Error: action #{index}: {e}", file=sys.stderr)
            return 2
        try:
            store.dispatch(action)
        except InvalidActionError as e:
            log_error_block(e)
            return 1

    print(json.dumps(state_to_dict(store.state), indent=2))
    if store.rejected:
        print(f"Skipped {store.rejected} invalid action(s)", file=sys.stderr)
    return 0


# ══════════════════════════════════════════════════════════════
# DEMO
# ══════════════════════════════════════════════════════════════

async def _settle(sessions: List[GameSession], rounds: int = 3) -> None:
    """Let in-flight messages reach every client."""
    for _ in range(rounds):
        await asyncio.sleep(0.01)
        for session in sessions:
            await session.reconciler.drain()


async def _wait_for_timer(session: GameSession, timeout: float = 5.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while session.state.is_timer_running and loop.time() < deadline:
        await asyncio.sleep(DEMO_TICK_INTERVAL)


def _summary(session: GameSession) -> str:
    state = session.state
    scores = " ".join(f"{pid.value}={p.score}/{p.strikes}x" for pid, p in state.players.items())
    segment = state.current_segment.value if state.current_segment else "-"
    return (
        f"{session.config.participant_id:<13} phase={state.phase.value:<9} "
        f"segment={segment:<4} q={state.current_question_index} timer={state.timer} "
        f"events={len(state.score_history)} {scores}"
    )


async def run_demo(config: SessionConfig, db_path: str) -> int:
    """Run the scripted four-client session; returns 0 if every client converged."""
    hub = InMemoryHub()
    persistence = SqlitePersistence(db_path)
    video = LocalVideoProvider()
    game_id = config.game_id or "DEMO-001"

    sessions: Dict[str, GameSession] = {}
    for participant_id, kind, name, drives in DEMO_CLIENTS:
        client_config = config.model_copy(update={
            "game_id": game_id,
            "participant_id": participant_id,
            "participant_kind": kind,
            "display_name": name,
            "drives_timer": drives,
            "tick_interval_seconds": DEMO_TICK_INTERVAL,
        })
        channel = InMemorySyncChannel(hub, game_id, participant_id)
        sessions[participant_id] = GameSession(
            client_config, channel, persistence=persistence, video=video,
        )

    everyone = list(sessions.values())
    host = sessions["host-desktop"]
    player_a = sessions["player-a"]
    player_b = sessions["player-b"]

    try:
        for session in everyone:
            await session.start()

        await host.start_session("HOST-42", host_name="Dana")
        await host.create_video_room()
        await _settle(everyone)

        player_a.join_game("playerA", {"name": "Avi", "flag": "IL", "club": "Hapoel"})
        player_b.join_game("playerB", {"name": "Bella", "flag": "FR"})
        await _settle(everyone)

        host.start_game()
        host.award_points("playerA", 10, "correct answer")
        host.add_strike("playerB")
        host.start_timer(3)
        await _wait_for_timer(host)
        await _settle(everyone)

        host.next_question()
        host.award_points("playerB", 5, "steal")
        player_a.use_special_button("playerA", "LOCK_BUTTON")
        await _settle(everyone)

        host.next_segment()
        await _settle(everyone)
    finally:
        for session in everyone:
            await session.stop()

    reference = state_to_dict(host.state)
    converged = all(state_to_dict(s.state) == reference for s in everyone)
    for session in everyone:
        print(_summary(session))
    print(f"converged: {'yes' if converged else 'no'}")

    warnings = sum(len(s.warnings) for s in everyone)
    if warnings:
        print(f"warnings: {warnings}", file=sys.stderr)
    return 0 if converged else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)

    if args.command == "replay":
        setup_logging(log_file_path=None, level="WARNING")
        return run_replay(args.actions, strict=args.strict)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    setup_logging(log_file_path=config.log_file, level=config.log_level)

    if args.db:
        return asyncio.run(run_demo(config, args.db))
    with tempfile.TemporaryDirectory() as tmp:
        return asyncio.run(run_demo(config, str(Path(tmp) / "demo.db")))
