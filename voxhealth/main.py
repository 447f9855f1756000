"""CLI entry-point — run one screening session in the terminal.

Usage:
    python -m voxhealth.main recording.wav [--language hi] [--age 54 --smoker]
    # or via pyproject entry-point:  voxhealth recording.wav
"""

from __future__ import annotations

import argparse
import base64
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from voxhealth.logging_config import setup_logging
from voxhealth.models.profile import UserProfile
from voxhealth.workflow import SessionOrchestrator

BANNER = """
╔══════════════════════════════════════════════════════════════╗
║              VoxHealth — Voice Screening Session             ║
║                                                              ║
║  Answer a few follow-up questions about your recording.     ║
║  Type 'quit' at any time to skip straight to the report.    ║
╚══════════════════════════════════════════════════════════════╝
"""

LOCAL_OWNER_ID = "local-user"


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="voxhealth", description=__doc__.splitlines()[0])
    parser.add_argument("audio", type=Path, help="WAV recording to screen")
    parser.add_argument("--owner", default=LOCAL_OWNER_ID, help="history owner id")
    parser.add_argument("--language", default="en")
    parser.add_argument("--name", default="")
    parser.add_argument("--age", type=int, default=0)
    parser.add_argument("--gender", default="")
    parser.add_argument("--smoker", action="store_true")
    parser.add_argument("--notes", default="")
    parser.add_argument("--json", action="store_true", help="also print the full report")
    return parser.parse_args(argv)


def _ask(question: dict) -> int | None:
    """Prompt until the user picks a valid option; None means quit."""
    print(f"\n🩺  {question['text']}\n")
    for i, label in enumerate(question["options"], start=1):
        print(f"   {i}. {label}")
    while True:
        try:
            raw = input("\nYour choice: ").strip()
        except (EOFError, KeyboardInterrupt):
            return None
        if raw.lower() == "quit":
            return None
        if raw.isdigit() and 1 <= int(raw) <= len(question["options"]):
            return int(raw) - 1
        print("Please enter one of the option numbers.")


def _print_report(state: dict) -> None:
    report = state["report"]
    inference = report["clinical_inference"]
    print("\n" + "═" * 60)
    print("SCREENING COMPLETE")
    print("═" * 60)
    print(f"Report        : {state['scan']['id']}")
    print(f"Primary       : {inference['primary_suspect']}")
    print(f"Confidence    : {inference['confidence_metrics']['aggregate_score']:.0%}")
    print(f"Urgency       : {report['frontend_state']['urgency']}")
    print(f"Summary       : {report['frontend_state']['history_card_summary']}")
    print(f"Exclusion     : {inference['differential_diagnosis']['exclusion_logic']}")
    print(f"Saved         : {'yes' if state.get('saved') else 'no'}")
    print("═" * 60)


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    setup_logging()
    args = _parse_args(argv)

    if not args.audio.is_file():
        sys.exit(f"No such recording: {args.audio}")

    print(BANNER)
    audio_b64 = base64.b64encode(args.audio.read_bytes()).decode("ascii")
    profile = UserProfile(
        uid=args.owner,
        name=args.name,
        age=args.age,
        gender=args.gender,
        smoking_history=args.smoker,
        notes=args.notes,
        language=args.language,
    )

    orchestrator = SessionOrchestrator()
    print("Analyzing your recording…")
    state = orchestrator.start(args.owner, audio_b64, profile)

    while not orchestrator.is_complete(state):
        question = orchestrator.pending_question(state)
        choice = _ask(question) if question else None
        if choice is None:
            print("\nSkipping the remaining questions…")
            state = orchestrator.skip_remaining(state["session_id"])
            break
        state = orchestrator.answer(state["session_id"], choice)

    _print_report(state)
    if args.json:
        print(json.dumps(state["report"], indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
