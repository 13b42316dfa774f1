"""Command line front end for HomeFix."""

import argparse
import asyncio
import sys
from pathlib import Path

from homefix.app_logging import configure_logging
from homefix.containers import AppContainer, build_container
from homefix.domain.repair import RepairGuide
from homefix.domain.session import SessionState, SessionStatus
from homefix.errors import (
    AnalysisInProgressError,
    ConfigurationError,
    InvalidImageError,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="homefix",
        description="Photograph a broken item, describe it, get a repair guide.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    analyze = commands.add_parser("analyze", help="Analyze an image of a broken item")
    analyze.add_argument(
        "image",
        nargs="?",
        type=Path,
        help="Image file; omit to retry with the last uploaded image",
    )
    analyze.add_argument("-p", "--prompt", help="Describe the problem")
    analyze.add_argument("--mime-type", help="Override the detected image type")

    commands.add_parser("show", help="Print the saved repair guide")
    commands.add_parser("reset", help="Clear the saved session")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``homefix`` command."""
    args = build_parser().parse_args(argv)
    configure_logging()
    try:
        container = build_container()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    configure_logging(container.settings.log_level)
    return asyncio.run(_run_and_close(container, args))


async def _run_and_close(container: AppContainer, args: argparse.Namespace) -> int:
    try:
        return await _run(container, args)
    finally:
        await container.close_resources()


async def _run(container: AppContainer, args: argparse.Namespace) -> int:
    controller = container.session_controller
    if args.command == "reset":
        controller.reset()
        print("Session cleared.")
        return 0
    if args.command == "show":
        print(render_state(controller.state))
        return 0 if controller.state.result else 1

    if args.prompt is not None:
        controller.set_prompt(args.prompt)
    image_data = args.image.read_bytes() if args.image else None
    try:
        state = await controller.analyze(image_data, args.mime_type)
    except (InvalidImageError, AnalysisInProgressError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(render_state(state))
    return 0 if state.status is SessionStatus.RESULT else 1


def render_state(state: SessionState) -> str:
    """Render the session for a terminal."""
    if state.status is SessionStatus.ERROR:
        return f"Error: {state.error}"
    if state.result is None:
        if state.media_preview:
            return "No repair guide yet. Run `homefix analyze` to retry."
        return "No repair guide yet. Run `homefix analyze IMAGE` to start."
    return render_guide(state.result)


def render_guide(guide: RepairGuide) -> str:
    lines = [
        guide.item_name,
        f"Difficulty: {guide.difficulty.value}    Time: {guide.estimated_time}",
        "",
        guide.problem_analysis,
        "",
        "Tools:",
        *[f"  - {tool}" for tool in guide.tools or ["None"]],
        "Parts:",
        *[f"  - {part}" for part in guide.parts or ["None"]],
        "",
        "Steps:",
    ]
    for number, step in enumerate(guide.steps, start=1):
        lines.append(f"  {number}. {step.title}")
        lines.append(f"     {step.description}")
    return "\n".join(lines)


if __name__ == "__main__":
    sys.exit(main())
