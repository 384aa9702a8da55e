#!/usr/bin/env python3
"""
CLI tool to run segment edits on a local video file.

Usage:
    python scripts/segcut_cli.py remove <video_path> <output_path> --segment START END [--segment START END ...]
    python scripts/segcut_cli.py keep-event <video_path> <output_path> "<event description>"
    python scripts/segcut_cli.py remove-event <video_path> <output_path> "<event description>"

Example:
    python scripts/segcut_cli.py remove match.mp4 out.mp4 --segment 00:01:10 00:01:45 --segment 300 312.5
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from segcut.pipeline.errors import SegCutError
from segcut.services.edit_service import EditService


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
)
logger = logging.getLogger(__name__)


async def run_command(args: argparse.Namespace) -> dict:
    """Dispatch a parsed command to the edit service."""
    service = EditService()

    if args.command == "remove":
        result = await service.remove_segments(args.video_path, args.output_path, args.segment)
        return result.to_dict()

    if args.command == "keep-event":
        result = await service.keep_event(args.video_path, args.output_path, args.event_description)
    else:
        result = await service.remove_event(args.video_path, args.output_path, args.event_description)

    logger.info(f"Analysis:\n{result.analysis}")
    return result.to_dict()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Edit a video by timestamp",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Cut two ranges out of a video
    python scripts/segcut_cli.py remove in.mp4 out.mp4 --segment 10 20 --segment 01:05 01:30

    # Keep only the penalty save
    python scripts/segcut_cli.py keep-event match.mp4 save.mp4 "the goalkeeper saves the penalty kick"

    # Drop every moment the dog barks (output directory gets in_edited.mp4)
    python scripts/segcut_cli.py remove-event in.mp4 ./edited "the dog barks"
        """
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    remove = subparsers.add_parser("remove", help="Remove explicit time ranges")
    remove.add_argument("video_path", type=Path, help="Path to the source video")
    remove.add_argument("output_path", type=Path, help="Path for the edited video")
    remove.add_argument(
        "--segment", "-s",
        nargs=2,
        action="append",
        required=True,
        metavar=("START", "END"),
        help="Range to remove (HH:MM:SS[.mmm], MM:SS[.mmm] or seconds); repeatable"
    )

    for name, help_text in (
        ("keep-event", "Keep only the segment where an event occurs"),
        ("remove-event", "Remove every segment where an event occurs"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("video_path", type=Path, help="Path to the source video")
        sub.add_argument("output_path", type=Path, help="Path for the edited video")
        sub.add_argument("event_description", help="Natural-language description of the event")

    return parser


def main():
    args = build_parser().parse_args()

    try:
        result = asyncio.run(run_command(args))
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)
    except SegCutError as e:
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)

    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
