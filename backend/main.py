"""
minutes Backend Main Entry Point

Command-line front end for the transcription router and meeting summaries.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional


def setup_logging(level: Optional[str] = None):
    """
    Configure logging for the backend.

    Sets up logging format and suppresses verbose logs from external libraries
    (strands, boto3, httpx, etc.) to keep the output clean.
    """
    # Get log level from environment variable (default: INFO)
    log_level_str = (level or os.getenv("MINUTES_LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )

    # Suppress verbose logs from external libraries
    for name in ("strands", "boto3", "botocore", "urllib3", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


# Initialize logging before importing other modules
setup_logging()

from config import AppConfig
from transcription import (
    AudioFile,
    CredentialRequiredError,
    ModelNotLoadedError,
    ModelRegistry,
    ProgressEvent,
    StoreError,
    TranscriptionError,
    TranscriptionRouter,
    UnknownModelError,
    build_router,
)
from summary import MeetingInfo, MeetingSummaryService, SummaryAgent, SummaryError

logger = logging.getLogger(__name__)


def print_progress(event: ProgressEvent) -> None:
    """Progress sink writing one line per event to stderr."""
    print(f"[{event.progress:5.1f}%] {event.phase.value}: {event.message}", file=sys.stderr)


def error_hint(error: TranscriptionError) -> Optional[str]:
    """Actionable follow-up for an error kind, if there is one."""
    if isinstance(error, CredentialRequiredError):
        return f"Run: minutes set-key {error.group} <api-key>"
    if isinstance(error, UnknownModelError):
        return "Run: minutes models"
    if isinstance(error, ModelNotLoadedError):
        return "Download the model weights into MINUTES_MODELS_DIR first."
    return None


def cmd_models(router: TranscriptionRouter, args: argparse.Namespace) -> int:
    active = router.get_active_model()
    for model in router.list_models():
        if not model.is_available:
            status = "unavailable"
        elif router.is_configured(model.id):
            status = "ready"
        else:
            status = f"needs key '{router.credentials.credential_group(model)}'"
        marker = "*" if model.id == active.id else " "
        print(f"{marker} {model.id:<32} {model.family.value:<20} {status}")

    stats = router.model_stats()
    print(
        f"\n{stats['configured']} of {stats['available']} available models ready "
        f"({stats['total']} registered)"
    )
    return 0


def cmd_use(router: TranscriptionRouter, args: argparse.Namespace) -> int:
    model = router.set_active_model(args.model_id)
    print(f"Active model: {model.id} ({model.display_name})")
    return 0


def cmd_set_key(router: TranscriptionRouter, args: argparse.Namespace) -> int:
    try:
        router.set_credential(args.group, args.secret)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"Saved API key for '{args.group}'")
    return 0


async def cmd_transcribe(router: TranscriptionRouter, args: argparse.Namespace) -> int:
    result = await router.transcribe(AudioFile(args.file), model_id=args.model)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        if result.segments:
            for segment in result.segments:
                minutes, seconds = divmod(int(segment.start_time), 60)
                print(f"[{minutes:02d}:{seconds:02d}] {segment.text}")
        else:
            print(result.text)
        print(
            f"\n({result.model_id}, {result.processing_time:.1f}s)",
            file=sys.stderr,
        )
    return 0


async def cmd_summarize(
    router: TranscriptionRouter,
    args: argparse.Namespace,
    config: AppConfig,
) -> int:
    result = await router.transcribe(AudioFile(args.file), model_id=args.model)

    service = MeetingSummaryService(
        SummaryAgent(model_name=config.summary_model, host=config.ollama_host)
    )
    meeting = MeetingInfo(
        meeting_id=Path(args.file).stem,
        transcript=result.text,
        title=args.title or Path(args.file).stem,
        duration_seconds=result.duration,
    )
    try:
        summary = await service.generate_summary(meeting)
    finally:
        await service.stop()

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
        return 0

    print(f"# {summary.title}\n\n{summary.short_summary}\n")
    if summary.overview:
        print(f"{summary.overview}\n")
    for heading, items in (
        ("Key points", summary.key_points),
        ("Decisions", summary.decisions),
        ("Next steps", summary.next_steps),
    ):
        if items:
            print(f"## {heading}")
            for item in items:
                print(f"- {item}")
            print()
    if summary.action_items:
        print("## Action items")
        for item in summary.action_items:
            owner = f" ({item.assignee})" if item.assignee else ""
            print(f"- [{item.priority}] {item.task}{owner}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minutes",
        description="Transcribe and summarize meeting recordings.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("models", help="List transcription models")

    use = subparsers.add_parser("use", help="Set the active transcription model")
    use.add_argument("model_id")

    set_key = subparsers.add_parser("set-key", help="Store an API key for a provider")
    set_key.add_argument("group", help="Credential group, e.g. gemini or groq")
    set_key.add_argument("secret")

    transcribe = subparsers.add_parser("transcribe", help="Transcribe an audio file")
    transcribe.add_argument("file")
    transcribe.add_argument("--model", help="Model id (default: active model)")
    transcribe.add_argument("--json", action="store_true", help="Print the result as JSON")

    summarize = subparsers.add_parser("summarize", help="Transcribe and summarize a meeting")
    summarize.add_argument("file")
    summarize.add_argument("--model", help="Transcription model id")
    summarize.add_argument("--title", help="Meeting title")
    summarize.add_argument("--json", action="store_true", help="Print the summary as JSON")

    return parser


async def run(args: argparse.Namespace, config: AppConfig) -> int:
    """Run one command against a freshly built router."""
    router = build_router(config, progress_sink=print_progress)
    try:
        if args.command == "models":
            return cmd_models(router, args)
        if args.command == "use":
            return cmd_use(router, args)
        if args.command == "set-key":
            return cmd_set_key(router, args)
        if args.command == "transcribe":
            return await cmd_transcribe(router, args)
        if args.command == "summarize":
            return await cmd_summarize(router, args, config)
        raise ValueError(f"Unknown command: {args.command}")
    finally:
        await router.aclose()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = AppConfig.from_env()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    is_valid, errors = config.validate()
    if config.default_model not in ModelRegistry():
        is_valid = False
        errors.append(f"MINUTES_DEFAULT_MODEL is not a known model: {config.default_model}")
    if not is_valid:
        for error in errors:
            print(f"Configuration error: {error}", file=sys.stderr)
        return 1

    try:
        return asyncio.run(run(args, config))
    except TranscriptionError as e:
        print(f"Error: {e}", file=sys.stderr)
        hint = error_hint(e)
        if hint:
            print(hint, file=sys.stderr)
        return 1
    except SummaryError as e:
        print(f"Summary error: {e}", file=sys.stderr)
        return 1
    except StoreError as e:
        print(f"Settings error: {e}", file=sys.stderr)
        return 1


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
