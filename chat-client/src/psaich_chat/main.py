"""Entry point for the psaich companion chat client."""

import argparse
import logging
import sys
from dataclasses import dataclass
from datetime import date
from pathlib import Path

import firebase_admin  # type: ignore[import-untyped]
from firebase_admin import credentials, firestore  # type: ignore[import-untyped]

from psaich_shared import (
    PSYCHOLOGY_SCHOOL_DESCRIPTIONS,
    Language,
    ProfileUpdate,
    PsychologySchool,
    SubscriptionPlan,
)

from .assistant import Assistant
from .auth import fetch_identity, update_user_profile, upload_profile_image
from .cache import LocalCache
from .config import Config, load_config
from .firebase_client import FirestoreClient
from .history import filter_chat_dates, format_chat_date
from .quota import quota_status_message
from .session import ChatSession, SendStatus, subscribe
from .speech import (
    NullSpeechInput,
    NullSpeechOutput,
    Playback,
    RecognitionSession,
    SpeechInput,
    SpeechOutput,
)
from .streak import streak_message

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Clients and providers built once at startup."""

    config: Config
    language: Language
    cache: LocalCache
    assistant: Assistant
    speech_output: SpeechOutput
    speech_input: SpeechInput
    client: FirestoreClient | None = None


def setup_logging(verbose: bool, log_file: Path | None = None) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO
    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def init_firebase(config: Config) -> firestore.Client:
    """Initialize Firebase Admin SDK and return Firestore client."""
    cred = credentials.Certificate(str(config.firebase_credentials_path))
    options = {"storageBucket": config.storage_bucket} if config.storage_bucket else None
    firebase_admin.initialize_app(cred, options)
    return firestore.client()


def build_context(args: argparse.Namespace) -> AppContext:
    """Load configuration and build the application context."""
    setup_logging(args.verbose, args.log_file)

    config_path: Path = args.config
    if not config_path.exists():
        logger.error("Configuration file not found: %s", config_path)
        sys.exit(1)

    config = load_config(config_path)
    cache = LocalCache(config.cache_dir or Path.home() / ".psaich" / "cache")

    language = getattr(args, "language", None)
    if language is not None:
        cache.save_language(language)
    else:
        language = cache.load_language() or config.language

    client = None
    if config.user_id:
        db = init_firebase(config)
        logger.info("Firebase initialized")
        client = FirestoreClient(db=db, user_id=config.user_id)

    return AppContext(
        config=config,
        language=language,
        cache=cache,
        assistant=Assistant.from_api_key(config.openai_api_key, model=config.openai_model),
        speech_output=NullSpeechOutput(),
        speech_input=NullSpeechInput(),
        client=client,
    )


def require_client(ctx: AppContext) -> FirestoreClient:
    if ctx.client is None:
        logger.error("This command needs a signed-in user (set user_id in the config)")
        sys.exit(1)
    return ctx.client


def cmd_run(args: argparse.Namespace) -> None:
    """Chat interactively with the persona."""
    ctx = build_context(args)

    if ctx.client is not None:
        identity = fetch_identity(ctx.client.user_id)
        ctx.client.save_user_data(identity)
        logger.info("Signed in as %s", identity.email or identity.uid)

    session = ChatSession(
        assistant=ctx.assistant,
        cache=ctx.cache,
        client=ctx.client,
        language=ctx.language,
    )
    recognition = RecognitionSession(ctx.speech_input, ctx.language)
    playback = Playback(ctx.speech_output, ctx.language, recognition)

    session.sync_message_count()
    print(quota_status_message(session.state.message_count, session.logged_in, ctx.language))

    while True:
        try:
            text = input("> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break

        command = text.strip()
        if command in ("/quit", "/exit"):
            break
        if command == "/dictate":
            if not recognition.is_recording:
                playback.stop()
                recognition.start()
                continue
            recognition.stop()
            text, recognition.input_text = recognition.input_text, ""
            command = text

        if command == "/upgrade":
            session.upgrade()
        elif command == "/logout":
            session.logout()
        else:
            result = session.send(text)
            if result.reply:
                print(result.reply)
                if args.speak:
                    playback.play(str(len(session.state.turns)), result.reply)
            if result.status == SendStatus.IGNORED:
                continue

        print(quota_status_message(session.state.message_count, session.logged_in, ctx.language))


def cmd_history(args: argparse.Namespace) -> None:
    """Show past conversations."""
    ctx = build_context(args)
    client = require_client(ctx)

    if args.date is not None:
        for message in client.get_messages_for_day(args.date):
            stamp = f"{message.timestamp.astimezone():%H:%M} " if message.timestamp else ""
            print(f"{stamp}you: {message.user_message}")
            print(f"{stamp}eliza: {message.ai_response}")
        return

    dates = client.get_chat_dates()
    if args.search:
        dates = filter_chat_dates(dates, args.search)
    for iso_date in dates:
        print(f"{iso_date}  {format_chat_date(iso_date)}")


def cmd_streak(args: argparse.Namespace) -> None:
    """Show the consecutive-day streak."""
    ctx = build_context(args)
    client = require_client(ctx)
    days = client.update_streak() if args.update else client.get_streak()
    print(streak_message(days))


def cmd_settings(args: argparse.Namespace) -> None:
    """Update profile settings."""
    ctx = build_context(args)
    client = require_client(ctx)

    fields = {
        "display_name": args.display_name,
        "phone_number": args.phone,
        "address": args.address,
        "country": args.country,
        "newsletter": args.newsletter,
        "psychology_school": args.psychology_school,
    }

    try:
        if args.photo is not None:
            fields["photo_url"] = upload_profile_image(
                client.user_id, args.photo, ctx.config.storage_bucket
            )
        profile = ProfileUpdate(**{k: v for k, v in fields.items() if v is not None})
        update_user_profile(client, profile)
    except Exception:
        logger.exception("Error updating user profile")
        print("Failed to update your information. Please try again.")
        sys.exit(1)

    print("Your information was updated successfully.")
    if profile.psychology_school is not None:
        print(PSYCHOLOGY_SCHOOL_DESCRIPTIONS[profile.psychology_school])


def cmd_upgrade(args: argparse.Namespace) -> None:
    """Grant the upgraded message allowance."""
    ctx = build_context(args)
    session = ChatSession(ctx.assistant, ctx.cache, ctx.client, ctx.language)
    session.upgrade()
    print(quota_status_message(session.state.message_count, session.logged_in, ctx.language))


def cmd_subscribe(args: argparse.Namespace) -> None:
    """Start a subscription (not yet connected to payments)."""
    setup_logging(args.verbose, args.log_file)
    subscribe(args.plan)


def add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=Path("config.json"),
        help="Path to configuration file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this file",
    )


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="psaich companion chat",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  psaich                               Chat interactively
  psaich run --language en-US --speak  Chat in English, reading replies aloud
  psaich history                       List days with past conversations
  psaich history --date 2024-03-05     Show one day's conversation
  psaich streak --update               Record today's visit and show the streak
  psaich settings --country br         Update profile settings
""",
    )

    subparsers = parser.add_subparsers(dest="command")

    # Run command (default)
    run_parser = subparsers.add_parser("run", help="Chat interactively")
    add_common_args(run_parser)
    run_parser.add_argument(
        "--language", "-l",
        type=Language,
        choices=list(Language),
        default=None,
        help="Chat language (remembered for next time)",
    )
    run_parser.add_argument(
        "--speak",
        action="store_true",
        help="Read replies aloud where speech output is available",
    )
    run_parser.set_defaults(func=cmd_run)

    # History command
    history_parser = subparsers.add_parser("history", help="Show past conversations")
    add_common_args(history_parser)
    history_parser.add_argument(
        "--date", "-d",
        type=date.fromisoformat,
        default=None,
        help="Show the conversation of one day (YYYY-MM-DD)",
    )
    history_parser.add_argument(
        "--search", "-s",
        default="",
        help="Filter listed days, e.g. 'march'",
    )
    history_parser.set_defaults(func=cmd_history)

    # Streak command
    streak_parser = subparsers.add_parser("streak", help="Show the usage streak")
    add_common_args(streak_parser)
    streak_parser.add_argument(
        "--update",
        action="store_true",
        help="Record a visit now before showing the streak",
    )
    streak_parser.set_defaults(func=cmd_streak)

    # Settings command
    settings_parser = subparsers.add_parser("settings", help="Update profile settings")
    add_common_args(settings_parser)
    settings_parser.add_argument("--display-name")
    settings_parser.add_argument("--phone")
    settings_parser.add_argument("--address")
    settings_parser.add_argument("--country", choices=["us", "ca", "uk", "br", "pt"])
    settings_parser.add_argument(
        "--newsletter",
        action=argparse.BooleanOptionalAction,
        default=None,
    )
    settings_parser.add_argument(
        "--psychology-school",
        type=PsychologySchool,
        choices=list(PsychologySchool),
    )
    settings_parser.add_argument("--photo", type=Path, help="Profile picture to upload")
    settings_parser.set_defaults(func=cmd_settings)

    # Upgrade command
    upgrade_parser = subparsers.add_parser("upgrade", help="Upgrade the message allowance")
    add_common_args(upgrade_parser)
    upgrade_parser.set_defaults(func=cmd_upgrade)

    # Subscribe command
    subscribe_parser = subparsers.add_parser("subscribe", help="Choose a subscription plan")
    add_common_args(subscribe_parser)
    subscribe_parser.add_argument("plan", type=SubscriptionPlan, choices=list(SubscriptionPlan))
    subscribe_parser.set_defaults(func=cmd_subscribe)

    # Add common args to main parser for default behavior
    add_common_args(parser)

    args = parser.parse_args()

    # Default to run if no subcommand
    if args.command is None:
        args.language = None
        args.speak = False
        cmd_run(args)
    else:
        args.func(args)


if __name__ == "__main__":
    main()
