#!/usr/bin/env python3
"""
Comic Cover command line.

Walks through the same flow as the web client (consent, quiz, selfie,
cover, story) with the session kept in a local JSON profile.

Usage:
    comic-cover serve                      # Run the API server
    comic-cover consent show|accept|clear  # Manage data-handling consent
    comic-cover quiz [--resume]            # Answer the eight questions
    comic-cover selfie PATH                # Upload a selfie image file
    comic-cover retake                     # Forget the selfie and cover
    comic-cover cover                      # Generate the Issue 01 cover
    comic-cover story [--companion NAME]   # Generate the seven story panels
    comic-cover status                     # Show what the session holds

Examples:
    comic-cover consent accept
    comic-cover quiz
    comic-cover selfie ~/Pictures/me.png
    comic-cover cover --api http://localhost:3000
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime

from dotenv import load_dotenv

from comic_cover.config import get_settings
from comic_cover.client.storage import JsonFileStorage
from comic_cover.client.session import SessionContext
from comic_cover.client.consent import ConsentStore, CONSENT_VERSION
from comic_cover.client.quiz import QuizState, QuizOutcome
from comic_cover.client.selfie import SelfieFlow
from comic_cover.client.api_client import ComicCoverClient
from comic_cover.client.story import StoryGenerator, StoryNames, prepare_panel_dialogue
from comic_cover.services.errors import ComicCoverError

logger = logging.getLogger(__name__)

BACK_COMMAND = ":back"


def build_session(args) -> SessionContext:
    settings = get_settings()
    return SessionContext(JsonFileStorage(args.profile or settings.client_profile_path))


# ============================================================================
# Commands
# ============================================================================

def cmd_serve(args) -> int:
    from comic_cover.main import main as serve
    serve()
    return 0


def cmd_consent(args) -> int:
    consent = ConsentStore(build_session(args).storage)
    if args.action == "accept":
        consent.set()
        print(f"✅ Consent recorded ({CONSENT_VERSION})")
    elif args.action == "clear":
        consent.clear()
        print("🗑️  Consent cleared")

    record = consent.get()
    if record and record.accepted:
        ts = datetime.fromtimestamp(record.timestamp / 1000).isoformat(timespec="seconds")
        print(f"Consent: accepted for {CONSENT_VERSION} at {ts}")
    else:
        print(f"Consent: not given for {CONSENT_VERSION}")
    return 0


def cmd_quiz(args) -> int:
    quiz = QuizState(build_session(args))
    if args.resume:
        quiz.prefill()
    else:
        quiz.start_new()

    print(f"What is Your Origin Story? (type {BACK_COMMAND} to go back)\n")
    while not quiz.completed:
        q = quiz.current_question
        hint = f" [{'/'.join(q.options)}]" if q.options else (f" ({q.placeholder})" if q.placeholder else "")
        current = f" <{quiz.value.strip()}>" if quiz.value.strip() else ""
        try:
            raw = input(f"Q {quiz.step + 1}/{quiz.total} {q.label}{hint}{current}\n> ")
        except EOFError:
            print("\nQuiz interrupted; answers not saved.")
            return 1

        if raw.strip() == BACK_COMMAND:
            quiz.back()
            continue
        if raw.strip():
            try:
                quiz.update(raw.strip().capitalize() if q.options else raw)
            except ComicCoverError as e:
                print(f"⚠️  {e}")
                continue

        outcome = quiz.next()
        if outcome == QuizOutcome.STAYED:
            print("⚠️  Please answer before moving on.")
        elif outcome == QuizOutcome.JUMPED_TO_MISSING:
            print(f"⚠️  '{quiz.current_question.key}' still needs an answer.")

    print("\n✅ Answers saved. Next: comic-cover selfie PATH")
    return 0


def cmd_selfie(args) -> int:
    settings = get_settings()
    session = build_session(args)
    consent = ConsentStore(session.storage)
    if not settings.cloudinary_cloud_name:
        print("❌ CLOUDINARY_CLOUD_NAME is not set")
        return 1

    flow = SelfieFlow(session, consent, settings.cloudinary_cloud_name, settings.cloudinary_upload_preset)
    if flow.capture(args.path) is None:
        print("❌ Consent required first: comic-cover consent accept")
        return 1

    selfie_url = asyncio.run(flow.confirm())
    print(f"✅ Selfie uploaded: {selfie_url}\nNext: comic-cover cover")
    return 0


def cmd_retake(args) -> int:
    build_session(args).invalidate_selfie()
    print("🗑️  Selfie and cover cleared")
    return 0


def cmd_cover(args) -> int:
    settings = get_settings()
    client = ComicCoverClient(args.api or settings.api_base_url, build_session(args))

    print("🦸 Generating your cover...")
    cover = asyncio.run(client.generate_cover())
    print(f"\n{cover.hero_name}  |  Issue {cover.issue}")
    print(f"“{cover.tagline}”")
    print(f"{cover.comic_image_url}")
    return 0


def cmd_story(args) -> int:
    settings = get_settings()
    session = build_session(args)
    client = ComicCoverClient(args.api or settings.api_base_url, session)
    generator = StoryGenerator(client, session, companion_name=args.companion)

    print("📖 Generating your origin story...")
    panels = asyncio.run(generator.generate())
    _, _, names = generator.prepare()
    _print_story(panels, names)
    return 0


def _print_story(panels, names: StoryNames):
    color_map = {}
    for panel in panels:
        title = "Cover" if panel.is_cover else f"Panel {panel.index} ({panel.beat})"
        print(f"\n== {title} ==")
        print(panel.image_url or "(image failed)")
        for line in prepare_panel_dialogue(panel.dialogue, names, color_map):
            print(f"  {line.speaker}: {line.text}")


def cmd_status(args) -> int:
    session = build_session(args)
    snapshot = session.read()
    consent = ConsentStore(session.storage).has_consent()

    print(f"Consent:     {'yes' if consent else 'no'} ({CONSENT_VERSION})")
    print(f"Answers:     {'saved' if snapshot.answers else 'none'}")
    if snapshot.answers:
        for key, value in snapshot.answers.items():
            print(f"  {key:<11}{value}")
    print(f"Selfie:      {snapshot.selfie_url or '-'}")
    print(f"Cover:       {snapshot.cover_image_url or '-'}")
    print(f"Hero name:   {snapshot.hero_name or '-'}")
    return 0


# ============================================================================
# Entry point
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="comic-cover",
        description="Turn a quiz and a selfie into your own superhero comic",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--profile", help="Path to the local session profile (JSON)")
    parser.add_argument("--api", help="API base URL (default: API_BASE_URL or http://localhost:3000)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logs")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="Run the API server").set_defaults(func=cmd_serve)

    consent = sub.add_parser("consent", help="Show, accept or clear consent")
    consent.add_argument("action", choices=["show", "accept", "clear"])
    consent.set_defaults(func=cmd_consent)

    quiz = sub.add_parser("quiz", help="Answer the origin story quiz")
    quiz.add_argument("--resume", action="store_true", help="Prefill from saved answers")
    quiz.set_defaults(func=cmd_quiz)

    selfie = sub.add_parser("selfie", help="Upload a selfie image file")
    selfie.add_argument("path", help="Image file to use as the selfie")
    selfie.set_defaults(func=cmd_selfie)

    sub.add_parser("retake", help="Forget the selfie and cover").set_defaults(func=cmd_retake)
    sub.add_parser("cover", help="Generate the Issue 01 cover").set_defaults(func=cmd_cover)
    story = sub.add_parser("story", help="Generate the story panels")
    story.add_argument("--companion", help="Name the sidekick (default: the saved or a random name)")
    story.set_defaults(func=cmd_story)
    sub.add_parser("status", help="Show the session").set_defaults(func=cmd_status)

    return parser


def main(argv=None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
    )

    try:
        return args.func(args)
    except ComicCoverError as e:
        print(f"❌ {e}")
        return 1
    except KeyboardInterrupt:
        print("\nCancelled.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
