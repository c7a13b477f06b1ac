"""Main entry point for vocabboost."""
import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Sequence, TextIO

from vocabboost.config import ensure_directories, settings
from vocabboost.logging_config import setup_logging
from vocabboost.models.base import SessionLocal, init_db
from vocabboost.models.srs_models import Snapshot, Word, now_ms
from vocabboost.monitoring import start_monitoring
from vocabboost.services.context_service import find_article, highlight
from vocabboost.services.import_service import import_text, read_import_file
from vocabboost.services.queue_builder import partition_catalog
from vocabboost.services.session_service import ReviewSession
from vocabboost.services.storage_service import StorageService, export_json, import_json

logger = logging.getLogger(__name__)

InputFn = Callable[[str], str]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vocabboost", description="Review vocabulary from imported articles.")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    parser.add_argument("--metrics-port", type=int, default=None, help="Expose Prometheus metrics on this port")
    commands = parser.add_subparsers(dest="command", required=True)

    import_cmd = commands.add_parser("import", help="Import articles and word lists from a text file")
    import_cmd.add_argument("file", type=Path)

    commands.add_parser("review", help="Review the words that are due now")
    commands.add_parser("status", help="Show how many words are due, new, scheduled and graduated")

    context_cmd = commands.add_parser("context", help="Show the article a word came from")
    context_cmd.add_argument("word")

    export_cmd = commands.add_parser("export", help="Write all data to a JSON file")
    export_cmd.add_argument("file", type=Path)

    restore_cmd = commands.add_parser("restore", help="Replace all data with a JSON export")
    restore_cmd.add_argument("file", type=Path)

    reset_cmd = commands.add_parser("reset", help="Delete all data")
    reset_cmd.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    return parser


def _format_time(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d %H:%M")


def _lookup_word(snapshot: Snapshot, text: str) -> Optional[Word]:
    # Later catalog entries win, matching the import overwrite order
    for word in reversed(snapshot.words):
        if word.id.lower() == text.lower():
            return word
    return None


def _print_context(snapshot: Snapshot, word: Word, out: TextIO) -> None:
    article = find_article(snapshot, word)
    if article is None:
        print(f"No article found for {word.id!r}", file=out)
        return
    print(f"--- {article.title} ({article.date}) ---", file=out)
    print(highlight(article.content, word.id), file=out)
    print("---", file=out)


def cmd_import(args, storage: StorageService, snapshot: Snapshot, input_fn: InputFn, out: TextIO) -> int:
    text = read_import_file(args.file)
    updated = import_text(snapshot, text)
    storage.save_snapshot(updated)
    print(f"Imported {len(updated.articles)} articles and {len(updated.words)} words", file=out)
    return 0


def cmd_status(args, storage: StorageService, snapshot: Snapshot, input_fn: InputFn, out: TextIO) -> int:
    partition = partition_catalog(snapshot.words, snapshot.progress, now_ms())
    print(f"Due:        {len(partition.due)}", file=out)
    print(f"New:        {len(partition.new)}", file=out)
    print(f"Scheduled:  {len(partition.scheduled)}", file=out)
    print(f"Graduated:  {len(partition.graduated)}", file=out)
    if partition.scheduled:
        upcoming = min(snapshot.progress[word.id].next_review.timestamp for word in partition.scheduled)
        print(f"Next due:   {_format_time(upcoming)}", file=out)
    return 0


def cmd_context(args, storage: StorageService, snapshot: Snapshot, input_fn: InputFn, out: TextIO) -> int:
    word = _lookup_word(snapshot, args.word)
    if word is None:
        print(f"Unknown word: {args.word}", file=out)
        return 1
    print(f"{word.id}: {word.translation} (level {snapshot.progress_for(word.id).level})", file=out)
    _print_context(snapshot, word, out)
    return 0


def cmd_review(args, storage: StorageService, snapshot: Snapshot, input_fn: InputFn, out: TextIO) -> int:
    session = ReviewSession(
        snapshot,
        on_change=storage.save_snapshot,
        step_delays_ms=settings.learning.step_delays_ms,
        relearn_delay_ms=settings.learning.relearn_delay_ms,
    )
    try:
        while True:
            word = session.current_word()
            if word is None:
                print("Nothing left to review. Come back later.", file=out)
                return 0

            index, total = session.position
            print(f"\n[{index}/{total}] {word.id}", file=out)
            answer = input_fn("Enter: show meaning, c: context, q: quit > ").strip().lower()
            if answer == "q":
                return 0
            if answer == "c":
                _print_context(session.snapshot, word, out)
                continue

            print(f"    {word.translation}", file=out)
            while True:
                answer = input_fn("Known? y/n (c: context, q: quit) > ").strip().lower()
                if answer in ("y", "n"):
                    progress = session.review(answer == "y")
                    logger.debug(f"{word.id!r} is now at level {progress.level}")
                    break
                if answer == "c":
                    _print_context(session.snapshot, word, out)
                elif answer == "q":
                    return 0
    except EOFError:
        print(file=out)
        return 0


def cmd_export(args, storage: StorageService, snapshot: Snapshot, input_fn: InputFn, out: TextIO) -> int:
    args.file.write_text(export_json(snapshot), encoding="utf-8")
    print(f"Exported to {args.file}", file=out)
    return 0


def cmd_restore(args, storage: StorageService, snapshot: Snapshot, input_fn: InputFn, out: TextIO) -> int:
    restored = import_json(args.file.read_text(encoding="utf-8"))
    storage.save_snapshot(restored)
    print(f"Restored {len(restored.words)} words and {len(restored.progress)} progress records", file=out)
    return 0


def cmd_reset(args, storage: StorageService, snapshot: Snapshot, input_fn: InputFn, out: TextIO) -> int:
    if not args.yes:
        answer = input_fn("Delete all articles, words and progress? [y/N] > ").strip().lower()
        if answer != "y":
            print("Cancelled", file=out)
            return 1
    storage.reset()
    print("All data deleted", file=out)
    return 0


COMMANDS = {
    "import": cmd_import,
    "review": cmd_review,
    "status": cmd_status,
    "context": cmd_context,
    "export": cmd_export,
    "restore": cmd_restore,
    "reset": cmd_reset,
}


def main(argv: Optional[Sequence[str]] = None, input_fn: InputFn = input, out: TextIO = sys.stdout) -> int:
    """Run one command and return the process exit code."""
    args = build_parser().parse_args(argv)

    ensure_directories()
    setup_logging(level=args.log_level)

    metrics_port = args.metrics_port
    if metrics_port is None and settings.monitoring.enabled:
        metrics_port = settings.monitoring.port
    if metrics_port is not None:
        start_monitoring(metrics_port)
        logger.info(f"Metrics available on port {metrics_port}")

    init_db()
    db = SessionLocal()
    try:
        storage = StorageService(db)
        snapshot = storage.load_snapshot() or Snapshot()
        return COMMANDS[args.command](args, storage, snapshot, input_fn, out)
    except (ValueError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=out)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
