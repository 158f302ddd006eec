#!/usr/bin/env python
"""Command line entry point for Roam Tags."""
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from roam_tags import __version__
from roam_tags.config import TagsConfig, config
from roam_tags.exceptions import ConfigurationError, RoamTagsError
from roam_tags.models.db_models import init_db
from roam_tags.observability import configure_logging
from roam_tags.services.interaction import (
    ConsoleBacklinkView,
    ConsoleNotifier,
    FuzzySelector,
    ListSelector,
    LogNotifier,
)
from roam_tags.services.link_redirector import LinkOpenResult
from roam_tags.services.tag_service import TagService
from roam_tags.storage.document import Document
from roam_tags.storage.note_index import NoteIndex

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="roam-tags", description="Content tags for a markdown note collection"
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--notes-dir",
        help="Directory holding the note files",
        type=str,
        default=os.environ.get("ROAM_TAGS_NOTES_DIR")
    )
    parser.add_argument(
        "--database-path",
        help="SQLite index file (implies an on-disk index)",
        type=str,
        default=None
    )
    parser.add_argument(
        "--log-level",
        help="Logging level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=os.environ.get("ROAM_TAGS_LOG_LEVEL", "WARNING")
    )
    parser.add_argument(
        "--log-dir",
        help="Directory for log files",
        type=str,
        default=os.environ.get("ROAM_TAGS_LOG_DIR")
    )
    parser.add_argument(
        "--fuzzy", action="store_true", help="Pick tags with fuzzy matching"
    )
    parser.add_argument(
        "--yes", action="store_true", help="Create missing tags without asking"
    )

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("list", help="List all tags")
    sub.add_parser("reindex", help="Rebuild the note index")

    p = sub.add_parser("tags", help="Show the tags of a note")
    p.add_argument("file", type=Path)

    p = sub.add_parser("add", help="Add a tag to a note's tag line")
    p.add_argument("file", type=Path)
    p.add_argument("tag", nargs="?")

    p = sub.add_parser("insert", help="Insert a tag link at a character offset")
    p.add_argument("file", type=Path)
    p.add_argument("pos", type=int)
    p.add_argument("tag", nargs="?")

    p = sub.add_parser("set", help="Replace a note's tag line")
    p.add_argument("file", type=Path)
    p.add_argument("tags", nargs="*")

    p = sub.add_parser("clear", help="Empty a note's tag line")
    p.add_argument("file", type=Path)

    p = sub.add_parser("create", help="Create a tag note")
    p.add_argument("tag")

    p = sub.add_parser("open", help="Show the notes tagged with a tag")
    p.add_argument("tag", nargs="?")

    p = sub.add_parser("follow", help="Follow the link at a character offset")
    p.add_argument("file", type=Path)
    p.add_argument("pos", type=int)

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace, base: TagsConfig = config) -> TagsConfig:
    """Apply command line overrides to the environment configuration.

    Raises:
        ConfigurationError: If the combined settings do not validate.
    """
    settings = base.model_dump()
    if args.notes_dir:
        settings["notes_dir"] = Path(args.notes_dir)
    if args.database_path:
        settings["database_path"] = Path(args.database_path)
        settings["in_memory_db"] = False
    try:
        return TagsConfig(**settings)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def build_service(args: argparse.Namespace, cfg: TagsConfig) -> TagService:
    """Create the index (rebuilt from the notes) and the tag service."""
    notes_dir = cfg.get_notes_dir()
    notes_dir.mkdir(parents=True, exist_ok=True)

    index = NoteIndex(cfg, engine=init_db(cfg))
    index.rebuild_index()

    selector = FuzzySelector() if args.fuzzy else ListSelector()
    notifier = LogNotifier(answer=True) if args.yes else ConsoleNotifier()
    return TagService(cfg, index, selector, notifier, ConsoleBacklinkView())


def _save(service: TagService, document: Document) -> None:
    document.save()
    if document.note_id() is not None:
        service.index.index_file(document.path)


def run_command(args: argparse.Namespace, service: TagService) -> int:
    """Run one subcommand; returns the process exit status."""
    command = args.command
    if command == "list":
        for tag in service.repository.list_tags():
            print(tag)
    elif command == "reindex":
        print(f"{service.index.rebuild_index()} notes indexed")
    elif command == "tags":
        for tag in service.document_tags(Document.load(args.file)):
            print(tag)
    elif command == "create":
        print(service.mutator.create_tag(args.tag))
    elif command == "open":
        if service.open_tag(args.tag) is not LinkOpenResult.HANDLED:
            return 1
    elif command == "follow":
        document = Document.load(args.file)
        if service.follow_link(document, args.pos) is not LinkOpenResult.HANDLED:
            return 1
    else:
        document = Document.load(args.file)
        if command == "add":
            result = service.tag_note(document, args.tag)
        elif command == "insert":
            document.goto(args.pos)
            result = service.tag_at_point(document, args.tag)
        elif command == "set":
            result = service.set_file_tags(document, args.tags)
        else:
            service.mutator.clear_file_tags_line(document)
            result = True
        _save(service, document)
        if result is None:
            return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Run the Roam Tags command line."""
    args = parse_args(argv)

    log_level = getattr(logging, args.log_level.upper(), logging.WARNING)
    try:
        configure_logging(log_dir=args.log_dir, level=log_level, console=True)
    except OSError as e:
        # Fall back to console logging if the log directory is unwritable
        logging.basicConfig(level=log_level)
        logger.warning(f"Failed to configure file logging: {e}")

    try:
        cfg = build_config(args)
        service = build_service(args, cfg)
        return run_command(args, service)
    except RoamTagsError as e:
        logger.error(str(e))
        print(e.message, file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
