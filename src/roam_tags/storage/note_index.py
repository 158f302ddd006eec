"""SQLite index of notes and the identifier links between them.

The markdown files are the source of truth; the index is derived from them
and can be rebuilt at any time. Only identifier links are stored.
"""
import logging
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from sqlalchemy import select, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from roam_tags.config import TagsConfig
from roam_tags.exceptions import StorageError
from roam_tags.models.db_models import DBLink, DBNote, get_session_factory, init_db
from roam_tags.models.schema import Backlink, Link, LinkType, ParsedNote
from roam_tags.storage.markdown_parser import MarkdownParser

logger = logging.getLogger(__name__)


class NoteIndex:
    """Query and maintenance interface over the notes/links tables."""

    def __init__(self, config: TagsConfig, engine: Optional[Engine] = None):
        """Initialize the index.

        Args:
            config: Settings naming the notes directory and database.
            engine: Pre-configured SQLAlchemy engine. When None one is created
                    (and the schema initialised) from ``config``.
        """
        self.config = config
        self.engine = engine if engine is not None else init_db(config)
        self.session_factory = get_session_factory(self.engine)
        self._parser = MarkdownParser()

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def _note_files(self) -> List[Path]:
        roots = [self.config.get_notes_dir()]
        tags_dir = self.config.get_tags_dir()
        if tags_dir not in roots:
            roots.append(tags_dir)
        files: Dict[Path, None] = {}
        for root in roots:
            if root.is_dir():
                for path in sorted(root.rglob("*.md")):
                    files[path] = None
        return list(files)

    def rebuild_index(self) -> int:
        """Rebuild the index from the markdown files using an incremental sync.

        Rows whose note no longer exists on disk are removed, every file is
        upserted, and everything is committed in one transaction. Files that
        fail to parse are logged and skipped.

        Returns:
            Number of notes indexed.
        """
        parsed: Dict[str, tuple] = {}
        failed_files: List[str] = []
        for file_path in self._note_files():
            try:
                note = self._read_file(file_path)
            except (IOError, OSError) as e:
                logger.error(f"Cannot read file {file_path.name}: {e}")
                failed_files.append(file_path.name)
                continue
            except (ValueError, yaml.YAMLError) as e:
                logger.error(f"Invalid note format in {file_path.name}: {e}")
                failed_files.append(file_path.name)
                continue
            if note.id in parsed:
                logger.warning(
                    f"Duplicate note id {note.id} in {file_path.name}, keeping "
                    f"{parsed[note.id][1].name}"
                )
                continue
            parsed[note.id] = (note, file_path)

        with self.session_factory() as session:
            db_ids = {row[0] for row in session.execute(text("SELECT id FROM notes"))}
            orphaned = db_ids - set(parsed)
            for orphan_id in orphaned:
                session.execute(
                    text("DELETE FROM links WHERE source_id = :id"), {"id": orphan_id}
                )
                session.execute(
                    text("DELETE FROM notes WHERE id = :id"), {"id": orphan_id}
                )

            for note, file_path in parsed.values():
                self._sync_note_to_db(session, note, file_path)
            session.commit()

        if failed_files:
            logger.warning(
                f"Failed to process {len(failed_files)} files: "
                f"{failed_files[:5]}{'...' if len(failed_files) > 5 else ''}"
            )
        logger.info(
            f"Index rebuilt: {len(parsed)} notes, {len(orphaned)} orphans removed"
        )
        return len(parsed)

    def index_file(self, file_path: Path) -> str:
        """Parse one note file and upsert it into the index.

        Returns:
            The id of the indexed note.

        Raises:
            StorageError: If the file cannot be read or parsed.
        """
        try:
            note = self._read_file(file_path)
        except (IOError, OSError) as e:
            raise StorageError(
                f"Failed to read note file {file_path.name}",
                operation="index",
                path=str(file_path),
                original_error=e,
            ) from e
        except (ValueError, yaml.YAMLError) as e:
            raise StorageError(
                f"Invalid note format in {file_path.name}",
                operation="index",
                path=str(file_path),
                original_error=e,
            ) from e

        with self.session_factory() as session:
            self._sync_note_to_db(session, note, file_path)
            session.commit()
        logger.debug(f"Indexed {file_path.name} as {note.id}")
        return note.id

    def register_id(self, note_id: str, file_path: Path) -> None:
        """Record where a freshly minted id lives before its file is indexed.

        The provisional title is the file stem; ``index_file`` replaces it.
        """
        with self.session_factory() as session:
            db_note = session.get(DBNote, note_id)
            if db_note is None:
                session.add(
                    DBNote(id=note_id, title=file_path.stem, file=str(file_path))
                )
            else:
                db_note.file = str(file_path)
            session.commit()

    def _read_file(self, file_path: Path) -> ParsedNote:
        with open(file_path, "r", encoding="utf-8") as f:
            content = f.read()
        return self._parser.parse_note(content)

    def _sync_note_to_db(
        self, session: Session, note: ParsedNote, file_path: Path
    ) -> None:
        """Write a parsed note and its identifier links (caller commits).

        Link rows of the note are cleared and rebuilt in document order.
        """
        db_note = session.get(DBNote, note.id)
        if db_note:
            db_note.title = note.title
            db_note.file = str(file_path)
        else:
            session.add(DBNote(id=note.id, title=note.title, file=str(file_path)))
        session.flush()

        session.execute(
            text("DELETE FROM links WHERE source_id = :nid"), {"nid": note.id}
        )
        position = 0
        for element in note.links:
            if not element.is_id_link:
                continue
            session.add(
                DBLink(
                    source_id=note.id,
                    target_id=element.target,
                    link_type=LinkType.ID.value,
                    position=position,
                )
            )
            position += 1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def titles_matching(self, *criteria) -> List[str]:
        """Titles of every note satisfying the given SQL criteria, in row order."""
        with self.session_factory() as session:
            return list(session.scalars(select(DBNote.title).where(*criteria)).all())

    def ids_for_title(self, title: str) -> List[str]:
        """Ids of the notes titled exactly ``title``."""
        with self.session_factory() as session:
            return list(
                session.scalars(select(DBNote.id).where(DBNote.title == title)).all()
            )

    def title_for_id(self, note_id: str) -> Optional[str]:
        with self.session_factory() as session:
            return session.scalar(select(DBNote.title).where(DBNote.id == note_id))

    def file_for_id(self, note_id: str) -> Optional[Path]:
        with self.session_factory() as session:
            file = session.scalar(select(DBNote.file).where(DBNote.id == note_id))
        return Path(file) if file else None

    def outgoing_links(self, note_id: str) -> List[Link]:
        """Identifier links leaving ``note_id``, in document order."""
        with self.session_factory() as session:
            db_links = session.scalars(
                select(DBLink)
                .where(DBLink.source_id == note_id)
                .order_by(DBLink.position, DBLink.id)
            ).all()
            return [
                Link(
                    source_id=link.source_id,
                    target_id=link.target_id,
                    position=link.position,
                )
                for link in db_links
            ]

    def backlinks(self, note_id: str) -> List[Backlink]:
        """Notes linking to ``note_id``, one entry per source note."""
        with self.session_factory() as session:
            rows = session.execute(
                select(DBNote.id, DBNote.title, DBNote.file)
                .join(DBLink, DBLink.source_id == DBNote.id)
                .where(DBLink.target_id == note_id)
                .distinct()
                .order_by(DBNote.title, DBNote.id)
            ).all()
        return [
            Backlink(source_id=row[0], title=row[1], file=Path(row[2]))
            for row in rows
        ]

    def count_notes(self) -> int:
        with self.session_factory() as session:
            return session.scalar(select(text("COUNT(*)")).select_from(DBNote)) or 0

