"""SQLAlchemy database models for the note index."""
from sqlalchemy import Column, ForeignKey, Integer, String, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from roam_tags.config import TagsConfig
from roam_tags.models.schema import LinkType

Base = declarative_base()


class DBNote(Base):
    """Database model for a note."""
    __tablename__ = "notes"
    id = Column(String(255), primary_key=True, index=True)
    # Not unique: duplicate titles are tolerated
    title = Column(String(512), nullable=False, index=True)
    file = Column(String(4096), nullable=False)

    def __repr__(self) -> str:
        """Return string representation of note."""
        return f"<Note(id='{self.id}', title='{self.title}')>"


class DBLink(Base):
    """Database model for a link between notes.

    The target is not a foreign key: a document may reference an id whose
    file has not been indexed (yet).
    """
    __tablename__ = "links"
    id = Column(Integer, primary_key=True, autoincrement=True)
    source_id = Column(String(255), ForeignKey("notes.id"), nullable=False, index=True)
    target_id = Column(String(255), nullable=False, index=True)
    link_type = Column(String(50), default=LinkType.ID.value, nullable=False)
    position = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        """Return string representation of link."""
        return (
            f"<Link(id={self.id}, source='{self.source_id}', "
            f"target='{self.target_id}', position={self.position})>"
        )


def init_db(config: TagsConfig) -> Engine:
    """Create the index engine and schema.

    In-memory databases share a single connection so every session sees the
    same data. File databases run in WAL mode.
    """
    url = config.get_db_url()
    if config.in_memory_db:
        engine = create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(url, pool_pre_ping=True)

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()

    Base.metadata.create_all(engine)
    return engine


def get_session_factory(engine: Engine):
    """Get a session factory for the database."""
    return sessionmaker(bind=engine)
