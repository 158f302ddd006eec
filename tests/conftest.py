"""Common test fixtures for Roam Tags."""

import logging

import pytest

from roam_tags import observability
from roam_tags.services.tag_classifier import TagClassifier
from roam_tags.services.tag_mutator import TagMutator
from roam_tags.services.tag_service import TagService
from roam_tags.storage.note_index import NoteIndex
from roam_tags.storage.tag_repository import TagRepository
from tests.builders import make_config, write_note_file
from tests.fakes import FakeNotifier, FakeSelector, RecordingView


@pytest.fixture
def test_config(tmp_path):
    """Config rooted in a temporary directory with an in-memory index."""
    cfg = make_config(tmp_path)
    cfg.get_notes_dir().mkdir(parents=True)
    yield cfg


@pytest.fixture
def note_index(test_config):
    """An empty note index."""
    index = NoteIndex(test_config)
    yield index
    index.engine.dispose()


@pytest.fixture
def add_note(test_config, note_index):
    """Write a note into the notes directory and index it; returns its id."""

    def _add(title, body="", note_id=None, links=(), filename=None):
        note_id, path = write_note_file(
            test_config.get_notes_dir(), title, body, note_id, links, filename
        )
        note_index.index_file(path)
        return note_id

    return _add


@pytest.fixture
def classifier(test_config):
    return TagClassifier(test_config)


@pytest.fixture
def tag_repository(note_index, classifier):
    return TagRepository(note_index, classifier)


@pytest.fixture
def notifier():
    return FakeNotifier(answer=True)


@pytest.fixture
def tag_mutator(test_config, tag_repository, note_index, notifier):
    return TagMutator(test_config, tag_repository, note_index, notifier)


@pytest.fixture
def view():
    return RecordingView()


@pytest.fixture
def selector():
    return FakeSelector()


@pytest.fixture
def tag_service(test_config, note_index, selector, notifier, view):
    return TagService(test_config, note_index, selector, notifier, view)


@pytest.fixture
def clean_roam_logger():
    """Detach the handlers configure_logging adds to the package logger."""
    package_logger = logging.getLogger("roam_tags")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield package_logger
    for handler in package_logger.handlers:
        if handler not in handlers:
            handler.close()
    package_logger.handlers = handlers
    package_logger.setLevel(level)
    observability._installed_handlers.clear()
