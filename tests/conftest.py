"""
Pytest configuration and fixtures for testing the community events API.
"""

import os
import sys
import pytest
from faker import Faker

# Add the parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app import create_app, db
from app.models import Announcement, TranslationCache
from app.services.errors import TranslationServiceError
from app.services.translation import TranslationService

fake = Faker()


class FakeTranslator:
    """Stands in for OpenAITranslator; records every batch it is given."""

    def __init__(self, translations=None, error=None, enabled=True):
        self.translations = translations or {}
        self.error = error
        self.enabled = enabled
        self.calls = []

    def translate_batch(self, texts, target_lang):
        self.calls.append((list(texts), target_lang))
        if self.error:
            raise self.error
        return [self.translations.get(text, f'[{target_lang}] {text}') for text in texts]


class FakeStore:
    """In-memory translation cache with the same interface as TranslationCache."""

    def __init__(self, entries=None, lookup_error=None, upsert_error=None):
        self.entries = dict(entries or {})  # (source_text, target_lang) -> translated_text
        self.lookup_error = lookup_error
        self.upsert_error = upsert_error
        self.lookups = []
        self.upserts = []

    def lookup(self, texts, target_lang):
        self.lookups.append((list(texts), target_lang))
        if self.lookup_error:
            raise self.lookup_error
        return {
            text: self.entries[(text, target_lang)]
            for text in texts
            if (text, target_lang) in self.entries
        }

    def upsert(self, records):
        self.upserts.append(list(records))
        if self.upsert_error:
            raise self.upsert_error
        for record in records:
            self.entries[(record.source_text, record.target_lang)] = record.translated_text


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    os.environ['FLASK_ENV'] = 'testing'

    app = create_app('testing')

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client for each test function."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create a fresh database session for each test."""
    with app.app_context():
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        yield db.session
        db.session.rollback()


@pytest.fixture
def fake_translator():
    return FakeTranslator()


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def service(fake_translator, fake_store):
    """Translation service wired to in-memory doubles."""
    return TranslationService(fake_translator, store=fake_store)


@pytest.fixture
def live_service(app, monkeypatch, fake_translator):
    """Swap the app's translation service for one backed by the real cache table."""
    service = TranslationService(fake_translator, store=TranslationCache)
    monkeypatch.setitem(app.extensions, 'translation', service)
    return service


@pytest.fixture
def failing_translator():
    return FakeTranslator(error=TranslationServiceError('upstream unavailable', status_code=503))


@pytest.fixture
def test_announcement(app, db_session):
    """Create an English announcement."""
    with app.app_context():
        announcement = Announcement(
            title=fake.sentence(nb_words=4),
            message=fake.paragraph(),
            location='Tampines Mall',
        )
        db.session.add(announcement)
        db.session.commit()
        return announcement.to_dict()
