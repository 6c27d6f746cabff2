"""Translation cache model: persisted (source text, target language) -> translation."""
import hashlib
import logging
import os
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from app import db
from app.services.errors import CacheReadError, CacheWriteError

logger = logging.getLogger(__name__)

TRANSLATIONS_TABLE = os.environ.get('TRANSLATIONS_TABLE', 'translations')

# Dialects that understand INSERT .. ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    'postgresql': pg_insert,
    'sqlite': sqlite_insert,
}

# Rows per ON CONFLICT statement; keeps bind parameters under driver limits
UPSERT_CHUNK_SIZE = 500


def get_text_hash(text: str) -> str:
    """Generate a hash for the text to use as cache key."""
    return hashlib.sha256(text.encode('utf-8')).hexdigest()


def _clean(value):
    return value.strip() if isinstance(value, str) else ''


@dataclass(frozen=True)
class TranslationRecord:
    source_text: str
    target_lang: str
    translated_text: str


class TranslationCache(db.Model):
    """Cache translations to avoid re-translating the same text.

    ``text_hash`` stands in for ``source_text`` in the unique key so that
    long texts can still be indexed.
    """
    __tablename__ = TRANSLATIONS_TABLE

    id = db.Column(db.Integer, primary_key=True)
    text_hash = db.Column(db.String(64), nullable=False, index=True)
    source_text = db.Column(db.Text, nullable=False)
    target_lang = db.Column(db.String(5), nullable=False)
    translated_text = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('text_hash', 'target_lang', name='uq_translation_source_target'),
    )

    def __repr__(self):
        return f'<TranslationCache {self.target_lang}: {self.source_text[:30]!r}>'

    def to_dict(self):
        return {
            'id': self.id,
            'source_text': self.source_text,
            'target_lang': self.target_lang,
            'translated_text': self.translated_text,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def lookup(cls, texts, target_lang: str) -> dict:
        """Return {source_text: translated_text} for the texts already cached.

        Texts are trimmed and deduplicated first; texts without a cached
        translation are simply absent from the result.
        """
        unique_texts = {_clean(text) for text in texts or []}
        unique_texts.discard('')
        if not unique_texts:
            return {}

        hashes = [get_text_hash(text) for text in unique_texts]
        try:
            rows = cls.query.filter(
                cls.target_lang == target_lang,
                cls.text_hash.in_(hashes)
            ).all()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise CacheReadError(f'Translation cache lookup failed: {e}') from e

        return {
            row.source_text: row.translated_text
            for row in rows
            if row.source_text in unique_texts and row.translated_text
        }

    @classmethod
    def upsert(cls, records) -> int:
        """Insert or overwrite translations keyed on (source_text, target_lang).

        Records with a blank field are dropped. If the conflict-resolving
        insert is unavailable or fails, the same payload is retried as a
        plain insert; the unique constraint makes that fail rather than
        duplicate an existing key. Large batches are split into several
        statements inside one transaction. Returns the number of rows written.
        """
        payload = {}
        now = datetime.utcnow()
        for record in records or []:
            source_text = _clean(getattr(record, 'source_text', None))
            target_lang = _clean(getattr(record, 'target_lang', None))
            translated_text = _clean(getattr(record, 'translated_text', None))
            if not (source_text and target_lang and translated_text):
                continue
            text_hash = get_text_hash(source_text)
            # Last record for a key wins; ON CONFLICT cannot touch a row twice
            payload[(text_hash, target_lang)] = {
                'text_hash': text_hash,
                'source_text': source_text,
                'target_lang': target_lang,
                'translated_text': translated_text,
                'created_at': now,
                'updated_at': now,
            }

        if not payload:
            return 0
        rows = list(payload.values())

        try:
            for start in range(0, len(rows), UPSERT_CHUNK_SIZE):
                db.session.execute(cls._upsert_statement(rows[start:start + UPSERT_CHUNK_SIZE]))
            db.session.commit()
            return len(rows)
        except (NotImplementedError, SQLAlchemyError) as e:
            db.session.rollback()
            logger.warning(f"Translation upsert failed, falling back to insert: {e}")

        try:
            db.session.execute(cls.__table__.insert(), rows)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise CacheWriteError(f'Translation cache insert failed: {e}') from e
        return len(rows)

    @classmethod
    def _upsert_statement(cls, rows):
        dialect = db.session.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise NotImplementedError(f'ON CONFLICT upsert not supported for {dialect}')

        stmt = insert(cls.__table__).values(rows)
        return stmt.on_conflict_do_update(
            index_elements=['text_hash', 'target_lang'],
            set_={
                'source_text': stmt.excluded.source_text,
                'translated_text': stmt.excluded.translated_text,
                'updated_at': stmt.excluded.updated_at,
            }
        )
