#!/usr/bin/env python3
"""Add the (text_hash, target_lang) unique index to an existing translations table.

Tables created by ``db.create_all()`` already have it. Older tables may not,
and without it the insert fallback in ``TranslationCache.upsert`` could store
a second row for the same text. Duplicate keys are reported and the
migration stops; they have to be resolved by hand before the index can be
created.
"""

from sqlalchemy import inspect, text

from app import create_app, db
from app.models import TranslationCache

INDEX_NAME = 'uq_translation_source_target'


def find_duplicates(table):
    return db.session.execute(text(
        f"""
        SELECT text_hash, target_lang, COUNT(*) AS copies
        FROM {table}
        GROUP BY text_hash, target_lang
        HAVING COUNT(*) > 1
        """
    )).fetchall()


def run_migration():
    """Create the unique index on the translation cache if it is missing."""
    app = create_app()
    table = TranslationCache.__tablename__

    with app.app_context():
        try:
            inspector = inspect(db.engine)
            if not inspector.has_table(table):
                print(f"Table '{table}' does not exist yet - run init_db.py instead.")
                return

            unique_sets = [set(c['column_names']) for c in inspector.get_unique_constraints(table)]
            unique_sets += [
                set(i['column_names']) for i in inspector.get_indexes(table) if i.get('unique')
            ]
            if {'text_hash', 'target_lang'} in unique_sets:
                print("✅ Migration already applied! Unique index already exists.")
                return

            duplicates = find_duplicates(table)
            if duplicates:
                print(f"❌ {len(duplicates)} duplicated (text_hash, target_lang) keys in '{table}':")
                for text_hash, target_lang, copies in duplicates[:20]:
                    print(f"   {text_hash[:12]}... {target_lang}: {copies} rows")
                print("\nRemove the extra rows, then run this migration again.")
                return

            print(f"\U0001f4dd Running migration: adding unique index to '{table}'...")
            db.session.execute(text(
                f"CREATE UNIQUE INDEX {INDEX_NAME} ON {table} (text_hash, target_lang)"
            ))
            db.session.commit()
            print("\n\U0001f389 Migration completed successfully!")

        except Exception as e:
            db.session.rollback()
            print(f"\n❌ Migration failed: {e}")
            raise


if __name__ == '__main__':
    run_migration()
