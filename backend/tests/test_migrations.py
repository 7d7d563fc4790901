"""
Migration tests: `flask db upgrade` builds the same schema the models declare.
"""

from pathlib import Path

import flask_migrate
from alembic.autogenerate import compare_metadata
from alembic.migration import MigrationContext
from sqlalchemy import inspect

from warehouse import create_app
from warehouse.extensions import db

MIGRATIONS_DIR = str(Path(__file__).resolve().parent.parent / "migrations")


def test_upgrade_and_downgrade(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'migrated.sqlite3'}",
    })
    with app.app_context():
        flask_migrate.upgrade(directory=MIGRATIONS_DIR)

        tables = set(inspect(db.engine).get_table_names())
        assert set(db.metadata.tables) <= tables
        assert "alembic_version" in tables

        with db.engine.connect() as conn:
            diffs = compare_metadata(MigrationContext.configure(conn), db.metadata)
        assert diffs == []

        flask_migrate.downgrade(directory=MIGRATIONS_DIR, revision="base")

        assert set(inspect(db.engine).get_table_names()) <= {"alembic_version"}

        db.session.remove()
        db.engine.dispose()
