"""
Tests for database functionality.

Tests Alembic migrations, model definitions, and database connectivity.
"""

from sqlalchemy import Numeric, create_engine, inspect

from member_api.db import Base, get_engine, verify_database_connection
from member_api.db.models import Member


class TestMigrations:
    def test_tables_created(self, db_url):
        inspector = inspect(get_engine())
        tables = set(inspector.get_table_names())

        assert {"members", "sessions", "products", "alembic_version"} <= tables

    def test_members_have_lock_columns(self, db_url):
        columns = {c["name"] for c in inspect(get_engine()).get_columns("members")}

        assert {"failed_login_attempts", "is_locked", "locked_until"} <= columns

    def test_migrations_match_models(self, db_url):
        inspector = inspect(get_engine())

        for table in Base.metadata.sorted_tables:
            migrated = {c["name"] for c in inspector.get_columns(table.name)}
            assert migrated == set(table.columns.keys()), table.name

    def test_product_price_is_fixed_point(self, db_url):
        columns = {c["name"]: c for c in inspect(get_engine()).get_columns("products")}
        price_type = columns["product_price"]["type"]

        assert isinstance(price_type, Numeric)
        assert (price_type.precision, price_type.scale) == (12, 2)

    def test_unique_email_constraint(self, db_url):
        constraints = inspect(get_engine()).get_unique_constraints("members")

        assert any(c["column_names"] == ["email"] for c in constraints)

    def test_downgrade_drops_tables(self, db_url):
        from alembic import command
        from alembic.config import Config

        from conftest import PACKAGE_DIR

        cfg = Config(str(PACKAGE_DIR / "alembic.ini"))
        cfg.set_main_option("script_location", str(PACKAGE_DIR / "migrations"))
        cfg.set_main_option("sqlalchemy.url", db_url)
        command.downgrade(cfg, "base")

        engine = create_engine(db_url)
        try:
            assert set(inspect(engine).get_table_names()) <= {"alembic_version"}
        finally:
            engine.dispose()


class TestModels:
    def test_member_defaults(self, db_session):
        member = Member(name="A", email="a@example.com", password_hash="x")
        db_session.add(member)
        db_session.commit()

        assert member.role == "member"
        assert member.failed_login_attempts == 0
        assert member.is_locked is False
        assert member.locked_until is None
        assert member.is_deleted is False
        assert member.created_at is not None
        assert member.is_admin is False


def test_database_connection(db_url):
    assert verify_database_connection() is True
