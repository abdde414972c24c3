"""Tests for the admin CLI (users, db, storage)."""

import sqlite3
import uuid

import pytest
from rich.console import Console
from typer.testing import CliRunner

from detail_crm import cli
from detail_crm.cli import app
from detail_crm.config import settings


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Keep rich tables on one line so rows can be matched in the output."""
    monkeypatch.setattr(cli, "console", Console(width=200))


@pytest.fixture
def db_file(tmp_path):
    return tmp_path / "crm.db"


@pytest.fixture
def db_url(db_file):
    return f"sqlite+aiosqlite:///{db_file}"


@pytest.fixture
def initialized(cli_runner, db_url):
    result = cli_runner.invoke(app, ["db", "init", "--database-url", db_url])
    assert result.exit_code == 0, result.output
    return db_url


class TestDbInit:
    def test_creates_tables(self, cli_runner, db_url, db_file):
        result = cli_runner.invoke(app, ["db", "init", "--database-url", db_url])

        assert result.exit_code == 0, result.output
        assert "Database upgraded to head" in result.output
        with sqlite3.connect(db_file) as conn:
            tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
            version = conn.execute("SELECT version_num FROM alembic_version").fetchone()[0]
        assert {"users", "customers", "jobs", "events", "storage_buckets"} <= tables
        assert version == "002_customer_name_columns"


class TestUsersCommands:
    def test_create_and_list(self, cli_runner, initialized):
        result = cli_runner.invoke(
            app,
            [
                "users", "create", "Owner@Example.com",
                "--password", "polish-and-shine",
                "--first-name", "Sam",
                "--database-url", initialized,
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Created user owner@example.com" in result.output

        listing = cli_runner.invoke(app, ["users", "list", "--database-url", initialized])
        assert listing.exit_code == 0
        assert "Users (1)" in listing.output
        assert "owner@example.com" in listing.output
        assert "Sam" in listing.output

    def test_create_marks_email_confirmed(self, cli_runner, initialized, db_file):
        cli_runner.invoke(
            app,
            ["users", "create", "a@b.co", "--password", "x" * 12, "--database-url", initialized],
        )
        with sqlite3.connect(db_file) as conn:
            confirmed, password_hash = conn.execute(
                "SELECT email_confirmed_at, password_hash FROM users"
            ).fetchone()
        assert confirmed is not None
        assert password_hash.startswith("pbkdf2_sha256$")

    def test_duplicate_user_fails(self, cli_runner, initialized):
        args = ["users", "create", "dup@example.com", "--password", "pw-123456", "--database-url", initialized]
        assert cli_runner.invoke(app, args).exit_code == 0

        result = cli_runner.invoke(app, args)
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_invalid_email_fails(self, cli_runner, initialized):
        result = cli_runner.invoke(
            app, ["users", "create", "not-an-email", "--password", "pw", "--database-url", initialized]
        )
        assert result.exit_code == 1
        assert "valid email" in result.output


class TestNameColumns:
    def test_adds_missing_columns_once(self, cli_runner, db_file, db_url):
        with sqlite3.connect(db_file) as conn:
            conn.execute("CREATE TABLE customers (id CHAR(32) PRIMARY KEY, name VARCHAR(200))")

        first = cli_runner.invoke(app, ["db", "add-name-columns", "--database-url", db_url])
        assert first.exit_code == 0, first.output
        assert "Added columns: first_name, last_name" in first.output

        with sqlite3.connect(db_file) as conn:
            columns = {row[1] for row in conn.execute("PRAGMA table_info(customers)")}
        assert {"first_name", "last_name"} <= columns

        second = cli_runner.invoke(app, ["db", "add-name-columns", "--database-url", db_url])
        assert second.exit_code == 0
        assert "nothing to do" in second.output

    def test_migrate_customer_names(self, cli_runner, initialized, db_file):
        rows = [
            (uuid.uuid4().hex, "Jane Doe", None, None),
            (uuid.uuid4().hex, "Cher", None, None),
            (uuid.uuid4().hex, "  ", None, None),
            (uuid.uuid4().hex, "Already Split", "Already", "Split"),
        ]
        with sqlite3.connect(db_file) as conn:
            conn.executemany(
                "INSERT INTO customers (id, name, first_name, last_name) VALUES (?, ?, ?, ?)", rows
            )

        result = cli_runner.invoke(
            app, ["db", "migrate-customer-names", "--database-url", initialized]
        )
        assert result.exit_code == 0, result.output
        assert "Updated 2" in result.output
        assert "skipped 2 of 4 customers" in result.output

        with sqlite3.connect(db_file) as conn:
            names = dict(
                (name, (first, last))
                for name, first, last in conn.execute(
                    "SELECT name, first_name, last_name FROM customers"
                )
            )
        assert names["Jane Doe"] == ("Jane", "Doe")
        assert names["Cher"] == ("Cher", "Cher")
        assert names["  "] == (None, None)


class TestStorageCommands:
    def test_ensure_bucket_is_idempotent(self, cli_runner, initialized, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "storage_dir", str(tmp_path / "storage"))

        first = cli_runner.invoke(app, ["storage", "ensure-bucket", "--database-url", initialized])
        assert first.exit_code == 0, first.output
        assert "Created bucket customer-files" in first.output
        assert (tmp_path / "storage" / "customer-files").is_dir()

        second = cli_runner.invoke(app, ["storage", "ensure-bucket", "--database-url", initialized])
        assert second.exit_code == 0
        assert "Bucket customer-files already exists" in second.output

        listing = cli_runner.invoke(app, ["storage", "list", "--database-url", initialized])
        assert "Buckets (1)" in listing.output
        assert "52,428,800 bytes" in listing.output

    def test_ensure_public_bucket_with_limit(self, cli_runner, initialized, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "storage_dir", str(tmp_path / "storage"))

        result = cli_runner.invoke(
            app,
            [
                "storage", "ensure-bucket", "job-photos", "--public",
                "--file-size-limit", "1048576", "--database-url", initialized,
            ],
        )
        assert result.exit_code == 0
        listing = cli_runner.invoke(app, ["storage", "list", "--database-url", initialized])
        assert "job-photos" in listing.output
        assert "1,048,576 bytes" in listing.output

    def test_invalid_bucket_name(self, cli_runner, initialized, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "storage_dir", str(tmp_path / "storage"))

        result = cli_runner.invoke(
            app, ["storage", "ensure-bucket", "../escape", "--database-url", initialized]
        )
        assert result.exit_code == 1
        assert "Invalid bucket name" in result.output
