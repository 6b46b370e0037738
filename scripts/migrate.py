"""Script to run database migrations."""

import argparse
import sys

from alembic import command
from alembic.config import Config


def get_config() -> Config:
    """Load the Alembic configuration from the project root."""
    return Config("alembic.ini")


def run_migrations(revision: str = "head") -> None:
    """Upgrade the schema to ``revision``."""
    try:
        print(f"Upgrading database to {revision}...")
        command.upgrade(get_config(), revision)
        print("✓ Migrations completed successfully!")
    except Exception as e:
        print(f"✗ Migration failed: {e}", file=sys.stderr)
        sys.exit(1)


def rollback(revision: str) -> None:
    """Downgrade the schema to ``revision``."""
    try:
        print(f"Downgrading database to {revision}...")
        command.downgrade(get_config(), revision)
        print("✓ Downgrade completed successfully!")
    except Exception as e:
        print(f"✗ Downgrade failed: {e}", file=sys.stderr)
        sys.exit(1)


def create_migration(message: str) -> None:
    """Create a new migration from the table metadata."""
    try:
        print(f"Creating migration: {message}")
        command.revision(get_config(), message=message, autogenerate=True)
        print("✓ Migration created successfully!")
    except Exception as e:
        print(f"✗ Migration creation failed: {e}", file=sys.stderr)
        sys.exit(1)


def main() -> None:
    """Parse arguments and dispatch."""
    parser = argparse.ArgumentParser(description="Manage ClinicOps database migrations")
    subparsers = parser.add_subparsers(dest="action")

    upgrade_parser = subparsers.add_parser("upgrade", help="Upgrade the schema (default)")
    upgrade_parser.add_argument("revision", nargs="?", default="head")

    downgrade_parser = subparsers.add_parser("downgrade", help="Downgrade the schema")
    downgrade_parser.add_argument("revision", help="Target revision, e.g. -1 or 001")

    create_parser = subparsers.add_parser("create", help="Autogenerate a new revision")
    create_parser.add_argument("message", nargs="+")

    args = parser.parse_args()

    if args.action == "downgrade":
        rollback(args.revision)
    elif args.action == "create":
        create_migration(" ".join(args.message))
    else:
        run_migrations(getattr(args, "revision", "head"))


if __name__ == "__main__":
    main()
