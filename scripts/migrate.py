"""Run or create Alembic migrations.

Usage:
    python scripts/migrate.py                  # upgrade to head
    python scripts/migrate.py down <revision>  # downgrade
    python scripts/migrate.py create <message> # autogenerate a revision
"""

import sys

from alembic import command
from alembic.config import Config

USAGE = "Usage: python scripts/migrate.py [down <revision> | create <message>]"


def main(argv: list[str]) -> None:
    """Dispatch the migration command."""
    alembic_cfg = Config("alembic.ini")

    try:
        if not argv:
            print("Running database migrations...")
            command.upgrade(alembic_cfg, "head")
        elif argv[0] == "down" and len(argv) == 2:
            print(f"Downgrading to {argv[1]}...")
            command.downgrade(alembic_cfg, argv[1])
        elif argv[0] == "create" and len(argv) > 1:
            message = " ".join(argv[1:])
            print(f"Creating migration: {message}")
            command.revision(alembic_cfg, message=message, autogenerate=True)
        else:
            print(USAGE)
            sys.exit(2)
    except Exception as e:
        print(f"✗ Migration failed: {e}", file=sys.stderr)
        sys.exit(1)

    print("✓ Done")


if __name__ == "__main__":
    main(sys.argv[1:])
