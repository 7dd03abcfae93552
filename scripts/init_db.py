"""Create the directory tables directly, for local SQLite databases.

Production PostgreSQL databases are migrated with the alembic revisions under
migrations/versions instead.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

import townlink.models  # noqa: F401
from townlink.db import Base, get_engine


def main() -> None:
    parser = argparse.ArgumentParser(description="Create businesses and reviews tables")
    parser.add_argument("--drop", action="store_true", help="Drop existing tables first (destroys data)")
    args = parser.parse_args()

    engine = get_engine()
    if args.drop:
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    print(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    main()
