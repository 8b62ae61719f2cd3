from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest

os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+pysqlite:///{Path(tempfile.gettempdir()) / 'mascot_greetings_test.db'}",
)

from packages.db.database import Base, SessionLocal, init_db  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def create_schema() -> None:
    init_db(drop=True)


@pytest.fixture(autouse=True)
def clean_db() -> None:
    with SessionLocal() as session:
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
