"""Shared fixtures for crud unit tests"""

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

from postpub.core.models import Document
from postpub.core.parse import make_raw_file, parse_raw_file


POST = "title = Hello\ndate = 2020-01-01\n---\nWorld\n"


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="doc")
def doc_fixture() -> Document:
    """A parsed single-document file at posts/hello.md."""
    return parse_raw_file(make_raw_file("posts/hello.md", POST))[0]
