"""
Configuration partagée pour tous les tests.

- client : get_db remplacé par un MagicMock (services patchés dans les tests API)
- db / sqlite_client : base SQLite en mémoire, pour les propriétés qui dépendent
  des vraies contraintes (unicité, expiration, agrégats)
"""

import os

# Avant tout import de l'application : pas de connexion PostgreSQL, pas de create_all au démarrage
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from unittest.mock import MagicMock  # noqa: E402

from collegeconnect.database import Base, get_db  # noqa: E402
from collegeconnect.main import app  # noqa: E402
from collegeconnect.models.subject import Subject  # noqa: E402
from collegeconnect.models.user import User  # noqa: E402


@pytest.fixture
def client():
    """Client HTTP de test avec la BDD mockée."""
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    """Session SQLite en mémoire, schéma complet, une base neuve par test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def sqlite_client(db):
    """Client HTTP de test branché sur la base SQLite du test."""
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ----------------------------------------------------------------
# Fabriques de données (base SQLite)
# ----------------------------------------------------------------

@pytest.fixture
def make_user(db):
    """Insère un compte directement (mot de passe non vérifiable)."""
    def _make(role="student", email=None, college_id=None, **kwargs) -> User:
        return _add_user(db, role, email, college_id, **kwargs)
    return _make


@pytest.fixture
def make_subject(db):
    def _make(name="Operating Systems", code=None, subject_id=None) -> Subject:
        return _add_subject(db, name, code, subject_id)
    return _make


def _add_user(db, role, email, college_id, **kwargs) -> User:
    n = db.query(User).count() + 1
    user = User(
        email=email or f"{role}{n}@college.edu",
        password_hash="!",
        first_name=kwargs.pop("first_name", "Asha"),
        last_name=kwargs.pop("last_name", f"Rao{n}"),
        college_id=college_id or f"{role[:3].upper()}{n:04d}",
        role=role,
        department=kwargs.pop("department", "Computer Science"),
        **kwargs,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _add_subject(db, name, code, subject_id) -> Subject:
    n = db.query(Subject).count() + 1
    subject = Subject(
        id=subject_id,
        code=code or f"CS{300 + n}",
        name=name,
        department_id=1,
        year="3",
    )
    db.add(subject)
    db.commit()
    db.refresh(subject)
    return subject
