"""
Configuration de la connexion à la base de données.
PostgreSQL en déploiement, SQLite accepté pour le développement local et les tests.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker

from collegeconnect.config import settings

# SQLite refuse par défaut le partage d'une connexion entre threads (threadpool FastAPI)
_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=_connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dépendance FastAPI — fournit une session BDD et la ferme après usage."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Crée les tables manquantes (développement local uniquement, pas de migration)."""
    import collegeconnect.models  # noqa: F401 — enregistre les modèles dans Base.metadata

    Base.metadata.create_all(bind=engine)
