"""
Modèles SQLAlchemy pour les utilisateurs et leurs sessions serveur.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func

from collegeconnect.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)  # Jamais renvoyé au client
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    college_id = Column(String(50), unique=True, nullable=False)
    role = Column(String(20), nullable=False)  # student, faculty
    department = Column(String(100), nullable=False)
    year = Column(String(20), nullable=True)       # Étudiants
    position = Column(String(100), nullable=True)  # Enseignants
    profile_picture = Column(String(500), nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class UserSession(Base):
    """Session de connexion (cookie) ; expires_at glisse à chaque requête authentifiée."""
    __tablename__ = "user_sessions"

    sid = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False)
    last_seen_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
