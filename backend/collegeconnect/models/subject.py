"""
Modèle SQLAlchemy pour les matières.
Lecture seule ici : référencé par les codes et les présences, géré par l'administration.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Text

from collegeconnect.database import Base


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(20), unique=True, nullable=False)  # Ex: "CS301"
    name = Column(String(255), nullable=False)
    department_id = Column(Integer, nullable=False)
    year = Column(String(20), nullable=False)
    description = Column(Text, nullable=True)
    faculty_id = Column(Integer, ForeignKey("users.id"), nullable=True)
