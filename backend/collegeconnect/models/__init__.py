# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# Sans cet import, les FK comme attendance_records.subject_id → subjects.id échouent
# avec NoReferencedTableError si subject.py n'est pas chargé avant attendance.py.

from collegeconnect.models.user import User, UserSession  # noqa: F401  — doit précéder attendance
from collegeconnect.models.subject import Subject  # noqa: F401
from collegeconnect.models.attendance import AttendanceCode, AttendanceRecord  # noqa: F401
