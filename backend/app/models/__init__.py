# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# L'ordre suit les dépendances : schools → users → teachers → classes → le reste.

from app.models.school import School  # noqa: F401
from app.models.user import User  # noqa: F401
from app.models.teacher import Teacher  # noqa: F401
from app.models.student import Student  # noqa: F401
from app.models.parent import Parent, StudentParent  # noqa: F401
from app.models.school_class import SchoolClass, StudentClass  # noqa: F401
from app.models.attendance import AttendanceRecord  # noqa: F401
from app.models.grade import Grade  # noqa: F401
from app.models.announcement import Announcement  # noqa: F401
