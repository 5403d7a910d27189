"""
Énumérations métier, stockées en base sous forme de chaînes.
"""

import enum


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    PARENT = "PARENT"
    STUDENT = "STUDENT"


class EnrollmentStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    GRADUATED = "GRADUATED"
    TRANSFERRED = "TRANSFERRED"
    SUSPENDED = "SUSPENDED"


class ParentRelation(str, enum.Enum):
    MOTHER = "MOTHER"
    FATHER = "FATHER"
    GUARDIAN = "GUARDIAN"
    OTHER = "OTHER"


class AttendanceStatus(str, enum.Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EXCUSED = "EXCUSED"


class GradeType(str, enum.Enum):
    EXAM = "EXAM"
    QUIZ = "QUIZ"
    HOMEWORK = "HOMEWORK"
    PROJECT = "PROJECT"
    PARTICIPATION = "PARTICIPATION"
    OTHER = "OTHER"
