"""
SQLModel table entities.

Importing this package registers every table on ``Base.metadata``.
"""

from .audit_logs import AuditAction, AuditLog, AuditStatus
from .content import (
    ContentStatus,
    Exercise,
    ExerciseType,
    GuideBookEntry,
    LearningPath,
    Lesson,
    Section,
    Unit,
    VocabularyItem,
)
from .language import Sentence, SentenceTranslation, SentenceWord, Word
from .media import MediaFile
from .progress import ExerciseAttempt, ProgressStatus, TrackableType, UserProgress
from .quizzes import QuestionType, Quiz, QuizAttempt, QuizQuestion
from .users import AdminInvite, PersonalAccessToken, User, UserRole

__all__ = [
    "AdminInvite",
    "AuditAction",
    "AuditLog",
    "AuditStatus",
    "ContentStatus",
    "Exercise",
    "ExerciseAttempt",
    "ExerciseType",
    "GuideBookEntry",
    "LearningPath",
    "Lesson",
    "MediaFile",
    "PersonalAccessToken",
    "ProgressStatus",
    "QuestionType",
    "Quiz",
    "QuizAttempt",
    "QuizQuestion",
    "Section",
    "Sentence",
    "SentenceTranslation",
    "SentenceWord",
    "TrackableType",
    "Unit",
    "User",
    "UserProgress",
    "UserRole",
    "VocabularyItem",
    "Word",
]
