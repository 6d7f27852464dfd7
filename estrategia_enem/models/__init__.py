# estrategia_enem/models/__init__.py

from .user import User
from .chat_exchange import ChatExchange
from .essay_record import EssayRecord
from .exam_result import ExamResult
from .question import Question
from .study_plan import StudyPlan
from .library_resource import LibraryResource
from .progress import ProgressEntry

__all__ = [
    "User",
    "ChatExchange",
    "EssayRecord",
    "ExamResult",
    "Question",
    "StudyPlan",
    "LibraryResource",
    "ProgressEntry",
]
