import enum


class PlanTier(str, enum.Enum):
    free = "free"
    premium = "premium"


class ActivityKind(str, enum.Enum):
    chat = "chat"
    essay = "essay"


class ExamStatus(str, enum.Enum):
    in_progress = "in_progress"
    completed = "completed"
    abandoned = "abandoned"


class ExamType(str, enum.Enum):
    general = "geral"
    subject = "materia"
