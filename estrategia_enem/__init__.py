"""EstratégiaENEM API - AI tutoring, essay correction and practice exams."""

__version__ = "1.0.0"
