"""Configuration and result types."""

from .config import Settings
from .results import Err, Notice, NoticeLevel, Notifier, Ok, Result, capture

__all__ = [
    "Err",
    "Notice",
    "NoticeLevel",
    "Notifier",
    "Ok",
    "Result",
    "Settings",
    "capture",
]
