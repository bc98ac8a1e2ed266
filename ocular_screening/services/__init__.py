"""
Session services.
"""
from .session import ScreeningSession, ResultSink

__all__ = ["ScreeningSession", "ResultSink"]
