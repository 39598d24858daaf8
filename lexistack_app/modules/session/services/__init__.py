from .session_service import PracticeSessionService

__all__ = ['PracticeSessionService']
