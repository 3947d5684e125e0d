from . import ai_lessons

__all__ = ["ai_lessons"]
