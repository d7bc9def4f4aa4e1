from .memory_repository import InMemoryStudyRepository

__all__ = ["InMemoryStudyRepository"]
