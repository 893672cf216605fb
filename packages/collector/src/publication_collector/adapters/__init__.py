from .memory import InMemoryDataSource

__all__ = ["InMemoryDataSource"]
