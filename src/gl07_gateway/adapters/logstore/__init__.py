from .sqlite import SqliteLogStore

__all__ = ["SqliteLogStore"]
