from .database import DatabaseClient, DatabaseContextManager

__all__ = [
    "DatabaseClient",
    "DatabaseContextManager",
]
