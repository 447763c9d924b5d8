"""Shared exceptions for service layer operations."""


class StoreError(Exception):
    """
    Raised when a bookmark store query fails.

    Wraps the underlying driver/ORM error so MCP tool handlers can report a
    readable message without depending on SQLAlchemy.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
