"""
Error types shared by the services and mapped to HTTP responses in main.
"""


class CheckValidationError(Exception):
    """Raised when submitted input is missing or malformed (client error)."""
    pass


class StorageError(Exception):
    """Raised when the database is unreachable or rejects a read or write."""
    pass


class UpstreamError(Exception):
    """Raised when an external service (search, image host) fails or times out."""

    def __init__(self, message: str, service: str = "upstream") -> None:
        super().__init__(message)
        self.service = service
