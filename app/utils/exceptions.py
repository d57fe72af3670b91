"""Custom exceptions for the reading progress API."""
from fastapi import HTTPException


class ValidationError(HTTPException):
    """Input validation errors."""
    def __init__(self, detail: str = "Invalid input"):
        super().__init__(status_code=400, detail=detail)


class RemoteStoreError(Exception):
    """A remote progress read or write failed (network, SQL or malformed row)."""


class RemoteFetchCancelled(RemoteStoreError):
    """The caller stopped waiting for a remote fetch and asked it to stop."""
