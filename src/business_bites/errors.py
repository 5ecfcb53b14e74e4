"""Exception types shared by the row sources, the service and the web layer."""

from __future__ import annotations


class BusinessBitesError(Exception):
    pass


class InfrastructureError(BusinessBitesError):
    """A storage backend was unreachable or rejected the query."""

    def __init__(self, message: str, *, backend: str | None = None) -> None:
        super().__init__(message)
        self.backend = backend


class NotFoundError(BusinessBitesError):
    def __init__(self, message: str, *, identifier: object = None) -> None:
        super().__init__(message)
        self.identifier = identifier


class ValidationError(BusinessBitesError):
    pass


__all__ = ["BusinessBitesError", "InfrastructureError", "NotFoundError", "ValidationError"]
