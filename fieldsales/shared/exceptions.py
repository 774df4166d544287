"""Domain error taxonomy shared by the route, visit and inspection services"""


class DomainError(Exception):
    """Base class for errors returned to the caller with an explicit reason"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Malformed or missing required input"""

    status_code = 400


class NotFoundError(DomainError):
    """A referenced route, client, vendor, visit or report does not exist"""

    status_code = 404


class ConflictError(DomainError):
    """The operation would violate a domain invariant"""

    status_code = 409


class ExternalServiceDegraded(Exception):
    """An enrichment provider failed. Always absorbed by the caller."""
