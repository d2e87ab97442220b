"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidInputError(DomainException):
    """Contract, event or invoice data is malformed (corrupt upstream data, do not retry)"""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class ContractNotFoundError(DomainException):
    """Contracts API has no record for the requested contract"""

    pass


class ContractSourceError(DomainException):
    """Contracts API returned an error or is unavailable"""

    pass


class NoApplicableDataWarning(UserWarning):
    """A pillar had no qualifying data and was scored with the neutral default"""

    pass
