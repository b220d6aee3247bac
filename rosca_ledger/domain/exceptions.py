"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class CycleNotFoundError(DomainException):
    """No cycle exists with the requested id"""

    pass


class MemberNotFoundError(DomainException):
    """User is not a member of the requested cycle"""

    pass


class InvalidSavingPeriodError(DomainException):
    """Deposit period leaves no remaining months to accrue interest over"""

    pass
