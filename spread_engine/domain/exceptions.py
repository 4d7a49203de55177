"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidAmountError(DomainException):
    """Contribution amount is not a positive whole number of minor units"""

    pass


class InvalidOptionsError(DomainException):
    """Split options are out of range or inconsistent"""

    pass


class InvalidPayloadError(DomainException):
    """Planning request payload failed validation"""

    pass
