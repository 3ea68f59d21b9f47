"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidAmountError(DomainException):
    """Non-positive total where a positive total is required"""

    pass


class InvalidInstallmentCountError(DomainException):
    """Installment or occurrence count is zero or negative"""

    pass


class InvalidDateError(DomainException):
    """Calendar date components or text are malformed"""

    pass


class UnresolvedTransferPairError(DomainException):
    """Transfer leg has no counterpart in the supplied entry set"""

    def __init__(self, entry_id: str, pair_id: str | None):
        self.entry_id = entry_id
        self.pair_id = pair_id
        super().__init__(f"Transfer {entry_id} has no counterpart (pair_id={pair_id})")


class InvalidHorizonError(DomainException):
    """Projection horizon shorter than one month"""

    pass


class InvalidSimulationError(DomainException):
    """Simulated entry with an unsupported kind or a blank description"""

    pass
