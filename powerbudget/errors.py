class PowerBudgetError(Exception):
    """Base class for errors raised by the power budget engine."""


class ValidationError(PowerBudgetError):
    """Raised when a project cannot produce a meaningful budget.

    No loads, no generation source of any kind, duplicate ids, or a
    battery bank with no usable capacity for a state-of-charge run.
    """


class DataUnavailableError(PowerBudgetError):
    """A generation source is configured but its measured data is missing.

    The budget calculator does not raise this; it reports the condition
    through ``BudgetResult.reliability``.  Callers that want a hard failure
    can raise it themselves from those flags.
    """

    def __init__(self, source: str) -> None:
        self.source = source
        super().__init__(f"No {source} data available for configured {source} sources")


class NumericDomainError(PowerBudgetError, ValueError):
    """Raised for physically invalid inputs such as |latitude| > 90."""


class ProjectFormatError(PowerBudgetError):
    """Raised when a project document cannot be parsed."""
