class RuleError(Exception):
    """Base exception for all rule-related errors."""


class RuleConfigurationError(RuleError):
    """Raised when a rule cannot be built from its definition."""


class StateClosedError(RuleError):
    """Raised when a mapping table is used after the run's state was cleared."""
