class EngineError(Exception):
    """Base exception for all engine-related errors."""


class ConstructionError(EngineError):
    """Raised when the rule pipeline cannot be built; the run must abort."""


class ProcessingError(EngineError):
    """Raised when a line cannot be transformed; the run must abort."""
