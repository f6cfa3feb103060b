"""Error taxonomy shared by the solver."""


class SolverError(Exception):
    """Base class for solver failures."""


class ConfigurationError(SolverError, ValueError):
    """Malformed or self-contradictory configuration, raised before search starts."""


class RuntimeInvariantViolation(SolverError, RuntimeError):
    """A mutation lost or duplicated a job. Indicates a bug, never retried."""


class InfeasibilityWarning(UserWarning):
    """Some jobs could not be placed under hard constraints."""
