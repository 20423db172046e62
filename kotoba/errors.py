"""Exceptions raised across the analysis call boundary."""


class AnalysisInputError(ValueError):
    """Raised when an analysis call receives input that violates its preconditions."""
