class InferenceError(Exception):
    """Raised when an inference service call fails."""


class InferenceNetworkError(InferenceError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""


class AnalysisValidationError(InferenceError):
    """Raised when the analysis response fails domain validation."""
