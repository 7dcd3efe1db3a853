"""
Errors raised while turning a script into matched clips.
"""


class ScriptMatchingError(RuntimeError):
    """Base class for failures of the matching pipeline."""


class SegmentationError(ScriptMatchingError):
    """Raised when no segments could be produced for a script. Fatal."""


class NoEligibleCandidatesError(ScriptMatchingError):
    """Raised when the user has no tagged videos to match against. Fatal."""

    def __init__(self, message: str = "No tagged videos found. Tag your media before matching."):
        super().__init__(message)


class AIMatchingUnavailableError(ScriptMatchingError):
    """The AI matcher failed or timed out. Handled by falling back to tag matching."""


class InvalidTimestampError(ValueError):
    """Raised for negative or out-of-order word timestamps."""

    def __init__(self, index: int, reason: str):
        self.index = index
        self.reason = reason
        super().__init__(f"Invalid word timestamp at index {index}: {reason}")
