"""Aggregate validation result for a run."""

from enum import IntEnum


class ValidationResult(IntEnum):
    """Outcome of a run, ordered by severity."""

    SKIPPED = 0
    SUCCEEDED = 1
    FAILED = 2
    EXECUTION_ERROR = 3

    @property
    def exit_code(self) -> int:
        """Process exit status for this result."""
        if self is ValidationResult.EXECUTION_ERROR:
            return 2
        if self is ValidationResult.FAILED:
            return 1
        return 0


class AggregateResult:
    """Monotonic holder for the run result.

    The value starts at SKIPPED and only ever rises: ``raise_to`` keeps the
    more severe of the current and the given state.
    """

    def __init__(self) -> None:
        self._state = ValidationResult.SKIPPED

    @property
    def state(self) -> ValidationResult:
        return self._state

    def raise_to(self, state: ValidationResult) -> None:
        if state > self._state:
            self._state = state

    @property
    def failed(self) -> bool:
        """Whether the run failed or hit an execution error."""
        return self._state >= ValidationResult.FAILED

    def __repr__(self) -> str:
        return f"AggregateResult({self._state.name})"
