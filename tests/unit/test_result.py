"""Unit tests for validation results and check outcomes."""

import itertools

import pytest
from pydantic import ValidationError as PydanticValidationError

from check_image.core.result import AggregateResult, ValidationResult
from check_image.models.result import AgeDetails, AllResult, CheckOutcome, PortsDetails, Summary


class TestValidationResult:
    """Tests for ValidationResult."""

    def test_order(self):
        """Test the severity order."""
        assert (
            ValidationResult.SKIPPED
            < ValidationResult.SUCCEEDED
            < ValidationResult.FAILED
            < ValidationResult.EXECUTION_ERROR
        )

    @pytest.mark.parametrize(
        ("result", "code"),
        [
            (ValidationResult.SKIPPED, 0),
            (ValidationResult.SUCCEEDED, 0),
            (ValidationResult.FAILED, 1),
            (ValidationResult.EXECUTION_ERROR, 2),
        ],
    )
    def test_exit_code(self, result, code):
        """Test the process exit status of each result."""
        assert result.exit_code == code


class TestAggregateResult:
    """Tests for AggregateResult."""

    def test_starts_skipped(self):
        """Test the initial state."""
        aggregate = AggregateResult()
        assert aggregate.state is ValidationResult.SKIPPED
        assert not aggregate.failed

    def test_never_lowers(self):
        """Test that raising to a lower state is a no-op."""
        aggregate = AggregateResult()
        aggregate.raise_to(ValidationResult.FAILED)
        aggregate.raise_to(ValidationResult.SUCCEEDED)
        assert aggregate.state is ValidationResult.FAILED
        assert aggregate.failed

    def test_order_independent(self):
        """Test that any call order ends at the maximum state."""
        states = list(ValidationResult)
        for length in range(1, len(states) + 1):
            for sequence in itertools.permutations(states, length):
                aggregate = AggregateResult()
                for state in sequence:
                    aggregate.raise_to(state)
                assert aggregate.state is max(sequence)

    def test_repr(self):
        """Test the representation."""
        aggregate = AggregateResult()
        aggregate.raise_to(ValidationResult.EXECUTION_ERROR)
        assert repr(aggregate) == "AggregateResult(EXECUTION_ERROR)"


class TestCheckOutcome:
    """Tests for CheckOutcome."""

    def test_errored(self):
        """Test building an errored outcome from an exception."""
        outcome = CheckOutcome.errored("age", "app:1", ValueError("image creation date is not set"))

        assert outcome.is_error
        assert outcome.passed is False
        assert outcome.error == "image creation date is not set"
        assert outcome.message == "check failed with error: image creation date is not set"

    def test_errored_without_message(self):
        """Test that an exception without text is described by its type."""
        assert CheckOutcome.errored("age", "app:1", KeyError()).error == "KeyError"

    def test_error_cannot_pass(self):
        """Test that an errored outcome cannot be marked passed."""
        with pytest.raises(PydanticValidationError):
            CheckOutcome(check="age", image="app:1", passed=True, error="boom")

    def test_error_cannot_carry_details(self):
        """Test that an errored outcome cannot carry details."""
        with pytest.raises(PydanticValidationError):
            CheckOutcome(
                check="age",
                image="app:1",
                passed=False,
                error="boom",
                details=AgeDetails(created_at="2024-01-01T00:00:00", age_days=1.0, max_age=90),
            )

    def test_to_dict_kebab_case(self):
        """Test JSON keys are kebab-case and empty optional fields are dropped."""
        outcome = CheckOutcome(
            check="ports",
            image="app:1",
            passed=True,
            message="No ports are exposed in this image",
            details=PortsDetails(exposed_ports=[]),
        )

        assert outcome.to_dict() == {
            "check": "ports",
            "image": "app:1",
            "passed": True,
            "message": "No ports are exposed in this image",
            "details": {"exposed-ports": []},
        }

    def test_all_result_defaults(self):
        """Test an aggregate report without checks."""
        result = AllResult(image="app:1", passed=True, summary=Summary())
        assert result.to_dict() == {
            "image": "app:1",
            "passed": True,
            "checks": [],
            "summary": {"total": 0, "passed": 0, "failed": 0, "errored": 0},
        }
