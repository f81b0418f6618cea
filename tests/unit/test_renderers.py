"""Unit tests for renderers."""

import io
import json

import pytest
from rich.console import Console

from check_image.models.result import (
    AgeDetails,
    AllResult,
    CheckOutcome,
    EnvVarFinding,
    FileFinding,
    LabelsDetails,
    RegistryDetails,
    RequiredLabelCheck,
    SecretsDetails,
    Summary,
)
from check_image.renderers.json import JSONRenderer
from check_image.renderers.terminal import TerminalRenderer


@pytest.fixture
def console():
    """Console writing to a buffer."""
    return Console(file=io.StringIO(), width=120, color_system=None)


def output(console: Console) -> str:
    return console.file.getvalue()


class TestTerminalRenderer:
    """Tests for TerminalRenderer."""

    def test_for_check_unknown(self, console):
        """Test that unknown check names have no renderer."""
        with pytest.raises(KeyError):
            TerminalRenderer(console).for_check("fingerprint")

    def test_status_prefix(self):
        """Test the pass and fail markers."""
        assert "✓" in TerminalRenderer.status_prefix(True)
        assert "✗" in TerminalRenderer.status_prefix(False)

    def test_section_header(self, console):
        """Test the section header rule."""
        renderer = TerminalRenderer(console)
        renderer.print_section_header("age")
        assert output(console).startswith("── age ───")

    def test_render_age(self, console):
        """Test the age rendering."""
        outcome = CheckOutcome(
            check="age",
            image="nginx:latest",
            passed=False,
            message="Image is older than 90 days",
            details=AgeDetails(created_at="2023-01-01T00:00:00+00:00", age_days=400.2, max_age=90),
        )
        TerminalRenderer(console).for_check("age")(outcome)

        text = output(console)
        assert "Checking age of image nginx:latest" in text
        assert "400 days" in text
        assert "✗ Image is older than 90 days" in text

    def test_render_skipped_registry(self, console):
        """Test that a skipped registry check prints no status line."""
        outcome = CheckOutcome(
            check="registry",
            image="oci:/srv/layout:1.0",
            passed=True,
            message="Registry validation skipped (not applicable for this transport)",
            details=RegistryDetails(skipped=True),
        )
        TerminalRenderer(console).render_registry(outcome)

        text = output(console)
        assert "skipped" in text
        assert "✓" not in text

    def test_render_secrets_groups_by_layer(self, console):
        """Test that file findings are listed under one-based layer numbers."""
        outcome = CheckOutcome(
            check="secrets",
            image="app:1",
            passed=False,
            message="Secrets detected",
            details=SecretsDetails(
                env_var_findings=[EnvVarFinding(name="DB_PASSWORD", description="sensitive pattern detected")],
                file_findings=[
                    FileFinding(path="root/.ssh/id_rsa", layer_index=0, description="SSH private key"),
                    FileFinding(path="app/secrets.json", layer_index=2, description="secrets file"),
                ],
                total_findings=3,
                env_var_count=1,
                file_count=2,
            ),
        )
        TerminalRenderer(console).render_secrets(outcome)

        text = output(console)
        assert "DB_PASSWORD" in text
        assert "Layer 1:" in text
        assert "Layer 3:" in text
        assert "Total findings: 3 (1 environment variables, 2 files)" in text

    def test_render_labels_escapes_markup(self, console):
        """Test that label values are printed literally."""
        outcome = CheckOutcome(
            check="labels",
            image="app:1",
            passed=False,
            message="Image does not meet label requirements",
            details=LabelsDetails(
                required_labels=[RequiredLabelCheck(name="team", pattern="[a-z]+")],
                actual_labels={"team": "[bold]Ops[/bold]"},
                missing_labels=["owner"],
            ),
        )
        TerminalRenderer(console).render_labels(outcome)

        text = output(console)
        assert 'team (pattern: "[a-z]+")' in text
        assert "team: [bold]Ops[/bold]" in text
        assert "Missing labels (1):" in text


class TestJSONRenderer:
    """Tests for JSONRenderer."""

    def test_dumps_uses_kebab_case(self):
        """Test that result models are dumped with their aliases."""
        outcome = CheckOutcome(
            check="age",
            image="app:1",
            passed=True,
            message="Image is less than 90 days old",
            details=AgeDetails(created_at="2024-01-01T00:00:00+00:00", age_days=3.5, max_age=90),
        )
        data = json.loads(JSONRenderer().dumps(outcome))

        assert data["details"]["age-days"] == 3.5
        assert "error" not in data

    def test_render_all_result(self, console):
        """Test printing an aggregate report."""
        result = AllResult(
            image="app:1",
            passed=False,
            checks=[CheckOutcome.errored("labels", "app:1", RuntimeError("boom"))],
            summary=Summary(total=1, errored=1, skipped=["registry"]),
        )
        JSONRenderer(console).render(result)

        data = json.loads(output(console))
        assert data["passed"] is False
        assert data["checks"][0]["error"] == "boom"
        assert data["summary"] == {"total": 1, "passed": 0, "failed": 0, "errored": 1, "skipped": ["registry"]}

    def test_dumps_plain_data(self):
        """Test dumping plain data with a custom indent."""
        assert JSONRenderer(indent=0).dumps({"a": 1}) == '{\n"a": 1\n}'
