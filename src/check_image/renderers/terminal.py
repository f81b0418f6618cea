"""Terminal renderer for check-image output."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.text import Text

from check_image.models.result import (
    AgeDetails,
    CheckOutcome,
    EntrypointDetails,
    FileFinding,
    LabelsDetails,
    PlatformDetails,
    PortsDetails,
    RegistryDetails,
    SecretsDetails,
    SizeDetails,
)
from check_image.renderers.base import RenderFunc

# Styles
HEADER = "bold"
KEY = "bold cyan"
VALUE = "bright_white"
DIM = "dim"
PASS = "bold green"
FAIL = "bold red"


class TerminalRenderer:
    """Renders check outcomes as styled text with Rich.

    Each check has its own render method; :meth:`for_check` returns the
    one bound to a check name so that callers never dispatch on names.

    Example:
        renderer = TerminalRenderer()
        render = renderer.for_check("age")
        render(outcome)
    """

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the terminal renderer.

        Args:
            console: Rich console to use. Creates a new one if None.
        """
        self._console = console or Console()

    @property
    def console(self) -> Console:
        return self._console

    def for_check(self, name: str) -> RenderFunc:
        """Get the render method for a check name.

        Raises:
            KeyError: If no renderer exists for the name
        """
        renderers: dict[str, RenderFunc] = {
            "age": self.render_age,
            "size": self.render_size,
            "ports": self.render_ports,
            "registry": self.render_registry,
            "root-user": self.render_root_user,
            "secrets": self.render_secrets,
            "healthcheck": self.render_healthcheck,
            "labels": self.render_labels,
            "entrypoint": self.render_entrypoint,
            "platform": self.render_platform,
        }
        return renderers[name]

    def section_header(self, name: str) -> Text:
        """A horizontal rule carrying a check name: ``── name ─────``."""
        right = max(self._console.width - len(name) - 4, 2)
        return Text.assemble(("── ", DIM), (name, HEADER), (" " + "─" * right, DIM))

    def print_section_header(self, name: str) -> None:
        self._console.print(self.section_header(name), soft_wrap=True)

    @staticmethod
    def status_prefix(passed: bool) -> str:
        """A colored ✓ or ✗ followed by a space."""
        return f"[{PASS}]✓[/{PASS}] " if passed else f"[{FAIL}]✗[/{FAIL}] "

    def _heading(self, text: str) -> None:
        self._console.print(f"[{HEADER}]{escape(text)}[/{HEADER}]")

    def _status(self, outcome: CheckOutcome, message: str | None = None) -> None:
        self._console.print(self.status_prefix(outcome.passed) + escape(message or outcome.message))

    def _value(self, text: object) -> str:
        return f"[{VALUE}]{escape(str(text))}[/{VALUE}]"

    def render_age(self, outcome: CheckOutcome) -> None:
        details = outcome.details
        assert isinstance(details, AgeDetails)
        self._heading(f"Checking age of image {outcome.image}")
        self._console.print(f"Image creation date: {self._value(details.created_at)}")
        self._console.print(f"Image age: {self._value(f'{details.age_days:.0f} days')}")
        self._status(outcome)

    def render_size(self, outcome: CheckOutcome) -> None:
        details = outcome.details
        assert isinstance(details, SizeDetails)
        self._heading(f"Checking size and layers of image {outcome.image}")
        self._console.print(f"Number of layers: {self._value(details.layer_count)}")
        if details.layer_count > details.max_layers:
            self._console.print(f"Image has more than {self._value(details.max_layers)} layers")
        for layer in details.layers:
            self._console.print(f"  Layer {layer.index}: [{DIM}]{layer.bytes} bytes[/{DIM}]")
        self._console.print(
            f"Total size: {self._value(f'{details.total_bytes} bytes ({details.total_mb:.2f} MB)')}"
        )
        self._status(outcome)

    def render_ports(self, outcome: CheckOutcome) -> None:
        details = outcome.details
        assert isinstance(details, PortsDetails)
        self._heading(f"Checking ports of image {outcome.image}")

        if not details.exposed_ports:
            self._status(outcome)
            return

        self._console.print(f"[{KEY}]Exposed ports:[/{KEY}]")
        for port in details.exposed_ports:
            self._console.print(f"  - {self._value(port)}")

        if details.unauthorized_ports:
            self._console.print(f"[{KEY}]The following ports are not in the allowed list:[/{KEY}]")
            for port in details.unauthorized_ports:
                self._console.print(f"  - [{FAIL}]{port}[/{FAIL}]")

        self._status(outcome)

    def render_registry(self, outcome: CheckOutcome) -> None:
        details = outcome.details
        assert isinstance(details, RegistryDetails)
        self._heading(f"Checking registry of image {outcome.image}")

        if details.skipped:
            self._console.print(
                f"[{DIM}]Registry validation skipped (not applicable for this transport)[/{DIM}]"
            )
            return

        self._console.print(f"Image registry: {self._value(details.registry)}")
        self._status(outcome)

    def render_root_user(self, outcome: CheckOutcome) -> None:
        self._heading(f"Checking if image {outcome.image} is configured to run as a non-root user")
        self._status(outcome)

    def render_secrets(self, outcome: CheckOutcome) -> None:
        details = outcome.details
        assert isinstance(details, SecretsDetails)
        self._heading(f"Checking secrets in image {outcome.image}")

        if details.env_var_findings:
            self._console.print()
            self._console.print(f"[{KEY}]Environment Variables:[/{KEY}]")
            for env_finding in details.env_var_findings:
                self._console.print(
                    f"  - [{FAIL}]{escape(env_finding.name)}[/{FAIL}] ({escape(env_finding.description)})"
                )

        if details.file_findings:
            self._console.print()
            self._console.print(f"[{KEY}]Files with Sensitive Patterns:[/{KEY}]")
            by_layer: dict[int, list[FileFinding]] = {}
            for file_finding in details.file_findings:
                by_layer.setdefault(file_finding.layer_index, []).append(file_finding)
            for layer_index in sorted(by_layer):
                self._console.print(f"  Layer {layer_index + 1}:")
                for file_finding in by_layer[layer_index]:
                    self._console.print(
                        f"    - [{FAIL}]{escape(file_finding.path)}[/{FAIL}] ({escape(file_finding.description)})"
                    )

        self._console.print()
        total = f"Total findings: {self._value(details.total_findings)}"
        if details.total_findings:
            total += f" ({details.env_var_count} environment variables, {details.file_count} files)"
        self._console.print(total)
        self._status(outcome)

    def render_healthcheck(self, outcome: CheckOutcome) -> None:
        self._heading(f"Checking if image {outcome.image} has a healthcheck defined")
        self._status(outcome)

    def render_labels(self, outcome: CheckOutcome) -> None:
        details = outcome.details
        assert isinstance(details, LabelsDetails)
        self._heading(f"Checking labels of image {outcome.image}")

        if details.required_labels:
            self._console.print()
            self._console.print(f"[{KEY}]Required labels:[/{KEY}]")
            for req in details.required_labels:
                if req.pattern:
                    self._console.print(f'  - {escape(req.name)} (pattern: "{escape(req.pattern)}")')
                elif req.value:
                    self._console.print(f'  - {escape(req.name)} (exact: "{escape(req.value)}")')
                else:
                    self._console.print(f"  - {escape(req.name)} (existence check)")

        self._console.print()
        if details.actual_labels:
            self._console.print(f"[{KEY}]Actual labels ({len(details.actual_labels)}):[/{KEY}]")
            for key in sorted(details.actual_labels):
                self._console.print(f"  {escape(key)}: {escape(details.actual_labels[key])}")
        else:
            self._console.print("No labels found in image")

        if details.missing_labels:
            self._console.print()
            self._console.print(f"[{KEY}]Missing labels ({len(details.missing_labels)}):[/{KEY}]")
            for name in details.missing_labels:
                self._console.print(f"  - [{FAIL}]{escape(name)}[/{FAIL}]")

        if details.invalid_labels:
            self._console.print()
            self._console.print(f"[{KEY}]Invalid labels ({len(details.invalid_labels)}):[/{KEY}]")
            for invalid in details.invalid_labels:
                self._console.print(f"  - [{FAIL}]{escape(invalid.name)}[/{FAIL}]: {escape(invalid.reason)}")

        self._console.print()
        self._status(outcome)

    def render_entrypoint(self, outcome: CheckOutcome) -> None:
        details = outcome.details
        assert isinstance(details, EntrypointDetails)
        self._heading(f"Checking entrypoint of image {outcome.image}")
        if details.entrypoint:
            self._console.print(f"Entrypoint: {self._value(details.entrypoint)}")
        if details.cmd:
            self._console.print(f"Cmd: {self._value(details.cmd)}")
        self._status(outcome)

    def render_platform(self, outcome: CheckOutcome) -> None:
        details = outcome.details
        assert isinstance(details, PlatformDetails)
        self._heading(f"Checking platform of image {outcome.image}")
        self._console.print(f"Image platform: {self._value(details.platform)}")
        self._status(outcome)
