"""Structured output helper for the CLI."""

import json
from typing import Any

from connstat.lib.aggregate import Sample


class Output:
    """Collects a cycle's samples and renders them as plain text or JSON."""

    def __init__(self):
        self.data: dict[str, Any] = {}
        self.samples: list[Sample] = []
        self.errors: list[str] = []
        self._printed: bool = False

    def emit(self, data: dict[str, Any]) -> None:
        """Store structured output data."""
        self.data.update(data)

    def add_samples(self, samples: list[Sample]) -> None:
        self.samples.extend(samples)

    def error(self, message: str) -> None:
        """Record an error message."""
        self.errors.append(message)

    def totals(self) -> dict[str, int]:
        """Socket totals per address family."""
        totals: dict[str, int] = {}
        for sample in self.samples:
            totals[sample.family] = totals.get(sample.family, 0) + sample.count
        return totals

    def to_dict(self) -> dict[str, Any]:
        result = dict(self.data)
        result["sockets"] = [sample._asdict() for sample in self.samples]
        result["totals"] = self.totals()
        if self.errors:
            result["errors"] = list(self.errors)
        return result

    def to_json(self) -> str:
        """Return data as JSON string."""
        return json.dumps(self.to_dict(), indent=2, default=str)

    def to_plain(self, title: str | None = None) -> str:
        """Return data as plain text."""
        lines = []

        if title:
            lines.append(title)
            lines.append("=" * len(title))
            lines.append("")

        for key, value in self.data.items():
            display_key = str(key).replace("_", " ").title()
            lines.append(f"{display_key}: {value}")
        if self.data:
            lines.append("")

        if self.samples:
            width = max(len("ASN"), *(len(s.owner) for s in self.samples))
            lines.append(f"  {'IPV':<3} {'ASN':<{width}} {'STATE':<12} {'COUNT':>6}")
            lines.append("  " + "-" * (width + 24))
            for sample in self.samples:
                lines.append(
                    f"  {sample.family:<3} {sample.owner:<{width}} "
                    f"{sample.state:<12} {sample.count:>6}"
                )
            lines.append("")
            for family, total in sorted(self.totals().items()):
                lines.append(f"  TOTAL (IPv{family}): {total}")
        elif not self.errors:
            lines.append("  (no sockets)")

        if self.errors:
            lines.append("")
            lines.append("Errors:")
            for message in self.errors:
                lines.append(f"  [ERROR] {message}")

        return "\n".join(lines)

    def render(self, format: str = "plain", title: str | None = None) -> None:
        """Print output in the specified format.

        Args:
            format: Output format - "json" or "plain"
            title: Optional title for plain text output
        """
        if self._printed:
            return
        self._printed = True

        if format == "json":
            print(self.to_json())
        else:
            print(self.to_plain(title))
