"""Configuration errors."""

from __future__ import annotations


class ConfigurationError(Exception):
    """A configuration or seed file is structurally invalid.

    Attributes:
        source: Path (or description) of the offending file.
        problems: Every problem found, in file order.
    """

    code: str = "CONFIGURATION_INVALID"

    def __init__(self, source: str, problems: list[str]):
        self.source = source
        self.problems = problems
        super().__init__(
            f"Invalid configuration in {source}:\n"
            + "\n".join(f"  - {p}" for p in problems)
        )
