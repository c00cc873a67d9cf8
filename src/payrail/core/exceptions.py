"""PayRail exception hierarchy."""

from __future__ import annotations

from typing import Any


class PayRailError(Exception):
    """Base exception for all PayRail errors."""


class ConfigurationError(PayRailError):
    """Required configuration is missing or invalid."""


class OracleNotConfiguredError(ConfigurationError, NotImplementedError):
    """ORACLE conversion requested but no price feed exists."""


class ConversionError(PayRailError, ValueError):
    """Token amount cannot be converted to cents."""


class NachaValidationError(PayRailError, ValueError):
    """A value cannot be represented in a NACHA record."""


class AccumulatorError(PayRailError):
    """Pending-entry queue operation failed."""


class ProfileStoreError(PayRailError):
    """Employee bank profile lookup failed."""


class LedgerError(PayRailError):
    """Journal entry could not be posted."""


class FlushError(PayRailError):
    """A cutoff flush failed after entries were drained.

    Carries everything needed for manual recovery: the tag, the rendered
    file text (empty if rendering itself failed) and the drained entries.
    """

    def __init__(
        self,
        tag: str,
        file_text: str,
        entries: list[Any],
        diagnostic: str,
    ) -> None:
        self.tag = tag
        self.file_text = file_text
        self.entries = entries
        self.diagnostic = diagnostic
        super().__init__(f"Flush of payroll_{tag} failed: {diagnostic}")


class SubmissionError(FlushError):
    """The transport rejected a fully rendered file; ``file_text`` is final."""


class SubmissionConflictError(PayRailError):
    """A file with the same name but different bytes was already submitted."""
