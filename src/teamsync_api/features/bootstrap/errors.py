"""Errors raised by the startup bootstrap pipeline."""

from __future__ import annotations


class BootstrapError(RuntimeError):
    """Base class for fatal bootstrap failures.

    ``stage`` names the pipeline stage that failed so operators can tell a
    failed role reconciliation from a failed workspace insert.
    """

    def __init__(self, message: str, *, stage: str) -> None:
        super().__init__(message)
        self.stage = stage


class StoreUnavailableError(BootstrapError):
    """A store operation failed (connectivity, constraint, driver error)."""


class MissingDependencyError(BootstrapError):
    """A stage's required predecessor record is absent."""


__all__ = ["BootstrapError", "MissingDependencyError", "StoreUnavailableError"]
