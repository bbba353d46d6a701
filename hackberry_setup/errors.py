"""Error taxonomy.

Skipping because a feature is disabled and skipping because the desired
state already holds are outcomes, not errors. Everything below is raised.
"""

from __future__ import annotations


class SetupError(Exception):
    pass


class ResolutionError(SetupError):
    """The invocation is invalid; raised before any operation runs."""


class Unactionable(SetupError):
    """A probe cannot determine or reach the target (recorded as skipped)."""


class VerificationError(SetupError):
    """A post-condition does not hold although every sub-step succeeded."""
