"""Exception hierarchy for Funding-Radar."""

from __future__ import annotations


class FundingRadarError(Exception):
    """Base class for errors raised by the package."""


class ConfigError(FundingRadarError):
    """Configuration file could not be read or validated."""


class PipelineError(FundingRadarError):
    """A run could not produce any response at all.

    Collaborator failures, unparseable pages and the fetch deadline are all
    absorbed inside the pipeline; this error is reserved for the terminal
    case and is distinct from a run that simply found nothing.
    """


__all__ = ["ConfigError", "FundingRadarError", "PipelineError"]
