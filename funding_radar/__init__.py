"""Funding-Radar: discover brands raising or seeking funding from public news."""

__version__ = "0.1.0"
