"""Extract weight formulas from Substrate benchmark functions and compare snapshots."""

__version__ = "0.1.0"
