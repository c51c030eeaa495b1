"""Lead behavioral signals, scoring, event aggregation and owner alerts."""

__version__ = "1.0.0"
