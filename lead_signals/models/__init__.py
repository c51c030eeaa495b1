"""Domain models for signals, scores, events and alerts."""
