"""HTTP API for the lead signals service."""
