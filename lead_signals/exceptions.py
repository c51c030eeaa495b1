"""Exception hierarchy for the lead signals service."""


class LeadSignalsError(Exception):
    """Base class for all service errors."""
    pass


class PersistenceError(LeadSignalsError):
    """Raised when a store cannot complete a read or write."""
    pass


class AlertDeliveryError(LeadSignalsError):
    """Raised by alert transports when the provider rejects or fails a send."""
    pass


class RuleTableError(LeadSignalsError):
    """Raised when a signal rule table cannot be loaded or compiled."""
    pass
