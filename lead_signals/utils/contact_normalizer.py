"""
Lead Contact Normalization

Turns whatever identifier a channel hands us (phone in any format, email,
chat session id) into a stable key for alert throttling, and formats
phone numbers for display in owner alerts.
"""

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat
from typing import Optional
from lead_signals.utils.observability import logger


UNKNOWN_CONTACT = "unknown"


class ContactNormalizer:
    """
    Normalizes lead contact identifiers.

    - Phone numbers (with or without "+", "whatsapp:"/"sms:" prefixes) -> E.164
    - Email addresses -> lower-cased
    - Anything else -> stripped as-is

    Usage:
        normalizer = ContactNormalizer(default_region="US")
        normalizer.normalize("(650) 253-0000")   # "+16502530000"
        normalizer.display("+16502530000")       # "(650) 253-0000"
    """

    CHANNEL_PREFIXES = ("whatsapp:", "sms:", "tel:")

    def __init__(self, default_region: str = "US"):
        self.default_region = default_region

    def normalize(self, contact: Optional[str]) -> str:
        if contact is None or not contact.strip():
            return UNKNOWN_CONTACT

        value = contact.strip()
        lowered = value.lower()
        for prefix in self.CHANNEL_PREFIXES:
            if lowered.startswith(prefix):
                value = value[len(prefix):]
                lowered = lowered[len(prefix):]
                break

        if "@" in value:
            return lowered

        e164 = self.to_e164(value)
        return e164 or value

    def to_e164(self, phone: str) -> Optional[str]:
        """E.164 form of ``phone`` or None when it is not a valid number."""
        try:
            parsed = phonenumbers.parse(phone, self.default_region)
        except NumberParseException:
            return None

        if not phonenumbers.is_valid_number(parsed):
            return None

        return phonenumbers.format_number(parsed, PhoneNumberFormat.E164)

    def display(self, contact: Optional[str]) -> str:
        """Human-friendly rendering for alert bodies."""
        if contact is None or contact == UNKNOWN_CONTACT:
            return "No contact provided"

        try:
            parsed = phonenumbers.parse(contact, self.default_region)
        except NumberParseException:
            return contact

        if not phonenumbers.is_valid_number(parsed):
            return contact

        if phonenumbers.region_code_for_number(parsed) == self.default_region:
            return phonenumbers.format_number(parsed, PhoneNumberFormat.NATIONAL)

        formatted = phonenumbers.format_number(parsed, PhoneNumberFormat.INTERNATIONAL)
        logger.debug(f"Formatted foreign contact for display: {formatted}")
        return formatted
