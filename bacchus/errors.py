"""Errors raised by the BAC engine."""


class BACError(Exception):
    """Base class for engine errors."""


class InvalidInput(BACError, ValueError):
    """Input outside the accepted domain (weight, volume, percentage, timestamps)."""
