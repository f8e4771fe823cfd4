"""
Exception taxonomy for the air quality core.
"""


class AirQualityError(Exception):
    """Base class for all errors raised by the air quality core."""


class InvalidInput(AirQualityError):
    """Malformed or out-of-range coordinates, or a negative concentration."""


class CacheDegraded(AirQualityError):
    """
    The primary cache store is unreachable or failed an operation.
    Never surfaces past the ResultCache, which falls back to the local store.
    """


class NotFound(AirQualityError):
    """A subscription id that the registry does not know about."""


class DispatchFailure(AirQualityError):
    """
    A notification transport failed to deliver a message.
    Logged by the dispatcher; the subscription stays active.
    """

    def __init__(self, channel, contact, reason):
        self.channel = channel
        self.contact = contact
        self.reason = reason
        super().__init__(f"{channel} delivery to {contact} failed: {reason}")
