"""Errors raised by query responders."""


class ResponderError(Exception):
    """Base class for query responder failures."""


class ResponderUnavailableError(ResponderError):
    """Connection failure, timeout or non-success HTTP status."""


class ResponderPayloadError(ResponderError):
    """The responder answered but the payload was not a valid VoiceResponse."""
