class ConversionError(Exception):
    """Base class for errors raised while converting between NodePool versions."""


class EncodingError(ConversionError):
    """A side-channel annotation could not be marshaled or unmarshaled."""


class MissingDefaultError(ConversionError):
    """No default node class is configured but one is needed."""


class MalformedObjectError(ConversionError):
    """A NodePool field has the wrong JSON type."""
