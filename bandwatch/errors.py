"""Failures raised by the analysis pipeline.

All of them are local computation failures with no partial result; callers
decide whether to retry on the next scheduled evaluation.
"""


class BandwatchError(ValueError):
    """Base class for analysis failures."""


class InsufficientData(BandwatchError):
    """Fewer candles than the computation needs."""


class EmptyInput(BandwatchError):
    """A reduction step received nothing to seed from."""


class DegenerateBracket(BandwatchError):
    """No band is strong enough to bracket the current price."""
