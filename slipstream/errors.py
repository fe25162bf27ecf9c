class SlipstreamError(Exception):
    """Base class of all errors raised by the slipstream package."""


class DatasetError(SlipstreamError, ValueError):
    """The reference dataset is missing or malformed."""


class QueryError(SlipstreamError, ValueError):
    """A drag ratio query violates its preconditions."""


class InterpolationError(SlipstreamError, ArithmeticError):
    """The bracketing records share the same x-value."""


class ConfigurationError(SlipstreamError, ValueError):
    pass
