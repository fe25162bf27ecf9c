from .cfd.estimator import Cfd, estimate_drag_ratio
from .cfd.record import Record
from .cfd.store import RecordStore, load_records
from .errors import ConfigurationError, DatasetError, InterpolationError, QueryError, SlipstreamError

__all__ = [
    "Cfd",
    "ConfigurationError",
    "DatasetError",
    "InterpolationError",
    "QueryError",
    "Record",
    "RecordStore",
    "SlipstreamError",
    "estimate_drag_ratio",
    "load_records",
]
