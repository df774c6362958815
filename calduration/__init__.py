import logging

from .duration import Duration, EndOfMonth, InvalidOperation, Unit, compare
from .point import DateTimePoint, PointInTime, ordering
from .util import INFINITY, NAN, NEG_INFINITY, is_sentinel

# Library logging stays silent unless the application configures handlers
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Duration",
    "EndOfMonth",
    "Unit",
    "InvalidOperation",
    "compare",
    "PointInTime",
    "DateTimePoint",
    "ordering",
    "INFINITY",
    "NEG_INFINITY",
    "NAN",
    "is_sentinel",
]
