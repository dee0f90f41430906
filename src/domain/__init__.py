"""Domain layer: errors and schemas."""

from .errors import ErrorCodes, PolicyRejectError
from .schemas import (
    ComparisonResult,
    DifferenceRecord,
    RunLog,
    SheetAlignment,
    WarningLog,
)

__all__ = [
    "ErrorCodes",
    "PolicyRejectError",
    "ComparisonResult",
    "DifferenceRecord",
    "RunLog",
    "SheetAlignment",
    "WarningLog",
]
