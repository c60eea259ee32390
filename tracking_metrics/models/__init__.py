from .user import UserRecord
from .metric import MetricRecord

__all__ = [
    "UserRecord",
    "MetricRecord",
]
