from enum import Enum


class AlertType(str, Enum):
    LOW_STOCK = "low_stock"
    NEGATIVE_MARGIN = "negative_margin"


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
