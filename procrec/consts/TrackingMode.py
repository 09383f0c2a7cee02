from enum import Enum


class TrackingMode(Enum):
    EXTERNAL = "external"
    INTERNAL = "internal"
