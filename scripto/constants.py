from enum import StrEnum


class ElementType(StrEnum):
    DRAWING = "drawing"


class SessionState(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


# Minimum distance from the preceding raw sample for an interior point to be sent
STROKE_THINNING_THRESHOLD = 2.0

# Decimal places kept on the wire
COORDINATE_PRECISION = 2
PRESSURE_PRECISION = 1

# Input devices without pressure sensing report full pressure
DEFAULT_PRESSURE = 1.0

DEFAULT_STROKE_COLOR = "black"
DEFAULT_STROKE_WIDTH = 2.0

# Swift-style ``yyyy-MM-dd'T'HH:mm:ssZ`` as emitted by the backend
WIRE_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
