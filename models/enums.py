"""
Enumerations shared across the planning models.
"""
from enum import Enum as PyEnum
from enum import IntEnum


class Weekday(IntEnum):
    """Calendar weekday, positional index into the seven daily quantity slots."""
    MON = 0
    TUE = 1
    WED = 2
    THU = 3
    FRI = 4
    SAT = 5
    SUN = 6


DAYS_IN_WEEK = 7


class CauseCategory(PyEnum):
    """6M+S root-cause taxonomy for commitments that were not met."""
    MATERIAL = "MATERIAL"
    LABOR = "LABOR"
    MACHINE = "MACHINE"
    METHOD = "METHOD"
    ENVIRONMENT = "ENVIRONMENT"
    MEASUREMENT = "MEASUREMENT"
    SAFETY = "SAFETY"
