"""Enumerations shared by farmer and farm records."""
from __future__ import annotations

from enum import Enum


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"


class Ownership(str, Enum):
    FREEHOLD = "Freehold"
    LEASEHOLD = "Leasehold"
    COMMUNAL = "Communal"
