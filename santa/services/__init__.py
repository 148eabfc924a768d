from santa.services.assignment import Assigner, compute_assignment
from santa.services.constraints import ConstraintSet, Exclude, ExcludePair
from santa.services.errors import (
    AssignmentError,
    BadConstraintError,
    DuplicateKeyError,
    GivingUpError,
    NotEnoughParticipantsError,
    UnknownKeyError,
)
from santa.services.matrix import ExclusionMatrix

__all__ = [
    "Assigner",
    "compute_assignment",
    "ConstraintSet",
    "Exclude",
    "ExcludePair",
    "AssignmentError",
    "BadConstraintError",
    "DuplicateKeyError",
    "GivingUpError",
    "NotEnoughParticipantsError",
    "UnknownKeyError",
    "ExclusionMatrix",
]
