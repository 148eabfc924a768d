from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set, Tuple, Union

from santa.services.assignment import DEFAULT_MAX_ATTEMPTS, compute_assignment
from santa.services.errors import BadConstraintError
from santa.services.matrix import ExclusionMatrix


@dataclass(frozen=True)
class ExcludePair:
    """Neither ``a`` nor ``b`` may draw the other."""

    a: str
    b: str

    def names(self) -> Tuple[str, str]:
        return (self.a, self.b)

    def apply(self, matrix: ExclusionMatrix) -> None:
        matrix.set(self.a, self.b, False)
        matrix.set(self.b, self.a, False)


@dataclass(frozen=True)
class Exclude:
    """``from_`` may not draw ``to``; the reverse edge is left alone."""

    from_: str
    to: str

    def names(self) -> Tuple[str, str]:
        return (self.from_, self.to)

    def apply(self, matrix: ExclusionMatrix) -> None:
        matrix.set(self.from_, self.to, False)


Constraint = Union[ExcludePair, Exclude]


def validate_constraints(constraints: Iterable[Constraint], known: Set[str]) -> None:
    for constraint in constraints:
        for name in constraint.names():
            if name not in known:
                raise BadConstraintError(name)


class ConstraintSet:
    def __init__(
        self,
        participants: Optional[Iterable[str]] = None,
        constraints: Optional[Iterable[Constraint]] = None,
    ) -> None:
        self._participants: Set[str] = set(participants or [])
        self._constraints: List[Constraint] = list(constraints or [])

    @property
    def participants(self) -> Set[str]:
        return set(self._participants)

    @property
    def constraints(self) -> Tuple[Constraint, ...]:
        return tuple(self._constraints)

    def add_participant(self, name: str) -> None:
        self._participants.add(name)

    def contains(self, name: str) -> bool:
        return name in self._participants

    def __contains__(self, name: object) -> bool:
        return name in self._participants

    def __len__(self) -> int:
        return len(self._participants)

    def exclude_pair(self, a: str, b: str) -> None:
        self._constraints.append(ExcludePair(a, b))

    def exclude(self, from_: str, to: str) -> None:
        self._constraints.append(Exclude(from_, to))

    def validate(self) -> None:
        validate_constraints(self._constraints, self._participants)

    def apply(self, matrix: ExclusionMatrix) -> None:
        self.validate()
        for constraint in self._constraints:
            constraint.apply(matrix)

    def assign(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        rng: Optional[random.Random] = None,
    ) -> List[Tuple[str, str]]:
        return compute_assignment(
            self._participants,
            self._constraints,
            max_attempts=max_attempts,
            rng=rng,
        )
