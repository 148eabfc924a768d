from __future__ import annotations

import random
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from santa.services.errors import (
    BadConstraintError,
    DuplicateKeyError,
    GivingUpError,
    NotEnoughParticipantsError,
)
from santa.services.matrix import ExclusionMatrix

if TYPE_CHECKING:
    from santa.services.constraints import Constraint

DEFAULT_MAX_ATTEMPTS = 1000

Pair = Tuple[str, str]


class Assigner:
    """Draws a derangement that respects exclusion constraints.

    Every attempt shuffles the participants, builds a fresh matrix, applies
    the constraints and hands out recipients one giver at a time. An attempt
    that runs into a giver with nobody left to draw is thrown away whole; there
    is no backtracking. After ``max_attempts`` failed attempts the draw gives up.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        rng: Optional[random.Random] = None,
    ) -> None:
        if isinstance(max_attempts, bool) or not isinstance(max_attempts, int) or max_attempts < 1:
            raise ValueError(f"max_attempts must be a positive integer, got {max_attempts!r}")
        self.max_attempts = max_attempts
        self.rng = rng if rng is not None else random.Random()

    def assign(
        self,
        participants: Iterable[str],
        constraints: Sequence["Constraint"] = (),
    ) -> List[Pair]:
        people = _ordered(participants)
        if len(people) < 2:
            raise NotEnoughParticipantsError(len(people))

        known = set(people)
        if len(known) != len(people):
            seen = set()
            for name in people:
                if name in seen:
                    raise DuplicateKeyError(name)
                seen.add(name)

        # Input errors must not cost attempts.
        for constraint in constraints:
            for name in constraint.names():
                if name not in known:
                    raise BadConstraintError(name)

        for attempt in range(1, self.max_attempts + 1):
            self.rng.shuffle(people)
            matrix = ExclusionMatrix(people)
            for constraint in constraints:
                constraint.apply(matrix)

            assignments = self._draw(people, matrix)
            if assignments is not None:
                logger.debug(
                    "Drew {count} assignments on attempt {attempt}",
                    count=len(assignments),
                    attempt=attempt,
                )
                return assignments
            logger.debug("Attempt {attempt} failed, retrying", attempt=attempt)

        logger.warning("Giving up after {attempts} attempts", attempts=self.max_attempts)
        raise GivingUpError(self.max_attempts)

    def _draw(self, people: Sequence[str], matrix: ExclusionMatrix) -> Optional[List[Pair]]:
        assignments: List[Pair] = []
        for person in people:
            logger.trace("Drawing recipient for {person}", person=person)
            basket = matrix.eligible(person)
            logger.trace("Options: {basket}", basket=basket)
            if not basket:
                return None

            choice = self.rng.choice(basket)
            logger.trace("Picked {choice}", choice=choice)
            matrix.set_column(choice, False)
            assignments.append((person, choice))
        return assignments


def _ordered(participants: Iterable[str]) -> List[str]:
    # Sets iterate in hash order; sort them so seeded draws are reproducible.
    if isinstance(participants, (set, frozenset)):
        return sorted(participants)
    return list(participants)


def compute_assignment(
    participants: Iterable[str],
    constraints: Sequence["Constraint"] = (),
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
) -> List[Pair]:
    if rng is None:
        rng = random.Random(seed)
    return Assigner(max_attempts=max_attempts, rng=rng).assign(participants, list(constraints))
