from __future__ import annotations


class AssignmentError(RuntimeError):
    pass


class DuplicateKeyError(AssignmentError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Duplicate participant \"{key}\"")
        self.key = key


class UnknownKeyError(AssignmentError, KeyError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Unknown participant \"{key}\"")
        self.key = key

    def __str__(self) -> str:
        return self.args[0]


class BadConstraintError(AssignmentError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown person \"{name}\"")
        self.name = name


class GivingUpError(AssignmentError):
    def __init__(self, attempts: int) -> None:
        super().__init__(f"Giving up after {attempts} attempts. Try again or relax the exclusions.")
        self.attempts = attempts


class NotEnoughParticipantsError(AssignmentError):
    def __init__(self, count: int) -> None:
        super().__init__(f"At least 2 participants are required, got {count}.")
        self.count = count
