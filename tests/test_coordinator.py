import random

import pytest

from santa.services import group_flow
from santa.services.assignment import compute_assignment
from santa.services.constraints import Exclude
from santa.services.coordinator import GroupCoordinator
from santa.services.errors import BadConstraintError, GivingUpError
from santa.services.group_flow import GroupError, StaleSnapshotError


class HookedRandom(random.Random):
    """Runs ``hook`` on the first shuffle, while the draw is outside the group lock."""

    def __init__(self, seed, hook):
        super().__init__(seed)
        self.hook = hook

    def shuffle(self, x):
        if self.hook is not None:
            hook, self.hook = self.hook, None
            hook()
        super().shuffle(x)


@pytest.fixture
def coordinator(session_factory):
    coordinator = GroupCoordinator(session_factory, max_attempts=200)
    with coordinator.transaction("office") as session:
        for name in ["alice", "bob", "carol", "dave"]:
            group_flow.ensure_user(session, name)
        group_flow.create_group(session, "office", "alice")
        group_flow.join_group(session, "office", "bob")
        group_flow.join_group(session, "office", "carol")
    return coordinator


def recipients(coordinator, names):
    with coordinator.transaction("office") as session:
        return {name: group_flow.get_recipient(session, "office", name) for name in names}


def test_draw_commits_a_derangement(coordinator):
    pairs = coordinator.draw("office", "alice", rng=random.Random(1))

    stored = recipients(coordinator, ["alice", "bob", "carol"])
    assert stored == dict(pairs)
    assert sorted(stored.values()) == ["alice", "bob", "carol"]
    assert all(giver != recipient for giver, recipient in stored.items())


def test_draw_honours_stored_exclusions(coordinator):
    with coordinator.transaction("office") as session:
        group_flow.add_exclusion(session, "office", "alice", "alice", "bob")
    pairs = coordinator.draw("office", "alice", rng=random.Random(4))
    assert ("alice", "bob") not in pairs


def test_draw_retries_when_membership_changes(coordinator):
    def dave_joins():
        with coordinator.transaction("office") as session:
            group_flow.join_group(session, "office", "dave")

    pairs = coordinator.draw("office", "alice", rng=HookedRandom(3, dave_joins))

    assert sorted(giver for giver, _ in pairs) == ["alice", "bob", "carol", "dave"]
    assert recipients(coordinator, ["dave"])["dave"] is not None


def test_draw_gives_up_on_stale_snapshot_without_retries(session_factory, coordinator):
    strict = GroupCoordinator(session_factory, commit_retries=0)

    def dave_joins():
        with strict.transaction("office") as session:
            group_flow.join_group(session, "office", "dave")

    with pytest.raises(StaleSnapshotError):
        strict.draw("office", "alice", rng=HookedRandom(3, dave_joins))
    assert recipients(coordinator, ["alice"])["alice"] is None


def test_draw_surfaces_giving_up(coordinator):
    with coordinator.transaction("office") as session:
        group_flow.leave_group(session, "office", "carol")
        group_flow.add_exclusion(session, "office", "alice", "alice", "bob", symmetric=True)

    with pytest.raises(GivingUpError):
        coordinator.draw("office", "alice", rng=random.Random(0))
    assert recipients(coordinator, ["alice"])["alice"] is None


def test_draw_requires_admin(coordinator):
    with pytest.raises(GroupError, match="not an admin"):
        coordinator.draw("office", "bob")


def test_draw_twice_is_refused(coordinator):
    coordinator.draw("office", "alice", rng=random.Random(5))
    with pytest.raises(GroupError, match="already been drawn"):
        coordinator.draw("office", "alice", rng=random.Random(5))


def test_transaction_rolls_back_on_error(coordinator):
    with pytest.raises(GroupError):
        with coordinator.transaction("office") as session:
            group_flow.join_group(session, "office", "dave")
            group_flow.assign_admin(session, "office", "bob", "dave")

    with coordinator.transaction("office") as session:
        snapshot = group_flow.snapshot_group(session, "office", "alice")
    assert "dave" not in snapshot.participants


def test_bad_constraint_is_unreachable_through_the_store(coordinator):
    # The store only accepts exclusions between members, so snapshots never carry
    # an unknown name; a hand-built one still fails fast in the engine.
    with coordinator.transaction("office") as session:
        snapshot = group_flow.snapshot_group(session, "office", "alice")
    with pytest.raises(BadConstraintError):
        compute_assignment(snapshot.participants, snapshot.constraints + (Exclude("alice", "zoe"),))


def test_group_locks_are_released_after_use(coordinator):
    with coordinator.transaction("office"):
        assert "office" in coordinator._locks
    coordinator.draw("office", "alice", rng=random.Random(6))
    assert "office" not in coordinator._locks


def test_lone_admin_leaving_frees_the_group_name(coordinator):
    with coordinator.transaction("office") as session:
        group_flow.leave_group(session, "office", "bob")
        group_flow.leave_group(session, "office", "carol")
        group_flow.leave_group(session, "office", "alice")

    with coordinator.transaction("office") as session:
        group_flow.create_group(session, "office", "dave")
        group_flow.join_group(session, "office", "alice")
    pairs = coordinator.draw("office", "dave", rng=random.Random(2))
    assert sorted(pairs) == [("alice", "dave"), ("dave", "alice")]
