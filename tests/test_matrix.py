import pytest

from santa.services.errors import DuplicateKeyError, UnknownKeyError
from santa.services.matrix import ExclusionMatrix


def make_matrix():
    return ExclusionMatrix(["a", "b", "c"])


def test_matrix_init_blocks_diagonal_only():
    matrix = make_matrix()
    for x in "abc":
        for y in "abc":
            assert matrix.get(x, y) == (x != y)


def test_matrix_get_row():
    matrix = make_matrix()
    assert matrix.get_row("a") == [False, True, True]
    assert matrix.get_row("b") == [True, False, True]
    assert matrix.get_row("c") == [True, True, False]


def test_matrix_get_row_is_a_copy():
    matrix = make_matrix()
    row = matrix.get_row("a")
    row[1] = False
    assert matrix.get("a", "b")

    matrix.set("a", "c", False)
    assert row[2] is True


def test_matrix_set():
    matrix = make_matrix()
    matrix.set("a", "b", False)
    assert not matrix.get("a", "b")
    assert matrix.get("b", "a")
    matrix.set("a", "b", True)
    assert matrix.get("a", "b")


def test_matrix_refuses_self_assignment():
    matrix = make_matrix()
    with pytest.raises(ValueError):
        matrix.set("a", "a", True)
    matrix.set("a", "a", False)
    assert not matrix.get("a", "a")


def test_matrix_set_column():
    matrix = make_matrix()
    matrix.set_column("b", False)
    assert [matrix.get(x, "b") for x in "abc"] == [False, False, False]
    assert matrix.get("a", "c")

    matrix.set_column("b", True)
    assert matrix.get("a", "b")
    assert matrix.get("c", "b")
    assert not matrix.get("b", "b")


def test_matrix_eligible_follows_key_order():
    matrix = ExclusionMatrix(["x", "y", "z", "w"])
    matrix.set("x", "z", False)
    assert matrix.eligible("x") == ["y", "w"]
    matrix.set_column("w", False)
    assert matrix.eligible("x") == ["y"]


def test_matrix_contains():
    matrix = make_matrix()
    assert matrix.contains("a")
    assert "c" in matrix
    assert not matrix.contains("d")
    assert "aa" not in matrix


def test_matrix_size_and_key_at():
    matrix = make_matrix()
    assert matrix.size() == 3
    assert len(matrix) == 3
    assert [matrix.key_at(i) for i in range(3)] == ["a", "b", "c"]
    assert ExclusionMatrix(["a"]).size() == 1
    assert ExclusionMatrix([]).size() == 0


def test_matrix_rejects_duplicate_keys():
    with pytest.raises(DuplicateKeyError) as excinfo:
        ExclusionMatrix(["a", "b", "a"])
    assert excinfo.value.key == "a"


@pytest.mark.parametrize(
    "operation",
    [
        lambda m: m.get("a", "z"),
        lambda m: m.get("z", "a"),
        lambda m: m.get_row("z"),
        lambda m: m.set("a", "z", False),
        lambda m: m.set_column("z", False),
    ],
)
def test_matrix_unknown_key(operation):
    matrix = make_matrix()
    with pytest.raises(UnknownKeyError) as excinfo:
        operation(matrix)
    assert excinfo.value.key == "z"


def test_unknown_key_is_a_key_error():
    with pytest.raises(KeyError):
        make_matrix().get("a", "nobody")
