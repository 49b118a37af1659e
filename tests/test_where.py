import pytest

from beeorm.where import Operator, PrevOperator, Query, is_op


def test_where():
    w = Query()
    w.and_("id", 1)
    w.and_("name", "test")
    w.and_("age", [1, 2, 3, 4, 5])
    w.or_("id", 2)
    w.and_like("name", "%test%")
    w.and_("sex", "LIKE", "%female%")
    w.and_in("id", [1, 2, 3, 4, 5])

    expected = (
        "`id` = ? AND `name` = ? AND `age` IN (?,?,?,?,?) OR `id` = ? "
        "AND `name` LIKE ? AND `sex` LIKE ? AND `id` IN (?,?,?,?,?)"
    )
    assert str(w) == expected
    assert w.parameters() == [
        1, "test",
        1, 2, 3, 4, 5,
        2,
        "%test%",
        "%female%",
        1, 2, 3, 4, 5,
    ]


def test_is_op():
    assert is_op("LIKE")
    assert is_op(">=")
    assert not is_op("")
    assert not is_op("EQUALS")


def test_first_clause_has_no_connector():
    w = Query().or_equal("id", 5).and_greater_than("x", 3)
    assert str(w) == "`id` = ? AND `x` > ?"
    assert w.parameters() == [5, 3]


def test_custom_without_operator_raises():
    with pytest.raises(ValueError, match="no operator was provided for AND clause"):
        Query().and_custom("a", 5)
    with pytest.raises(ValueError, match="no operator was provided for OR clause"):
        Query().or_custom("a", 5)


def test_custom_keeps_first_operator():
    w = Query().and_custom("a", "LIKE", ">", 5)
    assert str(w) == "`a` LIKE ?"
    assert w.parameters() == [5]


def test_custom_with_enum_operator():
    w = Query().and_custom("a", Operator.NOT_EQUAL, 7)
    assert str(w) == "`a` != ?"
    assert w.parameters() == [7]


def test_in_with_single_string():
    w = Query().and_in("id", "x")
    assert str(w) == "`id` IN (?)"
    assert w.parameters() == ["x"]


def test_prev_operator_arguments_are_ignored():
    w = Query().and_equal("a", PrevOperator.OR, 1)
    assert str(w) == "`a` = ?"
    assert w.parameters() == [1]


def test_tuple_renders_in_clause():
    w = Query().and_equal("a", 1).or_equal("b", (4, 5))
    assert str(w) == "`a` = ? OR `b` IN (?,?)"
    assert w.parameters() == [1, 4, 5]