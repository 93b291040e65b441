import pytest

from qtlocators.errors import PathParseError
from qtlocators.lexer import tokenize
from qtlocators.models import AttributeCondition, PositionCondition, Predicate, Step, Token
from qtlocators.parser import DESCENDANT_OR_SELF, parse_tokens


def _parse(path: str) -> list[Step]:
    return parse_tokens(tokenize(path))


def test_header_span_text_path_parses_into_three_steps() -> None:
    steps = _parse("//div[@class='header']/span[1]/text()")

    assert [step.node_test for step in steps] == ["div", "span", "text()"]
    assert all(step.is_absolute for step in steps)
    assert all(step.axis == "child" for step in steps)
    assert steps[0].conditions() == (AttributeCondition(name="class", value="header", operator="="),)
    assert steps[1].conditions() == (PositionCondition(index=1),)
    assert steps[2].predicate is None


def test_connectives_are_consumed_without_conditions() -> None:
    steps = _parse("//button[@name='submit' and @enabled='true']")

    assert len(steps) == 1
    assert steps[0].conditions() == (
        AttributeCondition(name="name", value="submit", operator="="),
        AttributeCondition(name="enabled", value="true", operator="="),
    )


def test_or_connective_flattens_conditions_too() -> None:
    steps = _parse("item[@a='1' or @b='2']")
    assert [cond.name for cond in steps[0].conditions()] == ["a", "b"]


def test_unprefixed_comparison_becomes_attribute_condition() -> None:
    steps = _parse("//bookstore/book[price>35]/title")

    assert [step.node_test for step in steps] == ["bookstore", "book", "title"]
    assert steps[1].conditions() == (AttributeCondition(name="price", value="35", operator=">"),)


def test_unprefixed_comparison_keeps_raw_literal() -> None:
    steps = _parse("row[label='a\\'b']")
    assert steps[0].conditions() == (AttributeCondition(name="label", value="a\\'b", operator="="),)


def test_attribute_literal_is_unescaped() -> None:
    steps = _parse("input[@value='a\\'b']")
    assert steps[0].conditions() == (AttributeCondition(name="value", value="a'b", operator="="),)


def test_position_function_comparison_is_recorded_as_attribute() -> None:
    steps = _parse("//ul/li[position()<3]")
    assert steps[1].conditions() == (AttributeCondition(name="position()", value="3", operator="<"),)


def test_explicit_axis_is_kept() -> None:
    steps = _parse("/descendant::item/following-sibling::*")
    assert [(step.axis, step.node_test) for step in steps] == [
        ("descendant", "item"),
        ("following-sibling", "*"),
    ]
    assert steps[1].is_wildcard


def test_relative_step_is_not_absolute() -> None:
    steps = _parse("panel/button")
    assert [step.is_absolute for step in steps] == [False, True]


def test_separated_slashes_emit_descendant_or_self_step() -> None:
    steps = _parse("/ /div")
    assert steps[0] == Step(node_test="*", axis=DESCENDANT_OR_SELF, predicate=None, is_absolute=True)
    assert steps[1].node_test == "div"
    assert len(steps) == 2


def test_empty_predicate_has_no_conditions() -> None:
    steps = _parse("div[]")
    assert steps[0].predicate == Predicate(conditions=())


def test_namespace_token_prefixes_node_test() -> None:
    tokens = [Token("tag", "item", 0), Token("namespace", "ns", 4), Token("end", "", 6)]
    assert parse_tokens(tokens)[0].node_test == "ns:item"


def test_missing_end_marker_is_tolerated() -> None:
    steps = parse_tokens([Token("tag", "div", 0)])
    assert [step.node_test for step in steps] == ["div"]


def test_missing_node_test_after_axis_raises() -> None:
    with pytest.raises(PathParseError) as excinfo:
        _parse("/child::")
    assert excinfo.value.offset == 8
    assert "Expected tag or '*'" in str(excinfo.value)


def test_trailing_separator_raises() -> None:
    with pytest.raises(PathParseError):
        _parse("div/")


def test_missing_closing_bracket_raises() -> None:
    with pytest.raises(PathParseError) as excinfo:
        _parse("div[1")
    assert excinfo.value.offset == 5
    assert excinfo.value.reason == "Expected closing ']'"


def test_unexpected_literal_in_predicate_raises() -> None:
    with pytest.raises(PathParseError) as excinfo:
        _parse("div['x']")
    assert excinfo.value.offset == 4
    assert excinfo.value.reason == "Unexpected token in predicate"


def test_incomplete_attribute_test_raises_at_failing_token() -> None:
    with pytest.raises(PathParseError) as excinfo:
        _parse("div[@id]")
    assert excinfo.value.offset == 7


def test_stray_closing_bracket_raises() -> None:
    with pytest.raises(PathParseError):
        _parse("div]")
