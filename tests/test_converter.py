import pytest

from qtlocators.converter import build_uid, canonicalize, convert_steps
from qtlocators.lexer import tokenize
from qtlocators.models import AttributeCondition, Locator, PositionCondition, Predicate, Step
from qtlocators.parser import parse_tokens


def _convert(path: str) -> list[Locator]:
    return convert_steps(parse_tokens(tokenize(path)))


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("div_QWidget", "div_QWidget"),
        ("__a--b  c__", "a_b_c"),
        ("text()_TextFieldQT", "text_TextFieldQT"),
        ("***", ""),
        ("Ünïcode-Name", "n_code_Name"),
    ],
)
def test_canonicalize(raw: str, expected: str) -> None:
    assert canonicalize(raw) == expected


@pytest.mark.parametrize("raw", ["", "a", "_a_", "x//y[@z='1']", "already_clean", "  spaced  out  "])
def test_canonicalize_is_idempotent(raw: str) -> None:
    once = canonicalize(raw)
    assert canonicalize(once) == once


def test_header_span_text_locators() -> None:
    locators = _convert("//div[@class='header']/span[1]/text()")

    assert [locator.uid for locator in locators] == [
        "div_QWidget_class_header",
        "div_QWidget_class_header_span_QWidget",
        "div_QWidget_class_header_span_QWidget_text_TextFieldQT",
    ]
    assert locators[0].metadata == {"archetype": "QWidget", "class": "header", "visible": 1}
    assert "occurrence" not in locators[1].metadata
    assert locators[2].archetype == "TextFieldQT"


def test_container_chain_follows_emission_order() -> None:
    locators = _convert("//form/panel/okButton/label")

    assert locators[0].container_uid is None
    for previous, current in zip(locators, locators[1:]):
        assert current.container_uid == previous.uid


def test_multiple_attribute_conditions_feed_uid_and_metadata() -> None:
    locators = _convert("//button[@name='submit' and @enabled='true']")

    assert len(locators) == 1
    assert locators[0].uid == "button_PushButtonQT_name_submit_enabled_true"
    assert locators[0].metadata == {
        "archetype": "PushButtonQT",
        "name": "submit",
        "enabled": "true",
        "visible": 1,
    }


def test_occurrence_recorded_only_above_one() -> None:
    locators = _convert("list/item[3]/cell[0]")

    assert list(locators[1].metadata) == ["archetype", "occurrence", "visible"]
    assert locators[1].metadata["occurrence"] == 3
    assert "occurrence" not in locators[2].metadata
    assert locators[1].uid == "list_QWidget_item_QWidget"


def test_wildcard_uses_any_in_uid() -> None:
    locators = _convert("//*[@objectName='main']")
    assert locators[0].uid == "any_QWidget_objectName_main"
    assert "*" not in locators[0].uid


def test_unprefixed_comparison_lands_in_metadata() -> None:
    locators = _convert("//bookstore/book[price>35]/title")
    assert locators[1].metadata["price"] == "35"
    assert locators[1].uid == "bookstore_QWidget_book_QWidget_price_35"


def test_later_duplicate_attribute_overwrites_metadata_but_both_feed_uid() -> None:
    step = Step(
        node_test="field",
        predicate=Predicate(
            conditions=(
                AttributeCondition("text", "a"),
                AttributeCondition("text", "b"),
            )
        ),
    )
    locator = convert_steps([step])[0]
    assert locator.metadata["text"] == "b"
    assert locator.uid == "field_TextFieldQT_text_a_text_b"


def test_build_uid_with_and_without_container() -> None:
    step = Step(node_test="span", predicate=Predicate(conditions=(PositionCondition(2),)))
    assert build_uid("", step, "QWidget") == "span_QWidget"
    assert build_uid("root_QWidget", step, "QWidget") == "root_QWidget_span_QWidget"


def test_custom_classifier_is_used() -> None:
    steps = parse_tokens(tokenize("a/b"))
    locators = convert_steps(steps, classifier=lambda tag: f"{tag.upper()}Widget")
    assert [locator.archetype for locator in locators] == ["AWidget", "BWidget"]
    assert locators[1].uid == "a_AWidget_b_BWidget"


def test_conversion_is_deterministic() -> None:
    path = "//window/panel[@id='p1']/lineEdit[2]"
    first = _convert(path)
    second = _convert(path)
    assert first == second
    assert first is not second
    assert first[0].metadata is not second[0].metadata


def test_locator_count_matches_step_count() -> None:
    for path in ("a", "/ /a/b", "//a[1]/*/c[@x='y']", "x/y/z/w"):
        steps = parse_tokens(tokenize(path))
        assert len(convert_steps(steps)) == len(steps)


def test_locator_metadata_is_read_only() -> None:
    source = {"archetype": "QWidget", "visible": 1}
    locator = Locator(uid="a_QWidget", metadata=source)
    source["visible"] = 0

    assert locator.metadata["visible"] == 1
    with pytest.raises(TypeError):
        locator.metadata["visible"] = 0  # type: ignore[index]
    with pytest.raises(TypeError):
        _convert("//form")[0].metadata["extra"] = "x"  # type: ignore[index]
