from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal

RuleKind = Literal["exact", "suffix", "contains"]
Classifier = Callable[[str], str]

DEFAULT_ARCHETYPE = "QWidget"


@dataclass(frozen=True, slots=True)
class ClassificationRule:
    kind: RuleKind
    fragment: str
    label: str

    def matches(self, lowered_tag: str) -> bool:
        if self.kind == "exact":
            return lowered_tag == self.fragment
        if self.kind == "suffix":
            return lowered_tag.endswith(self.fragment)
        return self.fragment in lowered_tag

    def describe(self) -> str:
        return f"{self.kind}:{self.fragment}"


# Order matters: rule domains overlap and the first match wins.
CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule("exact", "button", "PushButtonQT"),
    ClassificationRule("exact", "container", "ScrollViewQT"),
    ClassificationRule("exact", "form", "ModuleQT"),
    ClassificationRule("exact", "textfield", "TextFieldQT"),
    ClassificationRule("suffix", "button", "PushButtonQT"),
    ClassificationRule("suffix", "checkbox", "CheckBoxQT"),
    ClassificationRule("suffix", "radiobutton", "RadioButtonQT"),
    ClassificationRule("suffix", "combobox", "ComboBoxQT"),
    ClassificationRule("suffix", "slider", "SliderQT"),
    ClassificationRule("suffix", "label", "LabelQT"),
    ClassificationRule("suffix", "view", "ScrollViewQT"),
    ClassificationRule("suffix", "field", "TextFieldQT"),
    ClassificationRule("contains", "button", "PushButtonQT"),
    ClassificationRule("contains", "field", "TextFieldQT"),
    ClassificationRule("contains", "text", "TextFieldQT"),
    ClassificationRule("contains", "container", "ScrollViewQT"),
    ClassificationRule("contains", "panel", "ScrollViewQT"),
    ClassificationRule("contains", "form", "ModuleQT"),
)


def matching_rule(
    tag: str,
    rules: tuple[ClassificationRule, ...] = CLASSIFICATION_RULES,
) -> ClassificationRule | None:
    lowered = tag.lower()
    for rule in rules:
        if rule.matches(lowered):
            return rule
    return None


def classify_tag(tag: str) -> str:
    rule = matching_rule(tag)
    return rule.label if rule is not None else DEFAULT_ARCHETYPE
