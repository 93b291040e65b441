from __future__ import annotations

import logging
import re
from typing import Sequence

from .classifier import Classifier, classify_tag
from .models import (
    AttributeCondition,
    Locator,
    MetadataValue,
    PositionCondition,
    Step,
)

logger = logging.getLogger(__name__)

WILDCARD_SUBSTITUTE = "any"
VISIBLE_FLAG = 1

_NON_ALNUM_RUN = re.compile(r"[^A-Za-z0-9]+")


def canonicalize(value: str) -> str:
    """Collapse every run of non-alphanumeric characters into one underscore
    and trim underscores from both ends. Letter case is kept as-is."""
    return _NON_ALNUM_RUN.sub("_", value).strip("_")


def uid_token(step: Step) -> str:
    return WILDCARD_SUBSTITUTE if step.is_wildcard else step.node_test


def build_uid(container_uid: str, step: Step, archetype: str) -> str:
    pieces = [uid_token(step), archetype]
    if container_uid:
        pieces.insert(0, container_uid)
    for condition in step.conditions():
        if isinstance(condition, AttributeCondition):
            pieces.extend((condition.name, condition.value))
    return canonicalize("_".join(pieces))


def build_metadata(step: Step, archetype: str) -> dict[str, MetadataValue]:
    metadata: dict[str, MetadataValue] = {"archetype": archetype}
    for condition in step.conditions():
        if isinstance(condition, AttributeCondition):
            metadata[condition.name] = condition.value
        elif isinstance(condition, PositionCondition):
            if condition.index > 1:
                metadata["occurrence"] = condition.index
        else:
            raise TypeError(f"Unsupported predicate condition: {condition!r}")
    metadata["visible"] = VISIBLE_FLAG
    return metadata


def convert_steps(steps: Sequence[Step], classifier: Classifier = classify_tag) -> list[Locator]:
    """Build one locator per step, chaining each to the one emitted before it."""
    locators: list[Locator] = []
    current_container = ""
    for step in steps:
        archetype = classifier(uid_token(step))
        uid = build_uid(current_container, step, archetype)
        locators.append(
            Locator(
                uid=uid,
                metadata=build_metadata(step, archetype),
                container_uid=current_container or None,
            )
        )
        current_container = uid
    logger.debug("Converted %d step(s) into locators", len(locators))
    return locators
