from __future__ import annotations

import json
from typing import Any, Iterable

from .models import Locator

DEFAULT_INDENT = 4
_CLOSING = "\n}"


def render_locator(locator: Locator, indent: int = DEFAULT_INDENT) -> str:
    """Render ``<uid> = {...}`` with a trailing bare ``container`` reference."""
    body = json.dumps(dict(locator.metadata), indent=indent, ensure_ascii=False)
    if locator.container_uid:
        container_line = f'{" " * indent}"container": {locator.container_uid}'
        if locator.metadata:
            body = f"{body.removesuffix(_CLOSING)},\n{container_line}{_CLOSING}"
        else:
            body = f"{{\n{container_line}\n}}"
    return f"{locator.uid} = {body}\n"


def render_locators(locators: Iterable[Locator], indent: int = DEFAULT_INDENT) -> str:
    return "".join(render_locator(locator, indent=indent) for locator in locators)


def locators_to_payload(locators: Iterable[Locator]) -> list[dict[str, Any]]:
    return [
        {
            "uid": locator.uid,
            "metadata": dict(locator.metadata),
            "container": locator.container_uid,
        }
        for locator in locators
    ]
