from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Sequence

from .classifier import Classifier, classify_tag
from .converter import convert_steps
from .lexer import tokenize
from .models import Locator, Step, Token
from .parser import parse_tokens
from .renderer import render_locators

logger = logging.getLogger(__name__)

TokenizeFn = Callable[[str], Sequence[Token]]
ParseFn = Callable[[Sequence[Token]], Sequence[Step]]
ConvertFn = Callable[[Sequence[Step]], Sequence[Locator]]
RenderFn = Callable[[Sequence[Locator]], Any]


@dataclass(frozen=True, slots=True)
class LocatorPipeline:
    """Text -> tokens -> steps -> locators -> rendered output.

    Each stage is a plain callable supplied at construction time, so any of
    them can be swapped out. The pipeline holds no per-call state; every call
    returns freshly built results.
    """

    tokenizer: TokenizeFn = tokenize
    parser: ParseFn = parse_tokens
    converter: ConvertFn = convert_steps
    renderer: RenderFn = render_locators

    def locators(self, path: str) -> list[Locator]:
        tokens = self.tokenizer(path)
        steps = self.parser(tokens)
        return list(self.converter(steps))

    def __call__(self, path: str) -> Any:
        locators = self.locators(path)
        logger.debug("Rendering %d locator(s) for %r", len(locators), path)
        return self.renderer(locators)


def default_pipeline(classifier: Classifier = classify_tag) -> LocatorPipeline:
    if classifier is classify_tag:
        return LocatorPipeline()
    return LocatorPipeline(converter=partial(convert_steps, classifier=classifier))


def path_to_locators(path: str, classifier: Classifier = classify_tag) -> list[Locator]:
    return default_pipeline(classifier).locators(path)


def translate_path(path: str, classifier: Classifier = classify_tag) -> str:
    return default_pipeline(classifier)(path)
