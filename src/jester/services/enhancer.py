"""Prompt enhancement: prefix a conversational template before asking the AI."""
from typing import Sequence, Tuple


class PromptEnhancer:
    """Ordered (phrase, template) table. The first phrase found wins."""

    def __init__(self, templates: Sequence[Tuple[str, str]]):
        self.templates = [(phrase.lower(), template) for phrase, template in templates]

    def enhance(self, text: str) -> str:
        lowered = text.lower()
        for phrase, template in self.templates:
            pos = lowered.find(phrase)
            if pos < 0:
                continue
            rest = text[pos + len(phrase):].strip()
            return template + (rest if rest else text)
        return text
