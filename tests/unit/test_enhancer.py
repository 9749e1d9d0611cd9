"""
Tests for the prompt enhancer.
"""
import pytest

from jester.services.enhancer import PromptEnhancer


@pytest.fixture
def enhancer(content):
    return PromptEnhancer(content.ai_templates)


class TestPromptEnhancer:
    """Tests for PromptEnhancer.enhance()."""

    def test_phrase_with_rest(self, enhancer):
        assert enhancer.enhance("Что такое квант?") == "Что такое квант?"

    def test_greeting(self, enhancer):
        assert enhancer.enhance("привет как дела") == "Привет! Меня зовут AI Bot. Расскажи мне: как дела"

    def test_phrase_without_rest_keeps_full_text(self, enhancer):
        assert enhancer.enhance("Привет") == "Привет! Меня зовут AI Bot. Расскажи мне: Привет"

    def test_no_phrase_unchanged(self, enhancer):
        assert enhancer.enhance("Сколько будет 2+2?") == "Сколько будет 2+2?"

    def test_first_phrase_in_table_wins(self, enhancer):
        # "what is" comes before "difference" in the table
        result = enhancer.enhance("difference: what is it")
        assert result == "What is it"

    def test_case_insensitive(self):
        enhancer = PromptEnhancer([("HELLO", "Hi: ")])
        assert enhancer.enhance("hello world") == "Hi: world"
