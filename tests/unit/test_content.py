"""
Tests for the content table loader.
"""
import pytest

from jester.core.content import ContentError, load_content, parse_content


def _minimal(**overrides):
    data = {
        "triggers": {
            "game": ["lucky"],
            "joke": ["анекдот"],
            "weather": ["погода"],
            "horoscope": ["гороскоп"],
        },
        "reactions": [{"key": "bot", "words": ["бот"], "response": "🤖"}],
        "zodiac": [{"sign": "овен", "api_name": "aries", "emoji": "♈", "fallback": "Звёзды молчат."}],
        "fallback_jokes": ["Запасной анекдот."],
        "ai_templates": [{"phrase": "Привет", "template": "Привет! "}],
    }
    data.update(overrides)
    return data


class TestBundledContent:
    """The content table shipped with the package."""

    def test_loads(self, content):
        assert len(content.zodiac) == 12
        assert [r.key for r in content.reactions] == ["bot", "popi", "jabi", "java", "go"]
        assert len(content.fallback_jokes) >= 1

    def test_trigger_words(self, content):
        assert "анекдот" in content.trigger_words("joke")
        assert "погода" in content.trigger_words("weather")
        assert "lucky" in content.trigger_words("game")
        assert "гороскоп" in content.trigger_words("horoscope")
        assert content.trigger_words("missing") == frozenset()

    def test_every_trigger_is_a_single_lowercase_token(self, content):
        from jester.core.text import normalize

        words = set()
        for category in ("game", "joke", "weather", "horoscope"):
            words |= content.trigger_words(category)
        for reaction in content.reactions:
            words |= reaction.words
        for word in words:
            assert normalize(word) == [word]

    def test_zodiac_lookup(self, content):
        aries = content.zodiac_sign("овен")
        assert aries.api_name == "aries"
        assert aries.title == "Овен"
        assert content.zodiac_sign("дракон") is None

    def test_ai_templates_ordered(self, content):
        phrases = [phrase for phrase, _ in content.ai_templates]
        assert phrases[:2] == ["что такое", "what is"]


class TestParseContent:
    """Validation of raw content data."""

    def test_minimal(self):
        table = parse_content(_minimal())
        assert table.zodiac_signs == ["овен"]
        assert table.ai_templates == (("привет", "Привет! "),)

    def test_overlapping_triggers_rejected(self):
        data = _minimal(reactions=[{"key": "bot", "words": ["бот", "анекдот"], "response": "🤖"}])
        with pytest.raises(ContentError, match="анекдот"):
            parse_content(data)

    def test_sign_overlapping_trigger_rejected(self):
        data = _minimal(triggers={"game": ["овен"], "joke": [], "weather": [], "horoscope": []})
        with pytest.raises(ContentError):
            parse_content(data)

    def test_words_must_be_a_list(self):
        data = _minimal(triggers={"game": "lucky"})
        with pytest.raises(ContentError):
            parse_content(data)

    def test_zodiac_required(self):
        with pytest.raises(ContentError):
            parse_content(_minimal(zodiac=[]))

    def test_fallback_jokes_required(self):
        with pytest.raises(ContentError):
            parse_content(_minimal(fallback_jokes=[]))

    def test_not_a_mapping(self):
        with pytest.raises(ContentError):
            parse_content(["not", "a", "mapping"])

    def test_load_from_file(self, tmp_path):
        import yaml

        path = tmp_path / "content.yml"
        path.write_text(yaml.safe_dump(_minimal(), allow_unicode=True), encoding="utf-8")
        table = load_content(path)
        assert table.trigger_words("joke") == frozenset({"анекдот"})
