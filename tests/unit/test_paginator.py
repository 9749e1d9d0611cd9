"""
Tests for response pagination.
"""
import re

import pytest

from jester.services.paginator import paginate, split_text

MARKER = re.compile(r"\n\n📄 Часть (\d+) из (\d+)$")


def _strip_marker(text: str) -> str:
    return MARKER.sub("", text)


class TestPaginate:
    """Tests for paginate()."""

    def test_short_text_is_one_unmarked_chunk(self):
        chunks = paginate("Привет!")
        assert len(chunks) == 1
        assert chunks[0].text == "Привет!"
        assert chunks[0].is_last

    def test_exactly_at_limit_is_not_split(self):
        text = "a" * 4096
        chunks = paginate(text)
        assert len(chunks) == 1
        assert chunks[0].text == text

    def test_paragraphs_split_and_labelled(self):
        paragraph = "Слово " * 300
        text = "\n\n".join(paragraph.strip() for _ in range(10))
        chunks = paginate(text)

        assert len(chunks) > 1
        total = len(chunks)
        for i, chunk in enumerate(chunks, start=1):
            assert len(chunk.text) <= 4096
            match = MARKER.search(chunk.text)
            assert match is not None
            assert (int(match.group(1)), int(match.group(2))) == (i, total)
        assert chunks[-1].is_last
        assert not chunks[0].is_last

    def test_paragraph_boundaries_preserved(self):
        paragraphs = [f"Абзац {i}. " + "текст " * 200 for i in range(12)]
        text = "\n\n".join(p.strip() for p in paragraphs)
        chunks = paginate(text)

        rebuilt = "\n\n".join(_strip_marker(c.text) for c in chunks)
        assert rebuilt == text

    def test_long_paragraph_splits_on_sentences(self):
        sentences = [f"Предложение номер {i} заканчивается точкой." for i in range(400)]
        text = " ".join(sentences)
        chunks = paginate(text)

        assert len(chunks) > 1
        for chunk in chunks:
            body = _strip_marker(chunk.text)
            assert len(chunk.text) <= 4096
            assert body.endswith(".")

    def test_ten_thousand_characters_without_paragraphs(self):
        text = ("Это очень длинное предложение без точек " * 250)[:10000]
        chunks = paginate(text)

        assert len(chunks) >= 3
        for chunk in chunks:
            assert len(chunk.text) <= 4096
        words = " ".join(_strip_marker(c.text) for c in chunks).split()
        assert words == text.split()

    def test_unbroken_run_is_hard_cut(self):
        text = "x" * 9000
        chunks = paginate(text)
        assert "".join(_strip_marker(c.text) for c in chunks) == text
        assert all(len(c.text) <= 4096 for c in chunks)

    def test_custom_limit_and_margin(self):
        text = "one two three four five six seven eight nine ten"
        chunks = paginate(text, limit=20, margin=5)
        assert all(len(c.content) <= 15 for c in chunks)
        assert " ".join(c.content for c in chunks).split() == text.split()

    def test_margin_too_large(self):
        with pytest.raises(ValueError):
            paginate("x" * 50, limit=20, margin=20)


class TestSplitText:
    """Tests for split_text()."""

    def test_blank_paragraphs_dropped(self):
        assert split_text("a\n\n\n\n   \n\nb", limit=1) == ["a", "b"]

    def test_packs_paragraphs_greedily(self):
        assert split_text("aa\n\nbb\n\ncc", limit=6) == ["aa\n\nbb", "cc"]
