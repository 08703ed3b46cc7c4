"""
Tests for the incremental idea stream parser.
"""

import json

import pytest

from bigtoy.stream_parser import IdeaStreamParser, iter_batches, normalize_ideas, parse_line


def sources(batch):
    return [idea.source for idea in batch]


def feed_in_chunks(document: bytes, size: int):
    parser = IdeaStreamParser()
    for start in range(0, len(document), size):
        parser.feed(document[start:start + size])
    parser.close()
    return parser.batch


class TestParseLine:
    """Tests for single-line parsing and normalization."""

    def test_single_document(self, line):
        """A complete document yields every idea."""
        batch = parse_line(line("A", "B"))

        assert sources(batch) == ["A source", "B source"]

    def test_fields_are_trimmed(self, idea):
        """Whitespace around every field is removed."""
        raw = {key: f"  {value}\n" for key, value in idea("A").items()}

        batch = parse_line(json.dumps({"ideas": [raw]}))

        assert batch[0].source == "A source"
        assert batch[0].target_audience == "A target audience"

    def test_truncated_to_five_in_order(self, line):
        """More than five ideas are capped at five, keeping the first ones."""
        batch = parse_line(line("A", "B", "C", "D", "E", "F", "G"))

        assert sources(batch) == ["A source", "B source", "C source", "D source", "E source"]

    def test_partial_trailing_element_withheld(self, idea):
        """An element still being written is not rendered."""
        partial = {"source": "B source", "strategy": "B strat"}
        batch = parse_line(json.dumps({"ideas": [idea("A"), partial]}))

        assert sources(batch) == ["A source"]

    def test_blank_fields_not_renderable(self, idea):
        """A field that is empty after trimming makes the element unrenderable."""
        blank = dict(idea("B"), marketing="   ")
        batch = parse_line(json.dumps({"ideas": [idea("A"), blank, idea("C")]}))

        assert sources(batch) == ["A source", "C source"]

    def test_non_string_field_not_renderable(self, idea):
        """Fields must be text."""
        batch = parse_line(json.dumps({"ideas": [dict(idea("A"), strategy=42)]}))

        assert batch == ()

    @pytest.mark.parametrize("text", [
        "",
        "   ",
        '{"ideas": [{"source": "A"',
        "[1, 2, 3]",
        '"just text"',
        '{"ideas": "not a list"}',
        '{"status": "success"}',
    ])
    def test_unusable_lines_are_skipped(self, text):
        """Blank, truncated or wrongly shaped lines produce nothing."""
        assert parse_line(text) is None

    def test_normalize_ignores_non_objects(self, idea):
        batch = normalize_ideas([None, "x", 3, idea("A")])

        assert sources(batch) == ["A source"]


class TestIdeaStreamParser:
    """Tests for chunked feeding."""

    def test_single_line_stream(self, line):
        """One line followed by end of input gives one batch."""
        parser = IdeaStreamParser()

        updates = parser.feed(line("A").encode())
        assert parser.close() == []

        assert len(updates) == 1
        assert sources(parser.batch) == ["A source"]

    def test_two_lines_give_two_updates_in_order(self, line):
        """Cumulative lines replace the batch one after another."""
        parser = IdeaStreamParser()

        updates = parser.feed((line("A") + line("A", "B")).encode())

        assert [len(batch) for batch in updates] == [1, 2]
        assert sources(parser.batch) == ["A source", "B source"]

    def test_incomplete_line_kept_until_newline(self, line):
        """Nothing is parsed until the record separator arrives."""
        parser = IdeaStreamParser()
        text = line("A")

        assert parser.feed(text[:-1]) == []
        assert parser.pending == text[:-1]
        assert len(parser.feed("\n")) == 1
        assert parser.pending == ""

    def test_trailing_segment_parsed_on_close(self, line):
        """A single document without a final newline is still used."""
        parser = IdeaStreamParser()

        assert parser.feed(line("A").rstrip("\n")) == []
        updates = parser.close()

        assert len(updates) == 1
        assert sources(parser.batch) == ["A source"]

    def test_duplicate_line_is_a_no_op(self, line):
        """Feeding the same line twice does not duplicate or shift ideas."""
        parser = IdeaStreamParser()

        first = parser.feed(line("A", "B"))
        second = parser.feed(line("A", "B"))

        assert len(first) == 1
        assert second == []
        assert sources(parser.batch) == ["A source", "B source"]

    def test_malformed_line_between_valid_lines(self, line):
        """A truncated line is skipped and the next valid line still applies."""
        parser = IdeaStreamParser()
        stream = line("A") + '{"ideas": [{"source": "A source", "strat\n' + line("A", "B")

        updates = parser.feed(stream)

        assert [len(batch) for batch in updates] == [1, 2]
        assert sources(parser.batch) == ["A source", "B source"]

    def test_later_parse_replaces_earlier(self, line):
        """Each line fully replaces the previous batch, even when shorter."""
        parser = IdeaStreamParser()

        parser.feed(line("A", "B") + line("C"))

        assert sources(parser.batch) == ["C source"]

    def test_empty_line_does_not_retract_ideas(self, line):
        """A valid line with no renderable ideas leaves the shown batch in place."""
        parser = IdeaStreamParser()

        updates = parser.feed(line("A", "B") + '{"ideas": []}\n' + '{"ideas": [{"source": "C"}]}\n')

        assert [len(batch) for batch in updates] == [2]
        assert sources(parser.batch) == ["A source", "B source"]

    def test_crlf_line_endings(self, line):
        parser = IdeaStreamParser()

        parser.feed(line("A").replace("\n", "\r\n") + line("A", "B").replace("\n", "\r\n"))

        assert len(parser.batch) == 2

    def test_chunk_boundaries_do_not_change_result(self, line):
        """Splitting the bytes anywhere, even inside a character, gives the same batch."""
        document = (
            line("A")
            + '{"ideas": [{"source": "broken'
            + "\n"
            + line("A", "灵感")
            + line("A", "灵感", "C").rstrip("\n")
        ).encode("utf-8")

        expected = feed_in_chunks(document, len(document))

        assert sources(expected) == ["A source", "灵感 source", "C source"]
        for size in range(1, 40):
            assert feed_in_chunks(document, size) == expected

    def test_feed_after_close_raises(self, line):
        parser = IdeaStreamParser()
        parser.close()

        with pytest.raises(ValueError):
            parser.feed(line("A"))

    def test_close_is_idempotent(self, line):
        parser = IdeaStreamParser()
        parser.feed(line("A").rstrip("\n"))

        assert len(parser.close()) == 1
        assert parser.close() == []


class TestIterBatches:
    """Tests for the transport-free generator."""

    def test_yields_each_new_batch(self, line):
        chunks = [line("A")[:10].encode(), (line("A")[10:] + line("A", "B")).encode()]

        batches = list(iter_batches(chunks))

        assert [len(batch) for batch in batches] == [1, 2]

    def test_nothing_renderable(self):
        batches = list(iter_batches([b'{"ideas": []}\n', b"oops\n"]))

        assert batches == []


if __name__ == "__main__":
    # This allows running the tests directly with python
    import sys
    sys.exit(pytest.main(["-v", __file__]))
