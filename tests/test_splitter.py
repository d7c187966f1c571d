"""Unit tests for the boundary-aware text splitter."""

from docgraph.rag.loaders import LoadedDocument
from docgraph.rag.splitter import TextSplitter


class TestSplitterConfiguration:
    """Constructor normalisation."""

    def test_non_positive_size_falls_back_to_default(self):
        splitter = TextSplitter(chunk_size=0, chunk_overlap=-5)

        assert splitter.chunk_size == 1000
        assert splitter.chunk_overlap == 0

    def test_overlap_not_smaller_than_size_is_reduced(self):
        splitter = TextSplitter(chunk_size=100, chunk_overlap=100)

        assert splitter.chunk_overlap == 25


class TestSplitText:
    """Raw window boundaries."""

    def test_empty_text(self):
        assert TextSplitter(10, 0).split_text("") == []

    def test_short_text_is_one_window(self):
        assert TextSplitter(100, 10).split_text("short text") == ["short text"]

    def test_prefers_sentence_boundary(self):
        pieces = TextSplitter(20, 0).split_text("One two. Three four five six")

        assert pieces == ["One two.", " Three four five six"]

    def test_falls_back_to_whitespace(self):
        pieces = TextSplitter(10, 0).split_text("alpha beta gamma")

        assert pieces == ["alpha", " beta", " gamma"]

    def test_hard_cut_with_overlap(self):
        pieces = TextSplitter(10, 2).split_text("abcdefghijklmnopqrstuvwxy")

        assert pieces == ["abcdefghij", "ijklmnopqr", "qrstuvwxy"]

    def test_always_makes_progress_when_overlap_exceeds_window(self):
        """A short sentence window must not rewind the cursor."""
        text = "a. " + "b" * 20
        pieces = TextSplitter(10, 5).split_text(text)

        assert pieces[0] == "a."
        assert all(len(piece) <= 10 for piece in pieces)
        assert pieces[-1].endswith("b")
        assert len(pieces) < len(text)

    def test_windows_cover_the_text(self):
        text = "Sentence one is here. Sentence two follows it!\nAnd a third line without end " * 5
        splitter = TextSplitter(50, 0)

        assert "".join(splitter.split_text(text)) == text


class TestSplitDocuments:
    """Chunk metadata and numbering."""

    def test_whitespace_only_document_produces_no_chunks(self):
        assert TextSplitter(10, 0).transform(LoadedDocument(content="   ")) == []

    def test_chunks_are_stripped_and_annotated(self):
        document = LoadedDocument(content="alpha beta gamma", metadata={"source": "a.txt"})

        chunks = TextSplitter(10, 0).transform(document)

        assert [c.content for c in chunks] == ["alpha", "beta", "gamma"]
        assert chunks[1].metadata == {"source": "a.txt", "chunk_index": 1, "chunk_size": 4}
        assert document.metadata == {"source": "a.txt"}

    def test_indices_run_across_documents(self):
        documents = [
            LoadedDocument(content="alpha beta gamma", metadata={"source": "a.txt"}),
            LoadedDocument(content="delta", metadata={"source": "b.txt"}),
        ]

        chunks = TextSplitter(10, 0).split_documents(documents)

        assert [c.metadata["chunk_index"] for c in chunks] == [0, 1, 2, 3]
        assert chunks[3].metadata["source"] == "b.txt"


class TestSplitterSizes:
    """Window counts for fixed-size inputs."""

    def test_exact_size_is_one_chunk(self):
        assert len(TextSplitter(1000, 200).split_text("x" * 1000)) == 1

    def test_thousand_chars_at_four_hundred(self):
        text = ("word " * 200)[:1000]

        pieces = TextSplitter(400, 50).split_text(text)

        assert len(pieces) >= 3
        assert all(len(piece) <= 400 for piece in pieces)

    def test_sentence_lookback_reaches_hundred_characters(self):
        text = "x" * 100 + "." + "y" * 300

        assert TextSplitter(200, 0).split_text(text)[0] == "x" * 100 + "."

    def test_whitespace_lookback_reaches_fifty_characters(self):
        text = "x" * 150 + " " + "y" * 300

        assert TextSplitter(200, 0).split_text(text)[0] == "x" * 150

    def test_boundary_beyond_lookback_is_a_hard_cut(self):
        text = "x" * 149 + " " + "y" * 300

        assert TextSplitter(200, 0).split_text(text)[0] == text[:200]
