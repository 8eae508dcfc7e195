"""Tests for sitegraph.document module."""

from sitegraph.document import (
    Document,
    LinkReference,
    LinkStatus,
    SkippedFile,
    SkippedFileWarning,
)


class TestLinkReference:
    def test_defaults(self):
        ref = LinkReference(target="a.md")
        assert ref.label == ""
        assert ref.line == 0
        assert ref.kind == "link"
        assert ref.status is LinkStatus.pending
        assert ref.resolved is None


class TestDocument:
    def test_optional_fields_defaults(self):
        doc = Document(path="a.md", content="", title="a", category="uncategorized")
        assert doc.metadata == {}
        assert doc.links == []

    def test_valid_targets_only_lists_resolved_valid_links(self):
        doc = Document(
            path="index.md",
            content="",
            title="Home",
            category="uncategorized",
            links=[
                LinkReference(target="a.md", status=LinkStatus.valid, resolved="a.md"),
                LinkReference(target="gone.md", status=LinkStatus.broken),
                LinkReference(target="https://x.org", status=LinkStatus.external),
                LinkReference(target="b", status=LinkStatus.valid, resolved="b.md"),
            ],
        )
        assert doc.valid_targets == ["a.md", "b.md"]


class TestWarningCategories:
    def test_skipped_file_as_warning(self):
        warning = SkippedFile(path="bin.md", reason="not valid UTF-8").to_warning()
        assert isinstance(warning, SkippedFileWarning)
        assert isinstance(warning, UserWarning)
        assert str(warning) == "Skipping bin.md: not valid UTF-8"

    def test_status_values_serialize_as_strings(self):
        assert LinkStatus.external.value == "external"
        assert LinkStatus("broken") is LinkStatus.broken
