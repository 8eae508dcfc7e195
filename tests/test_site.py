"""Tests for sitegraph.site module."""

from __future__ import annotations

import asyncio

import pytest

from sitegraph import site as site_module
from sitegraph.config import SiteCheckOptions
from sitegraph.document import LinkStatus, LoadedFile
from sitegraph.loader import AccessError
from sitegraph.site import (
    PipelineTimeoutError,
    SiteCheckResult,
    check_site,
    check_site_async,
    index_document,
)


class TestIndexDocument:
    def test_metadata_and_links(self):
        loaded = LoadedFile(
            path="courses/devops/ci.md",
            content="---\ntitle: CI/CD\n---\n# Ignored\n\n[next](cd.md)\n[bad](x.md\n",
        )
        document, warnings = index_document(loaded, SiteCheckOptions())
        assert document.title == "CI/CD"
        assert document.category == "courses"
        assert document.metadata["title_source"] == "front_matter"
        assert [(link.target, link.line) for link in document.links] == [("cd.md", 6)]
        assert document.links[0].status is LinkStatus.pending
        assert [(w.source, w.line) for w in warnings] == [("courses/devops/ci.md", 7)]


class TestSiteCheckResult:
    def test_defaults(self):
        result = SiteCheckResult()
        assert result.documents == []
        assert result.graph is None
        assert result.report is None


class TestCheckSiteAsync:
    @pytest.mark.asyncio
    async def test_orphan_scenario(self, sample_site):
        result = await check_site_async(sample_site)
        data = result.report.to_dict()
        assert data["documentCount"] == 4
        assert data["orphans"] == ["c.md"]
        assert data["brokenLinks"] == []
        assert data["externalLinks"] == 1
        assert result.report.ok

    @pytest.mark.asyncio
    async def test_missing_link_scenario(self, write_tree):
        root = write_tree({"index.md": "# Home\n\n[gone](missing.md)\n"})
        result = await check_site_async(root)
        assert result.report.to_dict()["brokenLinks"] == [
            {"source": "index.md", "target": "missing.md", "line": 3}
        ]
        assert not result.report.ok

    @pytest.mark.asyncio
    async def test_external_link_excluded_from_edges_and_broken(self, write_tree):
        root = write_tree({"index.md": "[ext](https://example.com)\n"})
        result = await check_site_async(root)
        assert result.report.broken_links == []
        assert result.graph.edges == {"index.md": ()}
        assert result.documents[0].links[0].status is LinkStatus.external

    @pytest.mark.asyncio
    async def test_relative_round_trip(self, write_tree):
        root = write_tree(
            {
                "index.md": "[b](a/b.md)\n",
                "a/b.md": "[y](../x/y.md)\n",
                "x/y.md": "# Y\n",
            }
        )
        result = await check_site_async(root)
        link = next(doc for doc in result.documents if doc.path == "a/b.md").links[0]
        assert link.resolved == "x/y.md"
        assert result.report.orphans == []

    @pytest.mark.asyncio
    async def test_skipped_and_warnings_reach_report(self, write_tree):
        root = write_tree({"index.md": "[a](a.md\n"})
        (root / "bin.md").write_bytes(b"\xff\xfe")
        data = (await check_site_async(root)).report.to_dict()
        assert data["skipped"][0]["path"] == "bin.md"
        assert data["warnings"] == [
            {"source": "index.md", "line": 1, "message": "unbalanced link syntax"}
        ]
        assert data["documentCount"] == 1

    @pytest.mark.asyncio
    async def test_custom_root_document(self, write_tree):
        root = write_tree({"README.md": "[a](a.md)\n", "a.md": "", "index.md": ""})
        options = SiteCheckOptions(root_document="README.md")
        result = await check_site_async(root, options=options)
        assert result.report.orphans == ["index.md"]

    @pytest.mark.asyncio
    async def test_dot_prefixed_root_document(self, write_tree):
        root = write_tree({"README.md": "[a](a.md)\n", "a.md": ""})
        options = SiteCheckOptions(root_document="./README.md")
        result = await check_site_async(root, options=options)
        assert result.report.orphans == []
        assert result.report.stats["root_found"] is True

    @pytest.mark.asyncio
    async def test_wrapped_link_label_reaches_target(self, write_tree):
        root = write_tree(
            {"index.md": "See the [installation\nguide](a.md).\n", "a.md": "# A\n"}
        )
        data = (await check_site_async(root)).report.to_dict()
        assert data["orphans"] == []
        assert data["warnings"] == []

    @pytest.mark.asyncio
    async def test_malformed_external_link_still_reports(self, write_tree):
        root = write_tree({"index.md": "[x](http://[oops)\n[y](https://example.com)\n"})
        data = (await check_site_async(root)).report.to_dict()
        assert data["externalLinks"] == 2
        assert data["externalDomains"] == {"example.com": 1}
        assert data["brokenLinks"] == []

    @pytest.mark.asyncio
    async def test_missing_root_document(self, write_tree):
        root = write_tree({"a.md": "", "b.md": ""})
        result = await check_site_async(root)
        assert result.report.orphans == ["a.md", "b.md"]
        assert result.report.stats["root_found"] is False

    @pytest.mark.asyncio
    async def test_unreadable_root(self, tmp_path):
        with pytest.raises(AccessError):
            await check_site_async(tmp_path / "absent")

    @pytest.mark.asyncio
    async def test_timeout_raises_without_report(self, sample_site, monkeypatch):
        async def slow_load(root, options):
            await asyncio.sleep(5)
            return []

        monkeypatch.setattr(site_module, "load_documents_async", slow_load)
        with pytest.raises(PipelineTimeoutError) as excinfo:
            await check_site_async(sample_site, timeout=0.05)
        assert isinstance(excinfo.value, TimeoutError)

    @pytest.mark.asyncio
    async def test_generous_timeout_completes(self, sample_site):
        result = await check_site_async(sample_site, timeout=30)
        assert result.report.orphans == ["c.md"]


class TestCheckSiteSync:
    def test_idempotent(self, write_tree):
        root = write_tree(
            {
                "index.md": "[a](a.md) [x](nope.md) [y](blog/)\n",
                "a.md": "[z](zzz.md)\n",
                "blog/index.md": "[home](../index.md)\n",
                "blog/draft.md": "",
                "old.md": "",
            }
        )
        first = check_site(root).report.to_dict()
        second = check_site(root).report.to_dict()
        assert first == second
        assert [link["target"] for link in first["brokenLinks"]] == ["zzz.md", "nope.md"]
        assert first["orphans"] == ["blog/draft.md", "old.md"]
