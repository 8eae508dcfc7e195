from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from sitegraph import mcp_server
from sitegraph.loader import AccessError
from sitegraph.site import PipelineTimeoutError


def _tool(tool):
    # FastMCP 2.x wraps decorated functions in a FunctionTool.
    return getattr(tool, "fn", tool)


@pytest.mark.asyncio
async def test_check_site_json(sample_site) -> None:
    payload = json.loads(await _tool(mcp_server.check_site)(root=str(sample_site)))
    assert payload["orphans"] == ["c.md"]
    assert payload["brokenLinks"] == []
    assert "checked_at" in payload


@pytest.mark.asyncio
async def test_check_site_markdown(write_tree) -> None:
    root = write_tree({"index.md": "[x](missing.md)\n"})
    text = await _tool(mcp_server.check_site)(root=str(root), output_format="MARKDOWN")
    assert "## Broken links (1)" in text


@pytest.mark.asyncio
async def test_unknown_format_falls_back_to_json(sample_site) -> None:
    text = await _tool(mcp_server.check_site)(root=str(sample_site), output_format="xml")
    assert json.loads(text)["documentCount"] == 4


@pytest.mark.asyncio
async def test_check_site_forwards_options(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict = {}

    async def fake_check_site_async(root, *, options=None, timeout=None):
        captured["root"] = root
        captured["options"] = options
        captured["timeout"] = timeout
        report = SimpleNamespace(to_dict=lambda: {"documentCount": 0})
        return SimpleNamespace(report=report)

    import sitegraph

    monkeypatch.setattr(sitegraph, "check_site_async", fake_check_site_async)
    monkeypatch.delenv("SITEGRAPH_INDEX_NAME", raising=False)

    await _tool(mcp_server.check_site)(
        root="/docs", root_document="README.md", category_depth=2, timeout=3.0
    )

    assert captured["root"] == "/docs"
    assert captured["options"].root_path == "README.md"
    assert captured["options"].category_depth == 2
    assert captured["timeout"] == 3.0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error, prefix",
    [
        (AccessError("gone"), "Cannot read site"),
        (PipelineTimeoutError("slow"), "Timeout"),
    ],
)
async def test_check_site_errors_become_json(monkeypatch, error, prefix) -> None:
    async def failing(root, *, options=None, timeout=None):
        raise error

    import sitegraph

    monkeypatch.setattr(sitegraph, "check_site_async", failing)
    payload = json.loads(await _tool(mcp_server.check_site)(root="/docs"))
    assert payload["root"] == "/docs"
    assert payload["error"].startswith(prefix)


@pytest.mark.asyncio
async def test_table_of_contents(write_tree) -> None:
    root = write_tree(
        {
            "index.md": "# Home\n[k](courses/k8s.md)\n",
            "courses/k8s.md": "# Kubernetes\n",
            "blogs/post.md": "# Post\n",
        }
    )
    toc = json.loads(await _tool(mcp_server.table_of_contents)(root=str(root)))
    assert toc["courses"] == [{"path": "courses/k8s.md", "title": "Kubernetes", "depth": 1}]
    assert toc["blogs"][0]["depth"] is None
