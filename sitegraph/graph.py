"""Navigation graph over resolved documents."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from .document import Document

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Component:
    """Weakly connected group of documents."""

    nodes: Tuple[str, ...]
    has_cycle: bool


@dataclass(frozen=True)
class SiteGraph:
    """Documents as nodes, valid links as directed edges."""

    nodes: Tuple[str, ...]
    edges: Mapping[str, Tuple[str, ...]]
    root: str
    orphans: Tuple[str, ...] = ()
    depths: Mapping[str, int] = field(default_factory=dict)
    components: Tuple[Component, ...] = ()

    @property
    def has_root(self) -> bool:
        return self.root in self.depths

    @property
    def edge_count(self) -> int:
        return sum(len(targets) for targets in self.edges.values())

    @property
    def has_cycle(self) -> bool:
        return any(component.has_cycle for component in self.components)

    def successors(self, path: str) -> Tuple[str, ...]:
        return self.edges.get(path, ())


def build_edges(documents: Iterable[Document]) -> Dict[str, Tuple[str, ...]]:
    """
    Build the adjacency map from valid links.

    Self links and links to unknown paths are left out, so every edge
    target is a node of the graph.
    """
    documents = list(documents)
    nodes = {document.path for document in documents}
    edges: Dict[str, Tuple[str, ...]] = {}
    for document in documents:
        targets = {
            target
            for target in document.valid_targets
            if target != document.path and target in nodes
        }
        edges[document.path] = tuple(sorted(targets))
    return edges


def reachable_depths(edges: Mapping[str, Sequence[str]], root: str) -> Dict[str, int]:
    """Breadth-first distances from ``root``; empty when root is not a node."""
    if root not in edges:
        return {}
    depths = {root: 0}
    queue = deque([root])
    while queue:
        current = queue.popleft()
        for target in edges.get(current, ()):
            if target not in depths:
                depths[target] = depths[current] + 1
                queue.append(target)
    return depths


def connected_components(edges: Mapping[str, Sequence[str]]) -> List[Tuple[str, ...]]:
    """Weakly connected components, each sorted, ordered by first node."""
    undirected: Dict[str, Set[str]] = {node: set() for node in edges}
    for source, targets in edges.items():
        for target in targets:
            undirected[source].add(target)
            undirected.setdefault(target, set()).add(source)

    seen: Set[str] = set()
    components: List[Tuple[str, ...]] = []
    for start in sorted(undirected):
        if start in seen:
            continue
        members = []
        queue = deque([start])
        seen.add(start)
        while queue:
            current = queue.popleft()
            members.append(current)
            for neighbour in sorted(undirected[current]):
                if neighbour not in seen:
                    seen.add(neighbour)
                    queue.append(neighbour)
        components.append(tuple(sorted(members)))
    return components


def has_cycle(edges: Mapping[str, Sequence[str]], nodes: Iterable[str]) -> bool:
    """Return True when the directed subgraph on ``nodes`` contains a cycle."""
    members = set(nodes)
    # 0 = unvisited, 1 = on the current path, 2 = finished
    state: Dict[str, int] = {node: 0 for node in members}
    for start in sorted(members):
        if state[start]:
            continue
        state[start] = 1
        stack = [(start, iter(edges.get(start, ())))]
        while stack:
            node, children = stack[-1]
            advanced = False
            for child in children:
                if child not in members:
                    continue
                if state[child] == 1:
                    return True
                if state[child] == 0:
                    state[child] = 1
                    stack.append((child, iter(edges.get(child, ()))))
                    advanced = True
                    break
            if not advanced:
                state[node] = 2
                stack.pop()
    return False


def build_site_graph(documents: Iterable[Document], root: str) -> SiteGraph:
    """
    Assemble the site graph and its derived views.

    Args:
        documents: Every document of the run, links already resolved.
        root: Path of the document navigation starts from.

    Returns:
        SiteGraph with orphans (sorted), BFS depths and components.
        If ``root`` is not a document, every document is an orphan.
    """
    edges = build_edges(documents)
    nodes = tuple(sorted(edges))
    depths = reachable_depths(edges, root)
    if not depths:
        LOGGER.warning("Root document %s not found; every document is an orphan", root)
    orphans = tuple(node for node in nodes if node not in depths)
    components = tuple(
        Component(nodes=members, has_cycle=has_cycle(edges, members))
        for members in connected_components(edges)
    )
    LOGGER.debug(
        "Built site graph: %d nodes, %d edges, %d orphans",
        len(nodes),
        sum(len(targets) for targets in edges.values()),
        len(orphans),
    )
    return SiteGraph(
        nodes=nodes,
        edges=edges,
        root=root,
        orphans=orphans,
        depths=depths,
        components=components,
    )


def table_of_contents(
    graph: SiteGraph, documents: Iterable[Document]
) -> Dict[str, List[Dict[str, Optional[object]]]]:
    """Group documents by category, ordered by category then path."""
    toc: Dict[str, List[Dict[str, Optional[object]]]] = {}
    for document in sorted(documents, key=lambda doc: (doc.category, doc.path)):
        toc.setdefault(document.category, []).append(
            {
                "path": document.path,
                "title": document.title,
                "depth": graph.depths.get(document.path),
            }
        )
    return toc
