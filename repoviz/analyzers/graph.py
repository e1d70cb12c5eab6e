"""Dependency graph assembly, cycle detection and manifest cross-checks."""

from __future__ import annotations

import posixpath
import sys
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Set, Tuple

from ..models import ManifestDeclarations
from .languages import classify
from .registry import get_support

_INDEX_STEMS = {"index", "__init__", "mod"}
_ALIAS_PREFIXES = ("@/", "~/")
_RUST_ANCHORS = {"crate", "self", "super"}

_NODE_BUILTINS = frozenset(
    {
        "assert",
        "buffer",
        "child_process",
        "cluster",
        "console",
        "crypto",
        "dgram",
        "dns",
        "events",
        "fs",
        "http",
        "https",
        "net",
        "os",
        "path",
        "querystring",
        "readline",
        "repl",
        "stream",
        "tls",
        "url",
        "util",
        "vm",
        "worker_threads",
        "zlib",
    }
)
_RUST_BUILTINS = frozenset({"std", "core", "alloc"}) | _RUST_ANCHORS

ECOSYSTEM_LANGUAGES = {
    "npm": {"javascript", "typescript"},
    "pypi": {"python"},
    "cargo": {"rust"},
}


class HasImports(Protocol):
    path: str
    imports: Iterable[str]


@dataclass(frozen=True)
class ModuleImports:
    """Minimal graph input: a file path and the identifiers it imports."""

    path: str
    imports: frozenset[str]
    language: Optional[str] = None


@dataclass(frozen=True)
class Edge:
    """One import statement; ``local`` edges point at another analysed file."""

    source: str
    target: str
    import_name: str
    local: bool
    weight: int = 1


@dataclass(frozen=True)
class DependencyGraph:
    """Directed multigraph of files and the external modules they import."""

    nodes: Tuple[str, ...]
    external_nodes: Tuple[str, ...]
    edges: Tuple[Edge, ...]
    node_languages: Mapping[str, Optional[str]] = field(default_factory=dict)

    def local_edges(self) -> Tuple[Edge, ...]:
        return tuple(edge for edge in self.edges if edge.local)

    def successors(self, node: str) -> Tuple[str, ...]:
        """Distinct local targets of ``node`` in discovery order."""
        seen: Dict[str, None] = {}
        for edge in self.edges:
            if edge.local and edge.source == node:
                seen.setdefault(edge.target, None)
        return tuple(seen)

    def fan_out(self, node: str) -> int:
        return sum(edge.weight for edge in self.edges if edge.source == node)

    def fan_in(self, node: str) -> int:
        return sum(edge.weight for edge in self.edges if edge.local and edge.target == node)

    def to_dict(self) -> Dict[str, object]:
        return {
            "nodes": [
                {
                    "id": node,
                    "type": "file",
                    "language": self.node_languages.get(node),
                    "fanIn": self.fan_in(node),
                    "fanOut": self.fan_out(node),
                }
                for node in self.nodes
            ]
            + [{"id": node, "type": "external"} for node in self.external_nodes],
            "edges": [
                {
                    "source": edge.source,
                    "target": edge.target,
                    "import": edge.import_name,
                    "local": edge.local,
                    "weight": edge.weight,
                }
                for edge in self.edges
            ],
        }


@dataclass(frozen=True)
class GraphMetrics:
    """Coupling and shape of the file-to-file part of the graph."""

    coupling: float
    components: int
    complexity: int


@dataclass(frozen=True)
class MissingDependency:
    """An external import with no matching manifest declaration."""

    name: str
    path: str


class _FileIndex:
    """Lookup table from extension-less paths to analysed files."""

    def __init__(self, paths: Sequence[str]) -> None:
        self._paths = tuple(paths)
        self._keys: Dict[str, str] = {}
        self._scoped: Dict[Tuple[str, ...], _FileIndex] = {}
        for path in self._paths:
            for key in _keys_for(path):
                self._keys.setdefault(key, path)

    def scoped(self, extensions: Tuple[str, ...]) -> "_FileIndex":
        """Index restricted to files with one of ``extensions``; empty means all."""
        if not extensions:
            return self
        scoped = self._scoped.get(extensions)
        if scoped is None:
            scoped = _FileIndex(
                [path for path in self._paths if posixpath.splitext(path)[1].lower() in extensions]
            )
            self._scoped[extensions] = scoped
        return scoped

    def exact(self, key: str) -> Optional[str]:
        return self._keys.get(key)

    def suffix(self, key: str) -> Optional[str]:
        if key in self._keys:
            return self._keys[key]
        tail = f"/{key}"
        for candidate, path in self._keys.items():
            if candidate.endswith(tail):
                return path
        return None


def _keys_for(path: str) -> List[str]:
    stem, _ = posixpath.splitext(path)
    keys = [path, stem]
    directory, name = posixpath.split(stem)
    if name in _INDEX_STEMS and directory:
        keys.append(directory)
    return keys


def _normalise(path: str) -> str:
    normalised = posixpath.normpath(path)
    return "" if normalised == "." else normalised


def _is_relative(name: str) -> bool:
    return name in {".", ".."} or name.startswith(("./", "../"))


def _resolve(name: str, importer: str, language: Optional[str], index: _FileIndex) -> Optional[str]:
    directory = posixpath.dirname(importer)
    support = get_support(language)
    if support is not None:
        index = index.scoped(support.extensions)
    if _is_relative(name):
        return index.exact(_normalise(posixpath.join(directory, name)))

    style = support.resolution if support is not None else "relative"

    if style == "python":
        return _resolve_python(name, directory, index)
    if style == "path":
        return (
            index.exact(_normalise(posixpath.join(directory, name)))
            or index.exact(_normalise(name))
            or index.exact(_normalise(posixpath.join("lib", name)))
        )
    if style == "qualified":
        return _resolve_qualified(name, language, index)
    if name.startswith(_ALIAS_PREFIXES):
        return index.exact(_normalise(posixpath.join("src", name[2:])))
    return None


def _resolve_python(name: str, directory: str, index: _FileIndex) -> Optional[str]:
    if name.startswith("."):
        dots = len(name) - len(name.lstrip("."))
        base = directory
        for _ in range(dots - 1):
            base = posixpath.dirname(base)
        rest = name[dots:].replace(".", "/")
        target = posixpath.join(base, rest) if rest else base
        return index.exact(_normalise(target)) if target else None

    relative = name.replace(".", "/")
    found = index.exact(relative) or index.exact(_normalise(posixpath.join(directory, relative)))
    if found is None and "/" in relative:
        found = index.suffix(relative)
    return found


def _resolve_qualified(name: str, language: Optional[str], index: _FileIndex) -> Optional[str]:
    if language == "rust":
        head = name.split("::{", 1)[0]
        segments = [part for part in head.split("::") if part and part not in _RUST_ANCHORS]
    else:
        segments = [part for part in name.split(".") if part and part != "*"]
    for size in range(len(segments), 0, -1):
        found = index.suffix("/".join(segments[:size]))
        if found is not None:
            return found
    return None


def build_graph(files: Iterable[HasImports]) -> DependencyGraph:
    """Build the dependency graph; unresolved imports target external nodes."""
    entries = list(files)
    nodes = tuple(dict.fromkeys(entry.path for entry in entries))
    languages: Dict[str, Optional[str]] = {}
    for entry in entries:
        languages.setdefault(entry.path, getattr(entry, "language", None) or classify(entry.path))
    index = _FileIndex(nodes)

    edges: List[Edge] = []
    external: Dict[str, None] = {}
    for entry in entries:
        language = languages[entry.path]
        for name in sorted(entry.imports):
            target = _resolve(name, entry.path, language, index)
            if target is not None:
                edges.append(Edge(source=entry.path, target=target, import_name=name, local=True))
            else:
                external.setdefault(name, None)
                edges.append(Edge(source=entry.path, target=name, import_name=name, local=False))

    return DependencyGraph(
        nodes=nodes,
        external_nodes=tuple(external),
        edges=tuple(edges),
        node_languages=languages,
    )


def _strongly_connected(nodes: Sequence[str], adjacency: Mapping[str, Sequence[str]]) -> Dict[str, int]:
    """Iterative Tarjan; returns a component id per node."""
    index_of: Dict[str, int] = {}
    lowlink: Dict[str, int] = {}
    on_stack: Set[str] = set()
    stack: List[str] = []
    component: Dict[str, int] = {}
    counter = 0

    for root in nodes:
        if root in index_of:
            continue
        work = [(root, iter(adjacency.get(root, ())))]
        index_of[root] = lowlink[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)
        while work:
            node, children = work[-1]
            pushed = False
            for child in children:
                if child not in index_of:
                    index_of[child] = lowlink[child] = counter
                    counter += 1
                    stack.append(child)
                    on_stack.add(child)
                    work.append((child, iter(adjacency.get(child, ()))))
                    pushed = True
                    break
                if child in on_stack:
                    lowlink[node] = min(lowlink[node], index_of[child])
            if pushed:
                continue
            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node])
            if lowlink[node] == index_of[node]:
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component[member] = index_of[node]
                    if member == node:
                        break
    return component


def find_cycles(graph: DependencyGraph, limit: Optional[int] = None) -> List[Tuple[str, ...]]:
    """Enumerate elementary cycles among local edges.

    Each cycle is reported once, rooted at its earliest node in input order, so
    the result order follows the input file order. A self-import is a cycle of
    length one.
    """
    order = {node: position for position, node in enumerate(graph.nodes)}
    adjacency = {node: graph.successors(node) for node in graph.nodes}
    component = _strongly_connected(graph.nodes, adjacency)
    cycles: List[Tuple[str, ...]] = []

    for start in graph.nodes:
        start_position = order[start]
        path = [start]
        on_path = {start}
        work = [iter(adjacency[start])]
        while work:
            advanced = False
            for successor in work[-1]:
                if successor == start:
                    cycles.append(tuple(path))
                    if limit is not None and len(cycles) >= limit:
                        return cycles
                    continue
                if (
                    successor in on_path
                    or order.get(successor, -1) <= start_position
                    or component.get(successor) != component.get(start)
                ):
                    continue
                path.append(successor)
                on_path.add(successor)
                work.append(iter(adjacency[successor]))
                advanced = True
                break
            if not advanced:
                work.pop()
                on_path.discard(path.pop())
    return cycles


def _matches(name: str, imported: str) -> bool:
    if imported == name:
        return True
    return any(imported.startswith(name + separator) for separator in ("/", ".", "::"))


def find_unused(declared: Iterable[str], files: Iterable[HasImports]) -> List[str]:
    """Return declared package names that no analysed file imports."""
    imported: Set[str] = set()
    for entry in files:
        imported.update(entry.imports)

    unused: List[str] = []
    for name in dict.fromkeys(declared):
        if not any(_matches(name, candidate) for candidate in imported):
            unused.append(name)
    return unused


def package_root(name: str) -> str:
    """Return the installable package an import identifier belongs to."""
    if name.startswith("node:"):
        return name
    if name.startswith("@"):
        return "/".join(name.split("/")[:2])
    for separator in ("::", "/", "."):
        if separator in name:
            return name.split(separator, 1)[0]
    return name


def _is_builtin(root: str, language: Optional[str]) -> bool:
    if language in {"javascript", "typescript"}:
        return root.startswith("node:") or root in _NODE_BUILTINS
    if language == "python":
        return root in sys.stdlib_module_names or root == "__future__"
    if language == "rust":
        return root in _RUST_BUILTINS
    return False


def find_missing(
    manifests: Sequence[ManifestDeclarations], graph: DependencyGraph
) -> List[MissingDependency]:
    """External imports whose package no manifest of the matching ecosystem declares."""
    declared: Dict[str, Set[str]] = {}
    for manifest in manifests:
        declared.setdefault(manifest.ecosystem, set()).update(manifest.names())

    checked_languages: Dict[str, Set[str]] = {}
    for ecosystem, names in declared.items():
        for language in ECOSYSTEM_LANGUAGES.get(ecosystem, ()):
            checked_languages.setdefault(language, set()).update(names)

    missing: Dict[Tuple[str, str], MissingDependency] = {}
    for edge in graph.edges:
        if edge.local or edge.import_name.startswith((".", "/")):
            continue
        language = graph.node_languages.get(edge.source)
        names = checked_languages.get(language or "")
        if names is None:
            continue
        root = package_root(edge.import_name)
        if root in names or _is_builtin(root, language):
            continue
        missing.setdefault((root, edge.source), MissingDependency(name=root, path=edge.source))
    return list(missing.values())


def graph_metrics(graph: DependencyGraph) -> GraphMetrics:
    """Average fan-out, weakly connected components and E - N + 2P."""
    if not graph.nodes:
        return GraphMetrics(coupling=0.0, components=0, complexity=0)

    coupling = sum(graph.fan_out(node) for node in graph.nodes) / len(graph.nodes)

    neighbours: Dict[str, Set[str]] = {node: set() for node in graph.nodes}
    local = graph.local_edges()
    for edge in local:
        neighbours[edge.source].add(edge.target)
        neighbours[edge.target].add(edge.source)

    seen: Set[str] = set()
    components = 0
    for node in graph.nodes:
        if node in seen:
            continue
        components += 1
        pending = [node]
        while pending:
            current = pending.pop()
            if current in seen:
                continue
            seen.add(current)
            pending.extend(neighbours[current] - seen)

    complexity = max(0, len(local) - len(graph.nodes) + 2 * components)
    return GraphMetrics(coupling=round(coupling, 2), components=components, complexity=complexity)


__all__ = [
    "ECOSYSTEM_LANGUAGES",
    "DependencyGraph",
    "Edge",
    "GraphMetrics",
    "HasImports",
    "MissingDependency",
    "ModuleImports",
    "build_graph",
    "find_cycles",
    "find_missing",
    "find_unused",
    "graph_metrics",
    "package_root",
]
