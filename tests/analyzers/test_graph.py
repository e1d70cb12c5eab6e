"""Tests for repoviz.analyzers.graph."""

from __future__ import annotations

import pytest

from repoviz.analyzers.graph import (
    MissingDependency,
    ModuleImports,
    build_graph,
    find_cycles,
    find_missing,
    find_unused,
    graph_metrics,
    package_root,
)
from repoviz.models import ManifestDeclarations


def _module(path: str, *imports: str) -> ModuleImports:
    return ModuleImports(path=path, imports=frozenset(imports))


def test_relative_import_becomes_local_edge() -> None:
    graph = build_graph([_module("a.js", "./b"), _module("b.js")])

    assert graph.nodes == ("a.js", "b.js")
    assert [(edge.source, edge.target, edge.local) for edge in graph.edges] == [("a.js", "b.js", True)]
    assert graph.external_nodes == ()
    assert find_cycles(graph) == []


def test_unresolved_imports_target_external_nodes() -> None:
    graph = build_graph([_module("src/app.js", "react", "./missing")])

    assert graph.external_nodes == ("./missing", "react")
    assert all(not edge.local for edge in graph.edges)
    assert graph.local_edges() == ()


def test_index_files_resolve_as_their_directory() -> None:
    graph = build_graph(
        [
            _module("src/app.js", "./utils", "@/components/Button"),
            _module("src/utils/index.js"),
            _module("src/components/Button.jsx"),
        ]
    )

    assert graph.successors("src/app.js") == ("src/utils/index.js", "src/components/Button.jsx")


def test_imports_only_resolve_to_files_of_the_same_language() -> None:
    graph = build_graph(
        [
            _module("src/util.py", "src.app"),
            _module("src/util.js"),
            _module("src/app.js", "./util"),
        ]
    )

    assert [(edge.source, edge.target) for edge in graph.local_edges()] == [
        ("src/app.js", "src/util.js")
    ]
    assert graph.external_nodes == ("src.app",)
    assert find_cycles(graph) == []


def test_typescript_may_import_javascript_siblings() -> None:
    graph = build_graph([_module("src/main.ts", "./legacy"), _module("src/legacy.js")])

    assert graph.successors("src/main.ts") == ("src/legacy.js",)


def test_python_dotted_and_relative_imports() -> None:
    graph = build_graph(
        [
            _module("pkg/__init__.py"),
            _module("pkg/core.py", "pkg.util", ".util", ".", "os"),
            _module("pkg/util.py"),
        ]
    )

    targets = {edge.import_name: edge.target for edge in graph.edges if edge.local}
    assert targets == {
        "pkg.util": "pkg/util.py",
        ".util": "pkg/util.py",
        ".": "pkg/__init__.py",
    }
    assert graph.external_nodes == ("os",)


def test_qualified_imports_resolve_by_path_suffix() -> None:
    graph = build_graph(
        [
            _module("src/main/java/com/acme/App.java", "com.acme.Util", "java.util.List"),
            _module("src/main/java/com/acme/Util.java"),
            _module("src/main.rs", "crate::config::Settings", "std::io"),
            _module("src/config.rs"),
        ]
    )

    local = {(edge.source, edge.target) for edge in graph.local_edges()}
    assert local == {
        ("src/main/java/com/acme/App.java", "src/main/java/com/acme/Util.java"),
        ("src/main.rs", "src/config.rs"),
    }
    assert set(graph.external_nodes) == {"java.util.List", "std::io"}


def test_path_languages_resolve_against_file_then_root() -> None:
    graph = build_graph(
        [
            _module("src/main.c", "util.h", "stdio.h"),
            _module("src/util.h"),
            _module("app.rb", "lib/helper"),
            _module("lib/helper.rb"),
        ]
    )

    local = {(edge.source, edge.target) for edge in graph.local_edges()}
    assert local == {("src/main.c", "src/util.h"), ("app.rb", "lib/helper.rb")}


def test_find_cycles_reports_each_cycle_once() -> None:
    graph = build_graph(
        [
            _module("a.js", "./b"),
            _module("b.js", "./c"),
            _module("c.js", "./a"),
            _module("d.js", "./d"),
        ]
    )

    assert find_cycles(graph) == [("a.js", "b.js", "c.js"), ("d.js",)]


def test_find_cycles_enumerates_cycles_through_a_shared_node() -> None:
    graph = build_graph(
        [
            _module("a.js", "./b", "./c"),
            _module("b.js", "./a"),
            _module("c.js", "./a"),
        ]
    )

    assert find_cycles(graph) == [("a.js", "b.js"), ("a.js", "c.js")]
    assert find_cycles(graph, limit=1) == [("a.js", "b.js")]


def test_find_cycles_ignores_external_edges() -> None:
    graph = build_graph([_module("a.js", "lodash"), _module("b.js", "lodash")])

    assert find_cycles(graph) == []


def test_find_unused_matches_names_and_subpaths() -> None:
    files = [
        _module("a.js", "react", "lodash/fp", "@scope/kit/button"),
        _module("b.rs", "serde::Serialize"),
    ]

    unused = find_unused(["react", "lodash", "unused-pkg", "@scope/kit", "serde", "react-dom"], files)

    assert unused == ["unused-pkg", "react-dom"]


def test_find_unused_requires_a_separator_after_the_name() -> None:
    assert find_unused(["react"], [_module("a.js", "react-dom")]) == ["react"]


def test_find_missing_skips_builtins_relatives_and_unchecked_ecosystems() -> None:
    graph = build_graph(
        [
            _module("src/a.js", "react", "lodash/fp", "fs", "node:path", "./b"),
            _module("src/b.js"),
            _module("tool.py", "requests", "os", "yaml"),
            _module("Main.java", "org.junit.Test"),
        ]
    )
    manifests = [
        ManifestDeclarations(path="package.json", ecosystem="npm", dependencies={"react": "^18"}),
        ManifestDeclarations(path="requirements.txt", ecosystem="pypi", dependencies={"requests": "*"}),
    ]

    assert find_missing(manifests, graph) == [
        MissingDependency(name="lodash", path="src/a.js"),
        MissingDependency(name="yaml", path="tool.py"),
    ]


def test_find_missing_without_manifests_reports_nothing() -> None:
    graph = build_graph([_module("a.js", "react")])

    assert find_missing([], graph) == []


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("lodash/fp", "lodash"),
        ("@scope/kit/button", "@scope/kit"),
        ("os.path", "os"),
        ("std::io", "std"),
        ("node:fs", "node:fs"),
        ("react", "react"),
    ],
)
def test_package_root(name: str, expected: str) -> None:
    assert package_root(name) == expected


def test_graph_metrics_coupling_components_and_complexity() -> None:
    graph = build_graph(
        [
            _module("a.js", "./b", "react"),
            _module("b.js", "./c"),
            _module("c.js"),
            _module("d.js"),
        ]
    )

    metrics = graph_metrics(graph)

    assert metrics.coupling == pytest.approx(0.75)
    assert metrics.components == 2
    assert metrics.complexity == 2
    assert graph.fan_in("b.js") == 1
    assert graph.fan_out("a.js") == 2


def test_graph_metrics_of_empty_graph() -> None:
    metrics = graph_metrics(build_graph([]))

    assert (metrics.coupling, metrics.components, metrics.complexity) == (0.0, 0, 0)


def test_graph_to_dict_lists_file_and_external_nodes() -> None:
    graph = build_graph([_module("a.js", "./b", "react"), _module("b.js")])

    payload = graph.to_dict()

    assert [(node["id"], node["type"]) for node in payload["nodes"]] == [
        ("a.js", "file"),
        ("b.js", "file"),
        ("react", "external"),
    ]
    assert payload["edges"][0] == {
        "source": "a.js",
        "target": "b.js",
        "import": "./b",
        "local": True,
        "weight": 1,
    }
