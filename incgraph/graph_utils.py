#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""Graph utilities for include graph analysis and export using NetworkX."""

import os
import json
import logging
from typing import Any, Dict, List, Optional

import networkx as nx
from networkx.drawing.nx_pydot import write_dot
from networkx.readwrite import json_graph

from .constants import SUPPORTED_GRAPH_FORMATS, ArgumentError
from .content_hash import is_translation_unit
from .index_store import IncludeIndex

logger = logging.getLogger(__name__)


def build_include_digraph(index: IncludeIndex, project_root: Optional[str] = None) -> "nx.DiGraph[Any]":
    """Build a NetworkX directed graph (includer -> included) from an index.

    Every hashed file and every edge endpoint becomes a node. Nodes carry a
    "kind" attribute ("source" or "header") and a "label" relative to
    project_root when one is given.

    Args:
        index: Include index
        project_root: Optional directory used to shorten node labels

    Returns:
        NetworkX DiGraph
    """
    G: nx.DiGraph[str] = nx.DiGraph()

    nodes = set(index.hashes)
    for src, targets in index.edges.items():
        nodes.add(src)
        nodes.update(targets)

    for node in sorted(nodes):
        label = os.path.relpath(node, project_root) if project_root and node.startswith(project_root) else node
        G.add_node(node, kind="source" if is_translation_unit(node) else "header", label=label)

    G.add_edges_from((src, dst) for src, targets in index.edges.items() for dst in targets)

    logger.debug("Built graph with %s nodes and %s edges", G.number_of_nodes(), G.number_of_edges())
    return G


def find_include_cycles(graph: "nx.DiGraph[Any]") -> List[List[str]]:
    """Find groups of files that include each other.

    Returns:
        Sorted list of sorted cycles: strongly connected components with more
        than one member, plus files that include themselves
    """
    cycles = [sorted(component) for component in nx.strongly_connected_components(graph) if len(component) > 1]
    cycles.extend([node] for node in nx.nodes_with_selfloops(graph))
    return sorted(cycles)


def _styled_copy(graph: "nx.DiGraph[Any]") -> "nx.DiGraph[Any]":
    """Copy graph with Graphviz attributes: sources as ellipses, headers as boxes."""
    styled: nx.DiGraph[str] = nx.DiGraph()
    styled.graph["graph"] = {"rankdir": "LR", "splines": "true", "concentrate": "true"}
    styled.graph["node"] = {"fontname": "Helvetica", "fontsize": "10", "style": "filled"}
    styled.graph["edge"] = {"arrowhead": "vee"}

    for node, attrs in graph.nodes(data=True):
        source = attrs.get("kind") == "source"
        styled.add_node(
            json.dumps(node),
            label=json.dumps(attrs.get("label", node)),
            shape="ellipse" if source else "box",
            fillcolor='"#e8f0fe"' if source else '"#fff7e6"',
        )
    styled.add_edges_from((json.dumps(src), json.dumps(dst)) for src, dst in graph.edges())
    return styled


def check_export_path(output_path: str) -> str:
    """Validate the export file extension.

    Returns:
        Lowercase extension of output_path

    Raises:
        ArgumentError: If the extension is not a supported graph format
    """
    ext = os.path.splitext(output_path)[1].lower()
    if ext not in SUPPORTED_GRAPH_FORMATS:
        raise ArgumentError(f"Unsupported graph format '{ext}'. Supported: {', '.join(SUPPORTED_GRAPH_FORMATS)}")
    return ext


def export_graph(graph: "nx.DiGraph[Any]", output_path: str) -> None:
    """Export graph to a file; the format is chosen by extension.

    Supported: .dot (Graphviz via pydot), .graphml, .gexf, .json (node-link).

    Raises:
        ArgumentError: If the extension is not a supported graph format
        OSError: If the file cannot be written
    """
    ext = check_export_path(output_path)

    if ext == ".dot":
        write_dot(_styled_copy(graph), output_path)
    elif ext == ".graphml":
        nx.write_graphml(graph, output_path)
    elif ext == ".gexf":
        nx.write_gexf(graph, output_path)
    else:
        data: Dict[str, Any] = json_graph.node_link_data(graph)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)

    logger.info("Exported graph to %s", output_path)
