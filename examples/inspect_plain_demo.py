"""
Demonstrate the plain-text inspection utilities on a nested process graph.

Run with::

    python examples/inspect_plain_demo.py
"""

import networkx as nx

from formula_example import build_evi
from procgraph.inspect_utils import (
    print_process_node,
    print_process_tree,
    to_networkx,
    validate_process_graph,
)


def main() -> None:
    builder = build_evi()

    print("=== Process tree ===")
    print_process_tree(builder)

    print("\n=== Band reducer ===")
    print_process_node(builder, "reduc1")

    print("\n=== Execution order ===")
    graph = to_networkx(builder)
    print(" -> ".join(nx.topological_sort(graph)))

    problems = validate_process_graph(builder)
    print("\nvalid" if not problems else "\n".join(problems))


if __name__ == "__main__":
    main()
