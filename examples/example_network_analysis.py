#!/usr/bin/env python3
"""
Basic Network Analysis Example

This example walks through the usual socnetkit workflow on a small
organisation with two relations (advice and friendship):

1. Build a multiplex store from an edge list
2. Query distances and connectivity per relation
3. Compare centrality indices
4. Inspect cohesion (clustering coefficient, triad census)
5. Cluster actors by their distance profiles
6. Compute a layout and export the results

Run it after installing the package (``pip install -e .``).
"""

from pathlib import Path

import polars as pl

from socnetkit import Canvas, NetworkAnalyzer, setup_logging
from socnetkit.network import (
    build_store_from_edgelist,
    compare_centrality_indices,
    get_centrality_summary,
    get_store_info,
    identify_central_vertices,
    store_to_edgelist
)


def load_edges() -> pl.DataFrame:
    advice = [(1, 2), (1, 3), (2, 3), (3, 4), (4, 5), (5, 6), (5, 7), (6, 7), (7, 8), (8, 9)]
    friendship = [(2, 1), (4, 3), (7, 5), (9, 8), (6, 5)]
    rows = [(s, t, "advice") for s, t in advice] + [(s, t, "friendship") for s, t in friendship]
    return pl.DataFrame(
        rows,
        schema={"source": pl.Int64, "target": pl.Int64, "relation": pl.Utf8},
        orient="row"
    )


def main():
    """Main function demonstrating the analysis workflow."""
    setup_logging(level="WARNING")

    print("=" * 60)
    print("Basic Network Analysis Example")
    print("=" * 60)

    # Step 1: Build the store
    print("\n1. Building the Multiplex Store")
    print("-" * 40)

    edges = load_edges()
    store = build_store_from_edgelist(edges, relation_col="relation", directed=False)
    for relation in store.relation_names:
        info = get_store_info(store, relation)
        print(f"{relation}: {info['num_vertices']} vertices, {info['num_arcs']} arcs, "
              f"density {info['density']:.3f}, {info['isolated_vertices']} isolates")

    analyzer = NetworkAnalyzer(store, canvas=Canvas(800, 600, 40))

    # Step 2: Distances
    print("\n2. Distances")
    print("-" * 40)

    for relation in store.relation_names:
        print(f"{relation}: connected={analyzer.is_connected(relation)}, "
              f"diameter={analyzer.diameter(relation):.0f}, "
              f"average distance={analyzer.average_distance(relation):.3f}")
    print(f"Geodesics between 1 and 9 (advice): {analyzer.shortest_path_count(1, 9, 'advice')}")

    # Step 3: Centrality
    print("\n3. Centrality and Prestige")
    print("-" * 40)

    indices = ["degree", "closeness", "betweenness", "eigenvector", "pagerank"]
    results = {index: analyzer.centrality(index, relation="advice") for index in indices}
    for index, result in results.items():
        summary = get_centrality_summary(result)
        top = identify_central_vertices(result, top_k=3)
        print(f"{index:<12} top={top} group={summary['group']} mean={summary['mean']:.3f}")

    comparison = compare_centrality_indices(results["betweenness"], results["closeness"])
    print(f"\nBetweenness vs closeness: pearson={comparison['pearson']:.3f}, "
          f"spearman={comparison['spearman']:.3f}")

    # Step 4: Cohesion
    print("\n4. Cohesion")
    print("-" * 40)

    clustering = analyzer.clustering_coefficient("advice")
    print(f"Mean clustering coefficient: {clustering.mean:.3f}")
    census = analyzer.triad_census("advice")
    print("Triad census:", {name: count for name, count in census.items() if count})

    # Step 5: Hierarchical clustering
    print("\n5. Hierarchical Clustering")
    print("-" * 40)

    hierarchy = analyzer.cluster(linkage="average", matrix="distances", relation="advice")
    for merge in hierarchy.merges:
        print(f"  level {merge.level:.3f}: {merge.members}")

    # Step 6: Layout and export
    print("\n6. Layout and Export")
    print("-" * 40)

    layout = analyzer.layout("kamada_kawai", relation="advice", seed=42)
    print(f"Kamada-Kawai finished after {layout.iterations} iterations "
          f"(converged={layout.converged})")

    output_dir = Path(__file__).parent / "output"
    output_dir.mkdir(exist_ok=True)

    centrality_frame = results["betweenness"].to_frame().join(
        clustering.to_frame(), on="node_id"
    )
    positions = pl.DataFrame(
        [(name, x, y) for name, (x, y) in store.positions().items()],
        schema={"node_id": pl.Int64, "x": pl.Float64, "y": pl.Float64},
        orient="row"
    )
    centrality_frame.join(positions, on="node_id").write_csv(output_dir / "vertices.csv")
    store_to_edgelist(store, relation="advice").write_csv(output_dir / "advice_edges.csv")
    hierarchy.to_frame().write_csv(output_dir / "hierarchy.csv")
    print(f"Exported results to: {output_dir}")

    print("\n" + "=" * 60)
    print("Network analysis complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
