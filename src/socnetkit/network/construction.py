"""
Store construction and interchange.

Builds a :class:`GraphStore` from an in-memory polars edge list, exports a
relation back to a polars edge list, and converts a relation to a NetworkIt
graph for interoperability with the wider NetworkIt toolbox.
"""

from typing import Any, Dict, Optional, Tuple
import warnings

import networkit as nk
import polars as pl

from ..common.exceptions import StructuralError, ValidationError
from ..common.id_mapper import IDMapper
from ..common.logging_config import get_logger, log_function_entry, LoggingTimer
from ..common.validators import validate_edgelist_dataframe
from .store import EdgeType, GraphStore, RelationRef

logger = get_logger(__name__)

DEFAULT_RELATION = "default"


def build_store_from_edgelist(
    edgelist: pl.DataFrame,
    source_col: str = "source",
    target_col: str = "target",
    weight_col: Optional[str] = None,
    relation_col: Optional[str] = None,
    directed: bool = True,
    auto_weight: bool = True,
    allow_self_loops: bool = True
) -> GraphStore:
    """
    Construct a multiplex store from an edge list.

    Parameters
    ----------
    edgelist : pl.DataFrame
        Edge list with integer vertex names
    source_col : str, default "source"
        Name of the source vertex column
    target_col : str, default "target"
        Name of the target vertex column
    weight_col : str, optional
        Name of the arc weight column. Weights of duplicate rows are summed.
    relation_col : str, optional
        Name of a column holding relation names. Relations are created in
        order of first appearance; without it every arc lands in a single
        "default" relation.
    directed : bool, default True
        Insert directed arcs; otherwise undirected edges (two arcs each)
    auto_weight : bool, default True
        Without ``weight_col``, weight each arc by the number of duplicate
        rows; otherwise duplicates collapse to weight 1
    allow_self_loops : bool, default True
        Keep rows whose source equals their target; otherwise drop them

    Returns
    -------
    GraphStore
        Store with every vertex named in the edge list, added in ascending
        name order

    Raises
    ------
    ValidationError
        If the edge list is malformed
    StructuralError
        If the store cannot be built

    Examples
    --------
    >>> edges = pl.DataFrame({"source": [1, 2, 3], "target": [2, 3, 1]})
    >>> store = build_store_from_edgelist(edges)
    >>> store.edge_count()
    3
    """
    log_function_entry("build_store_from_edgelist", edgelist=type(edgelist).__name__,
                       directed=directed, relation_col=relation_col)

    if not isinstance(edgelist, pl.DataFrame):
        raise ValidationError(
            f"Invalid edgelist type: {type(edgelist)}. Expected pl.DataFrame",
            field="edgelist",
            value=type(edgelist).__name__
        )

    if edgelist.is_empty():
        warnings.warn("Empty edge list provided. Creating empty store.")
        return GraphStore(DEFAULT_RELATION)

    with LoggingTimer("build_store_from_edgelist", {"rows": len(edgelist)}):
        validate_edgelist_dataframe(
            edgelist,
            source_col=source_col,
            target_col=target_col,
            weight_col=weight_col,
            relation_col=relation_col
        )

        try:
            processed = _process_edges(
                edgelist, source_col, target_col, weight_col, relation_col,
                auto_weight, allow_self_loops
            )

            relations = (
                edgelist[relation_col].unique(maintain_order=True).cast(pl.Utf8).to_list()
                if relation_col is not None else [DEFAULT_RELATION]
            )
            store = GraphStore(relations[0])
            for name in relations[1:]:
                store.add_relation(name)

            names = sorted(set(edgelist[source_col].to_list()) | set(edgelist[target_col].to_list()))
            for name in names:
                store.add_vertex(int(name))

            edge_type = EdgeType.DIRECTED if directed else EdgeType.UNDIRECTED
            for row in processed.iter_rows(named=True):
                relation = str(row[relation_col]) if relation_col is not None else 0
                store.add_edge(
                    int(row[source_col]), int(row[target_col]),
                    weight=float(row["weight"]),
                    edge_type=edge_type,
                    relation=relation
                )
        except (ValidationError, StructuralError):
            raise
        except Exception as e:
            raise StructuralError(
                f"Unexpected error during store construction: {str(e)}",
                operation="build_store_from_edgelist",
                cause=e
            )

    logger.info("Store construction completed: %d vertices, %d relations, directed=%s",
                len(store), store.relation_count, directed)
    return store


def _process_edges(
    df: pl.DataFrame,
    source_col: str,
    target_col: str,
    weight_col: Optional[str],
    relation_col: Optional[str],
    auto_weight: bool,
    allow_self_loops: bool
) -> pl.DataFrame:
    """Filter self-loops and collapse duplicate rows into one weighted arc."""
    processed = df.clone()

    if not allow_self_loops:
        initial_count = len(processed)
        processed = processed.filter(pl.col(source_col) != pl.col(target_col))
        removed_count = initial_count - len(processed)
        if removed_count > 0:
            logger.info("Removed %d self-loop edges", removed_count)

    keys = [source_col, target_col] + ([relation_col] if relation_col is not None else [])

    if weight_col is not None:
        aggregate = pl.col(weight_col).sum().cast(pl.Float64).alias("weight")
    elif auto_weight:
        aggregate = pl.len().cast(pl.Float64).alias("weight")
    else:
        aggregate = pl.lit(1.0).alias("weight")

    return processed.group_by(keys, maintain_order=True).agg(aggregate)


def store_to_edgelist(
    store: GraphStore,
    relation: Optional[RelationRef] = None,
    include_disabled: bool = False
) -> pl.DataFrame:
    """
    Export the arcs of one relation.

    Returns
    -------
    pl.DataFrame
        Columns ``source``, ``target``, ``weight``, ``edge_type``, one row
        per arc (undirected edges appear once per direction)
    """
    rows = [
        (source, target, arc.weight, arc.edge_type.value)
        for source, target, arc in store.edges(relation, include_disabled=include_disabled)
    ]
    return pl.DataFrame(
        rows,
        schema={"source": pl.Int64, "target": pl.Int64,
                "weight": pl.Float64, "edge_type": pl.Utf8},
        orient="row"
    )


def to_networkit(
    store: GraphStore,
    relation: Optional[RelationRef] = None
) -> Tuple[nk.Graph, IDMapper]:
    """
    Convert one relation to a NetworkIt graph.

    A symmetric relation becomes an undirected graph with one edge per
    mutual pair; any other relation becomes a directed graph. Disabled
    vertices and arcs are left out.

    Returns
    -------
    graph : nk.Graph
        NetworkIt graph, weighted when any arc weight differs from 1
    id_mapper : IDMapper
        Mapping between vertex names and NetworkIt node ids
    """
    view = store.view(relation)
    mapper = IDMapper()
    for name in view.names:
        mapper.append(name)

    directed = not view.symmetric
    graph = nk.Graph(view.size, weighted=view.weighted, directed=directed)
    for i, arcs in enumerate(view.out_arcs):
        for j, weight in arcs.items():
            if not directed and j < i:
                continue
            if view.weighted:
                graph.addEdge(i, j, weight)
            else:
                graph.addEdge(i, j)

    logger.debug("Converted relation %d to NetworkIt: %d nodes, %d edges, directed=%s",
                 view.relation, graph.numberOfNodes(), graph.numberOfEdges(), directed)
    return graph, mapper


def get_store_info(store: GraphStore, relation: Optional[RelationRef] = None) -> Dict[str, Any]:
    """
    Summary figures of one relation.

    Examples
    --------
    >>> info = get_store_info(store)
    >>> print(f"Vertices: {info['num_vertices']}, Arcs: {info['num_arcs']}")
    """
    return {
        "num_vertices": store.vertex_count(enabled_only=True),
        "num_arcs": store.edge_count(relation),
        "num_relations": store.relation_count,
        "symmetric": store.is_symmetric(relation),
        "weighted": store.is_weighted(relation),
        "density": store.density(relation),
        "reciprocity": store.reciprocity(relation),
        "isolated_vertices": len(store.isolated_vertices(relation)),
    }
