"""
Multiplex graph topology store.

One vertex set, many named relations (edge layers). Every vertex keeps, per
relation, a map of outgoing arcs and a map of incoming arcs; both maps
share the same :class:`Arc` object so weight and enabled flags cannot drift
apart.

Every mutation that changes what an algorithm would see (vertices, arcs,
relations, enabled flags) bumps :attr:`GraphStore.generation` and notifies
the registered listeners. Derived structures are memoised against that
counter by :class:`socnetkit.network.analyzer.NetworkAnalyzer`.

Algorithms never read the store directly. They run on a :class:`GraphView`,
an immutable snapshot of one relation in contiguous index space built by
:meth:`GraphStore.view`.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional, Set, Tuple, Union

from ..common.exceptions import StructuralError
from ..common.id_mapper import IDMapper
from ..common.logging_config import get_logger

logger = get_logger(__name__)

RelationRef = Union[int, str]
StructureListener = Callable[[int], None]


class EdgeType(Enum):
    """How an arc was created."""

    DIRECTED = "directed"
    UNDIRECTED = "undirected"
    RECIPROCATED = "reciprocated"


@dataclass
class Arc:
    """A directed arc as seen from either endpoint."""

    weight: float = 1.0
    edge_type: EdgeType = EdgeType.DIRECTED
    color: str = "black"
    label: str = ""
    enabled: bool = True


@dataclass
class Vertex:
    """A vertex with display metadata and per-relation arc maps."""

    name: int
    x: float = 0.0
    y: float = 0.0
    label: str = ""
    color: str = "red"
    size: float = 8.0
    shape: str = "circle"
    enabled: bool = True
    out_arcs: Dict[int, Dict[int, Arc]] = field(default_factory=dict)
    in_arcs: Dict[int, Dict[int, Arc]] = field(default_factory=dict)

    def outgoing(self, relation: int) -> Dict[int, Arc]:
        return self.out_arcs.get(relation, {})

    def incoming(self, relation: int) -> Dict[int, Arc]:
        return self.in_arcs.get(relation, {})


@dataclass(frozen=True)
class GraphView:
    """
    Snapshot of one relation in contiguous index space.

    Attributes
    ----------
    relation : int
        Relation the view was built from
    names : List[int]
        Vertex names, position i holds the name of index i
    out_arcs : List[Dict[int, float]]
        For each index, target index -> weight
    in_arcs : List[Dict[int, float]]
        For each index, source index -> weight
    symmetric : bool
        Every arc i->j has a reverse arc j->i of equal weight
    weighted : bool
        At least one arc weight differs from 1
    generation : int
        Store generation the snapshot was taken at
    """

    relation: int
    names: List[int]
    out_arcs: List[Dict[int, float]]
    in_arcs: List[Dict[int, float]]
    symmetric: bool
    weighted: bool
    generation: int = 0

    @property
    def size(self) -> int:
        return len(self.names)

    @property
    def arc_count(self) -> int:
        return sum(len(arcs) for arcs in self.out_arcs)

    def index_of(self, name: int) -> int:
        """Index of a vertex name in this view, -1 when absent."""
        try:
            return self.names.index(name)
        except ValueError:
            return -1

    def has_arc(self, source: int, target: int) -> bool:
        return target in self.out_arcs[source]

    def weight(self, source: int, target: int) -> float:
        return self.out_arcs[source].get(target, 0.0)

    def neighbors(self, index: int) -> Set[int]:
        """Union of in and out neighbours, excluding the vertex itself."""
        result = set(self.out_arcs[index]) | set(self.in_arcs[index])
        result.discard(index)
        return result


class GraphStore:
    """
    Multiplex graph with explicit relation selection.

    Parameters
    ----------
    relation_name : str, default "default"
        Name of the relation created with the store

    Examples
    --------
    >>> store = GraphStore()
    >>> a = store.add_vertex()
    >>> b = store.add_vertex()
    >>> store.add_edge(a, b, weight=2.0, edge_type=EdgeType.UNDIRECTED)
    >>> store.edge_weight(b, a)
    2.0
    >>> store.edge_weight(a, 99)
    0.0
    """

    def __init__(self, relation_name: str = "default") -> None:
        self._vertices: Dict[int, Vertex] = {}
        self._index = IDMapper()
        self._relations: List[str] = [relation_name]
        self._current_relation = 0
        self._listeners: List[StructureListener] = []
        self.generation = 0

    # ------------------------------------------------------------------
    # structural change signal

    def add_listener(self, listener: StructureListener) -> None:
        """Register a callback invoked with the new generation after each change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StructureListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _structure_changed(self, reason: str) -> None:
        self.generation += 1
        logger.debug("Structural change (%s), generation %d", reason, self.generation)
        for listener in list(self._listeners):
            listener(self.generation)

    # ------------------------------------------------------------------
    # relations

    @property
    def relation_names(self) -> List[str]:
        return list(self._relations)

    @property
    def relation_count(self) -> int:
        return len(self._relations)

    @property
    def current_relation(self) -> int:
        return self._current_relation

    def add_relation(self, name: str) -> int:
        """Create a relation and return its index. It does not become current."""
        if name in self._relations:
            raise StructuralError(
                f"Relation '{name}' already exists",
                relation=self._relations.index(name),
                operation="add_relation"
            )
        self._relations.append(name)
        self._structure_changed("add_relation")
        return len(self._relations) - 1

    def select_relation(self, relation: RelationRef) -> int:
        """Make a relation the default for queries that do not name one."""
        self._current_relation = self.resolve_relation(relation)
        logger.debug("Current relation is now %d", self._current_relation)
        return self._current_relation

    def remove_relation(self, relation: RelationRef) -> None:
        """Delete a relation with all its arcs; later relation indices shift down."""
        index = self.resolve_relation(relation)
        if len(self._relations) == 1:
            raise StructuralError(
                "Cannot remove the only relation",
                relation=index,
                operation="remove_relation"
            )

        for vertex in self._vertices.values():
            for arc_map in (vertex.out_arcs, vertex.in_arcs):
                arc_map.pop(index, None)
                shifted = {
                    (rel - 1 if rel > index else rel): arcs
                    for rel, arcs in arc_map.items()
                }
                arc_map.clear()
                arc_map.update(shifted)

        del self._relations[index]
        if self._current_relation >= len(self._relations) or self._current_relation > index:
            self._current_relation = max(0, self._current_relation - 1)
        self._structure_changed("remove_relation")

    def resolve_relation(self, relation: Optional[RelationRef] = None) -> int:
        """
        Turn a relation index, name or None (current) into an index.

        Raises
        ------
        StructuralError
            If the relation does not exist
        """
        if relation is None:
            return self._current_relation
        if isinstance(relation, str):
            if relation not in self._relations:
                raise StructuralError(
                    f"Unknown relation '{relation}'",
                    operation="resolve_relation"
                )
            return self._relations.index(relation)
        if not 0 <= relation < len(self._relations):
            raise StructuralError(
                f"Relation index {relation} out of range",
                relation=relation,
                operation="resolve_relation"
            )
        return relation

    # ------------------------------------------------------------------
    # vertices

    def add_vertex(
        self,
        name: Optional[int] = None,
        x: float = 0.0,
        y: float = 0.0,
        label: str = "",
        color: str = "red",
        size: float = 8.0,
        shape: str = "circle"
    ) -> int:
        """
        Insert a vertex and return its name.

        When ``name`` is omitted the next integer after the largest existing
        name is used (starting at 1).
        """
        if name is None:
            name = max(self._vertices, default=0) + 1
        if name in self._vertices:
            raise StructuralError(
                f"Vertex {name} already exists",
                vertex=name,
                operation="add_vertex"
            )

        self._vertices[name] = Vertex(
            name=name, x=x, y=y, label=label or str(name),
            color=color, size=size, shape=shape
        )
        self._index.append(name)
        self._structure_changed("add_vertex")
        return name

    def remove_vertex(self, name: int) -> None:
        """Delete a vertex and every arc touching it, in all relations."""
        vertex = self._require_vertex(name, "remove_vertex")

        for relation, arcs in vertex.out_arcs.items():
            for target in arcs:
                if target != name:
                    self._vertices[target].incoming(relation).pop(name, None)
        for relation, arcs in vertex.in_arcs.items():
            for source in arcs:
                if source != name:
                    self._vertices[source].outgoing(relation).pop(name, None)

        del self._vertices[name]
        self._index.remove(name)
        self._structure_changed("remove_vertex")

    def has_vertex(self, name: int) -> bool:
        return name in self._vertices

    def vertex(self, name: int) -> Optional[Vertex]:
        return self._vertices.get(name)

    def vertex_index(self, name: int) -> int:
        """Contiguous position of a vertex, -1 when absent."""
        return self._index.get_index(name)

    def vertex_names(self, enabled_only: bool = False) -> List[int]:
        names = self._index.names()
        if enabled_only:
            names = [n for n in names if self._vertices[n].enabled]
        return names

    def vertices(self) -> Iterator[Vertex]:
        for name in self._index.names():
            yield self._vertices[name]

    def vertex_count(self, enabled_only: bool = False) -> int:
        if enabled_only:
            return sum(1 for v in self._vertices.values() if v.enabled)
        return len(self._vertices)

    def set_vertex_enabled(self, name: int, enabled: bool) -> None:
        vertex = self._require_vertex(name, "set_vertex_enabled")
        if vertex.enabled != enabled:
            vertex.enabled = enabled
            self._structure_changed("set_vertex_enabled")

    def set_position(self, name: int, x: float, y: float) -> None:
        """Move a vertex. Positions are not topology and keep caches valid."""
        vertex = self._require_vertex(name, "set_position")
        vertex.x = x
        vertex.y = y

    def positions(self) -> Dict[int, Tuple[float, float]]:
        return {v.name: (v.x, v.y) for v in self.vertices()}

    def _require_vertex(self, name: int, operation: str) -> Vertex:
        vertex = self._vertices.get(name)
        if vertex is None:
            raise StructuralError(
                f"Vertex {name} does not exist",
                vertex=name,
                operation=operation
            )
        return vertex

    # ------------------------------------------------------------------
    # arcs

    def add_edge(
        self,
        source: int,
        target: int,
        weight: float = 1.0,
        edge_type: EdgeType = EdgeType.DIRECTED,
        relation: Optional[RelationRef] = None,
        label: str = "",
        color: str = "black"
    ) -> None:
        """
        Insert or update an arc.

        ``UNDIRECTED`` materialises two arcs of equal weight.
        ``RECIPROCATED`` adds the reverse arc when it is missing and marks
        both arcs as reciprocated, keeping an existing reverse weight.
        """
        rel = self.resolve_relation(relation)
        self._require_vertex(source, "add_edge")
        self._require_vertex(target, "add_edge")

        if edge_type is EdgeType.UNDIRECTED:
            self._put_arc(source, target, rel, Arc(weight, edge_type, color, label))
            if source != target:
                self._put_arc(target, source, rel, Arc(weight, edge_type, color, label))
        elif edge_type is EdgeType.RECIPROCATED:
            self._put_arc(source, target, rel, Arc(weight, edge_type, color, label))
            reverse = self._vertices[target].outgoing(rel).get(source)
            if reverse is None:
                self._put_arc(target, source, rel, Arc(weight, edge_type, color, label))
            else:
                reverse.edge_type = EdgeType.RECIPROCATED
        else:
            self._put_arc(source, target, rel, Arc(weight, edge_type, color, label))

        self._structure_changed("add_edge")

    def _put_arc(self, source: int, target: int, relation: int, arc: Arc) -> None:
        self._vertices[source].out_arcs.setdefault(relation, {})[target] = arc
        self._vertices[target].in_arcs.setdefault(relation, {})[source] = arc

    def remove_edge(
        self,
        source: int,
        target: int,
        relation: Optional[RelationRef] = None,
        both_directions: bool = False
    ) -> bool:
        """
        Delete an arc. Undirected arcs always go away as a pair.

        Returns
        -------
        bool
            Whether anything was removed
        """
        rel = self.resolve_relation(relation)
        if source not in self._vertices or target not in self._vertices:
            return False

        arc = self._vertices[source].outgoing(rel).get(target)
        if arc is None and not both_directions:
            return False

        removed = self._drop_arc(source, target, rel)
        reverse = self._vertices[target].outgoing(rel).get(source)
        if reverse is not None:
            if both_directions or (arc is not None and arc.edge_type is EdgeType.UNDIRECTED):
                removed = self._drop_arc(target, source, rel) or removed
            elif reverse.edge_type is EdgeType.RECIPROCATED:
                reverse.edge_type = EdgeType.DIRECTED

        if removed:
            self._structure_changed("remove_edge")
        return removed

    def _drop_arc(self, source: int, target: int, relation: int) -> bool:
        arc = self._vertices[source].outgoing(relation).pop(target, None)
        self._vertices[target].incoming(relation).pop(source, None)
        return arc is not None

    def set_edge_enabled(
        self,
        source: int,
        target: int,
        enabled: bool,
        relation: Optional[RelationRef] = None
    ) -> bool:
        rel = self.resolve_relation(relation)
        if source not in self._vertices:
            return False
        arc = self._vertices[source].outgoing(rel).get(target)
        if arc is None:
            return False
        if arc.enabled != enabled:
            arc.enabled = enabled
            self._structure_changed("set_edge_enabled")
        return True

    def edge_weight(self, source: int, target: int, relation: Optional[RelationRef] = None) -> float:
        """Weight of the arc source->target, 0.0 when absent."""
        rel = self.resolve_relation(relation)
        vertex = self._vertices.get(source)
        if vertex is None:
            return 0.0
        arc = vertex.outgoing(rel).get(target)
        return arc.weight if arc is not None else 0.0

    def has_edge(self, source: int, target: int, relation: Optional[RelationRef] = None) -> bool:
        rel = self.resolve_relation(relation)
        vertex = self._vertices.get(source)
        return vertex is not None and target in vertex.outgoing(rel)

    def edge(self, source: int, target: int, relation: Optional[RelationRef] = None) -> Optional[Arc]:
        rel = self.resolve_relation(relation)
        vertex = self._vertices.get(source)
        return vertex.outgoing(rel).get(target) if vertex is not None else None

    def edges(
        self,
        relation: Optional[RelationRef] = None,
        include_disabled: bool = False
    ) -> Iterator[Tuple[int, int, Arc]]:
        """Yield ``(source, target, arc)`` in vertex order."""
        rel = self.resolve_relation(relation)
        for vertex in self.vertices():
            for target, arc in vertex.outgoing(rel).items():
                if include_disabled or self._arc_visible(vertex.name, target, arc):
                    yield vertex.name, target, arc

    def _arc_visible(self, source: int, target: int, arc: Arc) -> bool:
        return arc.enabled and self._vertices[source].enabled and self._vertices[target].enabled

    def out_neighbors(
        self,
        name: int,
        relation: Optional[RelationRef] = None,
        include_disabled: bool = False
    ) -> Dict[int, float]:
        """Target name -> weight for the arcs leaving ``name``."""
        rel = self.resolve_relation(relation)
        vertex = self._vertices.get(name)
        if vertex is None:
            return {}
        return {
            t: arc.weight for t, arc in vertex.outgoing(rel).items()
            if include_disabled or self._arc_visible(name, t, arc)
        }

    def in_neighbors(
        self,
        name: int,
        relation: Optional[RelationRef] = None,
        include_disabled: bool = False
    ) -> Dict[int, float]:
        """Source name -> weight for the arcs entering ``name``."""
        rel = self.resolve_relation(relation)
        vertex = self._vertices.get(name)
        if vertex is None:
            return {}
        return {
            s: arc.weight for s, arc in vertex.incoming(rel).items()
            if include_disabled or self._arc_visible(s, name, arc)
        }

    def out_degree(self, name: int, relation: Optional[RelationRef] = None) -> int:
        return len(self.out_neighbors(name, relation))

    def in_degree(self, name: int, relation: Optional[RelationRef] = None) -> int:
        return len(self.in_neighbors(name, relation))

    def edge_count(self, relation: Optional[RelationRef] = None) -> int:
        """Number of enabled arcs between enabled vertices."""
        return sum(1 for _ in self.edges(relation))

    def isolated_vertices(self, relation: Optional[RelationRef] = None) -> List[int]:
        return [
            name for name in self.vertex_names(enabled_only=True)
            if not self.out_neighbors(name, relation) and not self.in_neighbors(name, relation)
        ]

    def is_symmetric(self, relation: Optional[RelationRef] = None) -> bool:
        """Every enabled arc has an enabled reverse arc of the same weight."""
        rel = self.resolve_relation(relation)
        for source, target, arc in self.edges(rel):
            reverse = self._vertices[target].outgoing(rel).get(source)
            if reverse is None or not reverse.enabled or reverse.weight != arc.weight:
                return False
        return True

    def is_weighted(self, relation: Optional[RelationRef] = None) -> bool:
        return any(arc.weight != 1.0 for _, _, arc in self.edges(relation))

    def density(self, relation: Optional[RelationRef] = None) -> float:
        """Arcs present over the N(N-1) possible arcs between enabled vertices."""
        n = self.vertex_count(enabled_only=True)
        if n < 2:
            return 0.0
        arcs = sum(1 for s, t, _ in self.edges(relation) if s != t)
        return arcs / (n * (n - 1))

    def reciprocity(self, relation: Optional[RelationRef] = None) -> float:
        """Share of arcs whose reverse arc is also present."""
        rel = self.resolve_relation(relation)
        total = 0
        reciprocated = 0
        for source, target, _ in self.edges(rel):
            if source == target:
                continue
            total += 1
            reverse = self._vertices[target].outgoing(rel).get(source)
            if reverse is not None and reverse.enabled:
                reciprocated += 1
        return reciprocated / total if total else 0.0

    # ------------------------------------------------------------------
    # snapshots

    def view(
        self,
        relation: Optional[RelationRef] = None,
        drop_isolates: bool = False,
        include_disabled: bool = False
    ) -> GraphView:
        """
        Build a :class:`GraphView` of one relation.

        Parameters
        ----------
        relation : int or str, optional
            Relation to snapshot, the current one when omitted
        drop_isolates : bool, default False
            Leave out vertices without any arc in the relation
        include_disabled : bool, default False
            Keep disabled vertices and arcs
        """
        rel = self.resolve_relation(relation)

        names = [
            name for name in self._index.names()
            if include_disabled or self._vertices[name].enabled
        ]
        allowed = set(names)

        def _arcs(arc_map: Dict[int, Arc]) -> Dict[int, float]:
            return {
                other: arc.weight for other, arc in arc_map.items()
                if other in allowed and (include_disabled or arc.enabled)
            }

        out_by_name = {name: _arcs(self._vertices[name].outgoing(rel)) for name in names}
        in_by_name = {name: _arcs(self._vertices[name].incoming(rel)) for name in names}

        if drop_isolates:
            names = [n for n in names if out_by_name[n] or in_by_name[n]]

        position = {name: i for i, name in enumerate(names)}
        out_arcs = [
            {position[t]: w for t, w in out_by_name[name].items()} for name in names
        ]
        in_arcs = [
            {position[s]: w for s, w in in_by_name[name].items()} for name in names
        ]

        symmetric = all(
            out_arcs[j].get(i) == w
            for i, arcs in enumerate(out_arcs)
            for j, w in arcs.items()
        )
        weighted = any(w != 1.0 for arcs in out_arcs for w in arcs.values())

        return GraphView(
            relation=rel,
            names=names,
            out_arcs=out_arcs,
            in_arcs=in_arcs,
            symmetric=symmetric,
            weighted=weighted,
            generation=self.generation
        )

    def __len__(self) -> int:
        return len(self._vertices)

    def __contains__(self, name: int) -> bool:
        return name in self._vertices

    def __repr__(self) -> str:
        return (
            f"GraphStore(vertices={len(self._vertices)}, "
            f"relations={len(self._relations)}, generation={self.generation})"
        )
