"""
Vertex name to position mapping.

Vertices are identified by arbitrary integer names chosen by the caller
(parsers usually number them 1..N, but gaps appear as soon as vertices are
removed). Matrices and per-run workspaces are indexed by contiguous
positions 0..N-1. :class:`IDMapper` maintains that bijection and keeps it
contiguous across removals by shifting every later position down by one.
"""

from typing import Any, Dict, Iterator, List


class IDMapper:
    """
    Bidirectional mapping between vertex names and contiguous indices.

    Attributes
    ----------
    name_to_index : Dict[Any, int]
        Maps vertex names to positions 0..N-1
    index_to_name : List[Any]
        Vertex names in position order

    Examples
    --------
    >>> mapper = IDMapper()
    >>> mapper.append(10)
    0
    >>> mapper.append(20)
    1
    >>> mapper.remove(10)
    >>> mapper.get_index(20)
    0
    >>> mapper.get_index(10)
    -1

    Notes
    -----
    - Names may be any hashable value; the store uses integers
    - Insertion order defines position order
    - Removal is O(N) because later positions are renumbered
    """

    def __init__(self) -> None:
        self.name_to_index: Dict[Any, int] = {}
        self.index_to_name: List[Any] = []

    def append(self, name: Any) -> int:
        """
        Register a new name at the next free position.

        Raises
        ------
        ValueError
            If the name is already mapped
        TypeError
            If the name is not hashable
        """
        try:
            hash(name)
        except TypeError:
            raise TypeError(f"Vertex name must be hashable, got {type(name)}")

        if name in self.name_to_index:
            raise ValueError(f"Vertex name '{name}' is already mapped")

        index = len(self.index_to_name)
        self.name_to_index[name] = index
        self.index_to_name.append(name)
        return index

    def remove(self, name: Any) -> None:
        """
        Drop a name and renumber every later position.

        Raises
        ------
        KeyError
            If the name is not mapped
        """
        if name not in self.name_to_index:
            raise KeyError(f"Vertex name '{name}' not found in mapping")

        index = self.name_to_index.pop(name)
        del self.index_to_name[index]
        for position in range(index, len(self.index_to_name)):
            self.name_to_index[self.index_to_name[position]] = position

    def get_index(self, name: Any) -> int:
        """Return the position of ``name`` or -1 when it is not mapped."""
        return self.name_to_index.get(name, -1)

    def get_name(self, index: int) -> Any:
        """
        Return the name stored at ``index``.

        Raises
        ------
        TypeError
            If index is not an integer
        KeyError
            If index is out of range
        """
        if not isinstance(index, int):
            raise TypeError(f"Index must be integer, got {type(index)}")
        if index < 0 or index >= len(self.index_to_name):
            raise KeyError(f"Index {index} not found in mapping")
        return self.index_to_name[index]

    def get_index_batch(self, names: List[Any]) -> List[int]:
        """Positions for several names, -1 for those not mapped."""
        return [self.name_to_index.get(name, -1) for name in names]

    def get_name_batch(self, indices: List[int]) -> List[Any]:
        """Names for several positions."""
        return [self.get_name(index) for index in indices]

    def names(self) -> List[Any]:
        """All names in position order."""
        return list(self.index_to_name)

    def size(self) -> int:
        return len(self.index_to_name)

    def is_empty(self) -> bool:
        return not self.index_to_name

    def has_name(self, name: Any) -> bool:
        return name in self.name_to_index

    def clear(self) -> None:
        self.name_to_index.clear()
        self.index_to_name.clear()

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, name: Any) -> bool:
        return self.has_name(name)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self.index_to_name))

    def __repr__(self) -> str:
        return f"IDMapper(size={self.size()})"

    def __str__(self) -> str:
        if self.is_empty():
            return "IDMapper(empty)"
        preview = ", ".join(f"{name}->{i}" for i, name in enumerate(self.index_to_name[:5]))
        suffix = ", ..." if self.size() > 5 else ""
        return f"IDMapper({preview}{suffix})"
