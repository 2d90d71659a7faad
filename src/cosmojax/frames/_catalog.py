"""Catalog of reference frames and the graph linking them.

Frames are linked two ways:

- **parent**: the frame whose ``(orientation, center)`` codes match the
  child's ``(parent_orientation, parent_center)``.  Following parents
  ends at a root (inertial) frame.
- **inherit**: the named frame that supplies constants the child leaves
  unset.

:meth:`FrameCatalog.validate` checks both chains for every frame and then
freezes index tables used by later queries.  A catalog is built once and
only read afterwards; it is safe to share between threads.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, Mapping, NamedTuple

from cosmojax.config import get_max_frame_depth
from cosmojax.errors import (
    CyclicFrameGraph,
    DuplicateFrame,
    FrameNotFound,
    InheritanceChainTooLong,
    MissingParent,
)
from cosmojax.frames._types import (
    CONSTANT_FIELDS,
    BodyConstants,
    FrameDefinition,
    is_unset,
    normalize_frame_name,
)

logger = logging.getLogger(__name__)


class _CatalogIndex(NamedTuple):
    keys: tuple[str, ...]
    position: dict[str, int]
    parent: tuple[int | None, ...]
    root_path: tuple[tuple[int, ...], ...]


class FrameCatalog:
    """Registry of :class:`FrameDefinition` objects.

    Names are matched case-insensitively with underscores and spaces
    interchangeable (see :func:`normalize_frame_name`).

    Args:
        max_depth: Maximum number of hops in a parent or inherit chain.
            Defaults to :func:`cosmojax.config.get_max_frame_depth`.
    """

    def __init__(self, max_depth: int | None = None) -> None:
        self._frames: dict[str, FrameDefinition] = {}
        self._by_codes: dict[tuple[int, int], str] = {}
        self._max_depth = get_max_frame_depth() if max_depth is None else int(max_depth)
        if self._max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth!r}")
        self._index: _CatalogIndex | None = None

    @classmethod
    def from_records(
        cls,
        records: Mapping[str, Mapping[str, Any]],
        max_depth: int | None = None,
    ) -> FrameCatalog:
        """Register every raw record in *records* and validate.

        Args:
            records: Frame name to raw frame record.
            max_depth: See :class:`FrameCatalog`.

        Returns:
            FrameCatalog: A validated catalog.
        """
        catalog = cls(max_depth=max_depth)
        for name, record in records.items():
            catalog.register(FrameDefinition.from_record(name, record))
        catalog.validate()
        return catalog

    # Registration

    def register(self, definition: FrameDefinition) -> None:
        """Add *definition* to the catalog.

        Invalidates any earlier :meth:`validate`.

        Raises:
            DuplicateFrame: If a frame with the same normalized name exists.
        """
        key = definition.key
        if key in self._frames:
            raise DuplicateFrame(definition.name)

        codes = (definition.orientation, definition.center)
        existing = self._by_codes.setdefault(codes, key)
        if existing != key:
            logger.warning(
                "Frames '%s' and '%s' share orientation %d and center %d; "
                "children resolve to '%s'",
                self._frames[existing].name,
                definition.name,
                codes[0],
                codes[1],
                self._frames[existing].name,
            )

        self._frames[key] = definition
        self._index = None
        logger.debug("Registered frame '%s' (orientation=%d, center=%d)", definition.name, *codes)

    # Lookup

    def resolve(self, name: str) -> FrameDefinition:
        """Return the frame registered under *name*.

        Raises:
            FrameNotFound: If no such frame exists.
        """
        try:
            return self._frames[normalize_frame_name(name)]
        except KeyError:
            raise FrameNotFound(name) from None

    def parent_of(self, name: str) -> FrameDefinition | None:
        """Return the parent of *name*, or ``None`` for a root frame.

        Raises:
            FrameNotFound: If *name* is not registered.
            MissingParent: If the declared parent is not registered.
        """
        definition = self.resolve(name)
        if self._index is not None:
            parent = self._index.parent[self._index.position[definition.key]]
            return None if parent is None else self._frames[self._index.keys[parent]]
        parent_key = self._parent_key(definition)
        return None if parent_key is None else self._frames[parent_key]

    def path_to_root(self, name: str) -> tuple[FrameDefinition, ...]:
        """Return *name* followed by each ancestor, ending at its root.

        Raises:
            FrameNotFound: If *name* is not registered.
            MissingParent: If an ancestor is not registered.
            CyclicFrameGraph: If the chain loops or exceeds the depth limit.
        """
        definition = self.resolve(name)
        if self._index is not None:
            path = self._index.root_path[self._index.position[definition.key]]
            return tuple(self._frames[self._index.keys[i]] for i in path)
        chain = self._walk(definition, self._parent_key, "parent")
        return tuple(self._frames[key] for key in chain)

    def root_of(self, name: str) -> FrameDefinition:
        """Return the root (inertial) frame at the end of *name*'s parent chain."""
        return self.path_to_root(name)[-1]

    def constants(self, name: str) -> BodyConstants:
        """Return the physical constants of *name* after single-hop inheritance.

        Fields unset on the frame are taken from its ``inherit`` frame.
        Fields unset on both stay ``None``.

        Raises:
            FrameNotFound: If *name* is not registered.
            MissingParent: If the ``inherit`` frame is not registered.
            InheritanceChainTooLong: If a field is unset on the inherit
                frame too and that frame inherits further.
        """
        definition = self.resolve(name)
        inherit_key = self._inherit_key(definition)
        source = None if inherit_key is None else self._frames[inherit_key]

        values = {}
        for field in CONSTANT_FIELDS:
            value = getattr(definition, field)
            if is_unset(value) and source is not None:
                value = getattr(source, field)
                if is_unset(value) and source.inherit is not None:
                    raise InheritanceChainTooLong(
                        definition.name, field, (definition.name, source.name, source.inherit)
                    )
            values[field] = None if is_unset(value) else value
        return BodyConstants(**values)

    # Validation

    @property
    def is_validated(self) -> bool:
        return self._index is not None

    @property
    def max_depth(self) -> int:
        return self._max_depth

    def validate(self) -> None:
        """Check every parent and inherit chain, then freeze index tables.

        Raises:
            MissingParent: If a parent or ``inherit`` target is not registered.
            CyclicFrameGraph: If a chain revisits a frame or is longer than
                the maximum depth.
        """
        chains = {}
        for key, definition in self._frames.items():
            chains[key] = self._walk(definition, self._parent_key, "parent")
            self._walk(definition, self._inherit_key, "inherit")

        keys = tuple(self._frames)
        position = {key: i for i, key in enumerate(keys)}
        parent = tuple(position[chains[key][1]] if len(chains[key]) > 1 else None for key in keys)
        root_path = tuple(tuple(position[k] for k in chains[key]) for key in keys)
        self._index = _CatalogIndex(keys, position, parent, root_path)
        logger.debug("Validated frame catalog with %d frames", len(keys))

    def _parent_key(self, definition: FrameDefinition) -> str | None:
        codes = definition.parent_codes
        if codes is None:
            return None
        try:
            return self._by_codes[codes]
        except KeyError:
            raise MissingParent(
                definition.name, f"parent frame (orientation={codes[0]}, center={codes[1]})"
            ) from None

    def _inherit_key(self, definition: FrameDefinition) -> str | None:
        if definition.inherit is None:
            return None
        key = normalize_frame_name(definition.inherit)
        if key not in self._frames:
            raise MissingParent(definition.name, f"inherit frame '{definition.inherit}'")
        return key

    def _walk(
        self,
        start: FrameDefinition,
        step: Callable[[FrameDefinition], str | None],
        label: str,
    ) -> tuple[str, ...]:
        chain = [start.key]
        current = start
        while True:
            next_key = step(current)
            if next_key is None:
                return tuple(chain)
            names = tuple(self._frames[k].name for k in chain)
            if next_key in chain:
                raise CyclicFrameGraph(
                    f"{label} chain of '{start.name}' revisits '{self._frames[next_key].name}'",
                    names + (self._frames[next_key].name,),
                )
            chain.append(next_key)
            if len(chain) - 1 > self._max_depth:
                raise CyclicFrameGraph(
                    f"{label} chain of '{start.name}' exceeds the maximum depth of "
                    f"{self._max_depth} hops",
                    names + (self._frames[next_key].name,),
                )
            current = self._frames[next_key]

    # Container protocol

    def names(self) -> list[str]:
        """Return registered frame names in registration order."""
        return [definition.name for definition in self._frames.values()]

    def __len__(self) -> int:
        return len(self._frames)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_frame_name(name) in self._frames

    def __iter__(self) -> Iterator[FrameDefinition]:
        return iter(self._frames.values())

    def __repr__(self) -> str:
        state = "validated" if self.is_validated else "unvalidated"
        return f"FrameCatalog({len(self)} frames, {state})"
