"""Exception types raised by cosmojax.

Every error derives from :class:`CosmojaxError` and from the closest
builtin exception, so ``except ValueError`` / ``except KeyError`` keeps
working for callers that do not import this module.

Expression layer:
    :class:`ParseError`, :class:`UnknownSymbol`, :class:`EvaluationError`

Frame-graph layer:
    :class:`DuplicateFrame`, :class:`FrameNotFound`,
    :class:`MissingParent`, :class:`CyclicFrameGraph`,
    :class:`InheritanceChainTooLong`

Transform layer:
    :class:`IncompatibleFrames`

Sweeps:
    :class:`OperationCancelled`
"""

from __future__ import annotations


class CosmojaxError(Exception):
    """Base class for all cosmojax errors."""


# Expression layer


class ExpressionError(CosmojaxError):
    """Base class for rotation-formula errors."""


class ParseError(ExpressionError, ValueError):
    """A formula (or its angle unit) could not be parsed.

    Attributes:
        text: The offending source text.
        position: Character offset of the failure, or ``None``.
    """

    def __init__(self, message: str, text: str = "", position: int | None = None) -> None:
        super().__init__(message)
        self.text = text
        self.position = position


class UnknownSymbol(ExpressionError, KeyError):
    """A formula references a symbol that is neither reserved nor in context.

    Attributes:
        symbol: The unresolved symbol name.
    """

    def __init__(self, symbol: str, message: str | None = None) -> None:
        super().__init__(message or f"unknown symbol '{symbol}'")
        self.symbol = symbol

    def __str__(self) -> str:
        # KeyError would otherwise quote the message
        return str(self.args[0])


class EvaluationError(ExpressionError, ArithmeticError):
    """Evaluation produced a non-finite value or could not be ordered."""


# Frame-graph layer


class FrameGraphError(CosmojaxError):
    """Base class for frame catalog and graph errors."""


class DuplicateFrame(FrameGraphError, ValueError):
    """A frame with the same (normalized) name is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"frame '{name}' is already registered")
        self.name = name


class FrameNotFound(FrameGraphError, KeyError):
    """No frame with the requested name exists in the catalog."""

    def __init__(self, name: str) -> None:
        super().__init__(f"frame '{name}' not found")
        self.name = name

    def __str__(self) -> str:
        return str(self.args[0])


class MissingParent(FrameGraphError, KeyError):
    """A frame declares a parent (or inherit source) absent from the catalog.

    Attributes:
        name: The frame declaring the reference.
        reference: Human-readable description of the missing target.
    """

    def __init__(self, name: str, reference: str) -> None:
        super().__init__(f"frame '{name}' refers to missing {reference}")
        self.name = name
        self.reference = reference

    def __str__(self) -> str:
        return str(self.args[0])


class CyclicFrameGraph(FrameGraphError, ValueError):
    """A parent or inherit chain revisits a frame or exceeds the depth limit.

    Attributes:
        chain: Frame names visited, in order, up to the failure.
    """

    def __init__(self, message: str, chain: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.chain = chain


class InheritanceChainTooLong(FrameGraphError, ValueError):
    """Resolving a constant would require following more than one ``inherit`` hop."""

    def __init__(self, name: str, field: str, chain: tuple[str, ...]) -> None:
        super().__init__(
            f"frame '{name}' needs '{field}' through inherit chain "
            f"{' -> '.join(chain)}; only single-hop inheritance is supported"
        )
        self.name = name
        self.field = field
        self.chain = chain


# Transform layer


class IncompatibleFrames(CosmojaxError, ValueError):
    """Two frames resolve to different inertial roots."""

    def __init__(self, from_frame: str, to_frame: str, from_root: str, to_root: str) -> None:
        super().__init__(
            f"cannot relate '{from_frame}' (root '{from_root}') to "
            f"'{to_frame}' (root '{to_root}'): no common inertial root"
        )
        self.from_frame = from_frame
        self.to_frame = to_frame
        self.from_root = from_root
        self.to_root = to_root


class OperationCancelled(CosmojaxError, RuntimeError):
    """A sweep was stopped by its cancellation signal.

    Attributes:
        completed: Number of evaluations finished before cancellation.
    """

    def __init__(self, completed: int) -> None:
        super().__init__(f"operation cancelled after {completed} evaluations")
        self.completed = completed
