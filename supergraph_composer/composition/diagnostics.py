# Copyright 2021-present Kensho Technologies, LLC.
from dataclasses import dataclass
from enum import Enum, unique
from typing import AbstractSet, Iterable, List, Optional, Tuple


@unique
class Severity(Enum):
    """How a diagnostic affects emission: any error prevents the supergraph from being emitted."""

    ERROR = "error"
    WARNING = "warning"


@unique
class DiagnosticKind(Enum):
    """Every kind of finding composition can report.

    Kinds are declared in the order of the stage that reports them, and diagnostics are sorted
    by that order.
    """

    TYPE_KIND_MISMATCH = "TypeKindMismatch"
    INVALID_KEY_FIELDS = "InvalidKeyFields"
    INPUT_INTERSECTION_NON_NULL_LOSS = "InputIntersectionNonNullLoss"
    ENUM_EXACT_MATCH_MISMATCH = "EnumExactMatchMismatch"
    EMPTY_MERGED_TYPE = "EmptyMergedType"
    INTERFACE_FIELD_IMPLEMENTATION_MISSING = "InterfaceFieldImplementationMissing"
    FIELD_TYPE_CONFLICT = "FieldTypeConflict"
    REFERENCED_INACCESSIBLE = "ReferencedInaccessible"
    UNRESOLVABLE_FIELD = "UnresolvableField"
    DIRECTIVE_DEFINITION_MISMATCH = "DirectiveDefinitionMismatch"

    @property
    def severity(self) -> Severity:
        """Return the severity of diagnostics of this kind."""
        if self == DiagnosticKind.DIRECTIVE_DEFINITION_MISMATCH:
            return Severity.WARNING
        return Severity.ERROR


_KIND_ORDER = {kind: index for index, kind in enumerate(DiagnosticKind)}


@dataclass(frozen=True)
class Diagnostic:
    """A single finding of a composition run."""

    kind: DiagnosticKind
    message: str

    # Names of the offending type and field, where applicable.
    type_name: Optional[str] = None
    field_name: Optional[str] = None

    # Subgraphs involved in the finding, in subgraph input order.
    subgraphs: Tuple[str, ...] = ()

    # For unresolvable fields: the field through which the type was reached (e.g.
    # "Query.positionA"), and an example query that cannot be served.
    access_point: Optional[str] = None
    example_query: Optional[str] = None

    @property
    def severity(self) -> Severity:
        """Return the severity of the diagnostic."""
        return self.kind.severity

    @property
    def coordinate(self) -> Optional[str]:
        """Return the schema coordinate of the offending element, e.g. "Position.z"."""
        if self.type_name is None:
            return None
        if self.field_name is None:
            return self.type_name
        return "{}.{}".format(self.type_name, self.field_name)

    def sort_key(self) -> Tuple[int, str, str, str, Tuple[str, ...], str]:
        """Return the key that orders diagnostics independently of when they were found."""
        return (
            _KIND_ORDER[self.kind],
            self.type_name or "",
            self.field_name or "",
            self.message,
            self.subgraphs,
            self.access_point or "",
        )

    def __str__(self) -> str:
        """Print the diagnostic on one line, e.g. "[error] FieldTypeConflict: ..."."""
        return "[{}] {}: {}".format(self.severity.value, self.kind.value, self.message)


class DiagnosticsAccumulator:
    """Collects the diagnostics of one composition run.

    An accumulator is created by the entry point and passed explicitly to every stage. Stages that
    run their per-type work in parallel collect each worker's diagnostics and add them here once
    the workers are done, so the accumulator is only ever written from one thread.
    """

    def __init__(self) -> None:
        """Create an empty accumulator."""
        self._diagnostics: List[Diagnostic] = []

    def add(self, diagnostic: Diagnostic) -> None:
        """Record a diagnostic."""
        self._diagnostics.append(diagnostic)

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        """Record several diagnostics."""
        self._diagnostics.extend(diagnostics)

    @property
    def diagnostics(self) -> Tuple[Diagnostic, ...]:
        """Return all diagnostics, sorted by stage, coordinate, message and involved subgraphs."""
        return tuple(sorted(self._diagnostics, key=Diagnostic.sort_key))

    @property
    def errors(self) -> Tuple[Diagnostic, ...]:
        """Return all error diagnostics, sorted."""
        return tuple(
            diagnostic
            for diagnostic in self.diagnostics
            if diagnostic.severity == Severity.ERROR
        )

    @property
    def warnings(self) -> Tuple[Diagnostic, ...]:
        """Return all warning diagnostics, sorted."""
        return tuple(
            diagnostic
            for diagnostic in self.diagnostics
            if diagnostic.severity == Severity.WARNING
        )

    @property
    def has_errors(self) -> bool:
        """Return True iff at least one error diagnostic was recorded."""
        return any(diagnostic.severity == Severity.ERROR for diagnostic in self._diagnostics)

    def has_any_of_kinds(self, kinds: AbstractSet[DiagnosticKind]) -> bool:
        """Return True iff at least one diagnostic of the given kinds was recorded."""
        return any(diagnostic.kind in kinds for diagnostic in self._diagnostics)

    def __len__(self) -> int:
        """Return the number of recorded diagnostics."""
        return len(self._diagnostics)
