# Copyright 2021-present Kensho Technologies, LLC.
"""Entry points composing subgraph schemas into a supergraph."""
from dataclasses import dataclass
import logging
from typing import Mapping, Optional, Sequence, Tuple

from graphql.language.ast import DocumentNode

from ..exceptions import CompositionError
from .diagnostics import Diagnostic, DiagnosticKind, DiagnosticsAccumulator, Severity
from .directive_composer import compose_directives
from .merge_strategies import merge_types
from .options import CompositionOptions
from .resolvability import ResolvabilityReport, validate_resolvability
from .schema_model import SubgraphSchema, load_subgraph
from .shareable_checker import check_shareable_fields
from .supergraph_emitter import (
    SupergraphSchema,
    check_inaccessible_references,
    emit_supergraph,
    get_graph_enum_value_names,
)
from .type_registry import build_type_registry, validate_entity_keys
from .usage_classifier import classify_enum_usages


logger = logging.getLogger(__name__)

# Findings that leave the entity key graph undefined, so resolvability cannot be validated.
_RESOLVABILITY_BLOCKING_KINDS = frozenset({DiagnosticKind.INVALID_KEY_FIELDS})


@dataclass(frozen=True)
class CompositionResult:
    """Outcome of a composition run: the supergraph if there were no errors, and every finding."""

    supergraph: Optional[SupergraphSchema]
    diagnostics: Tuple[Diagnostic, ...]

    @property
    def errors(self) -> Tuple[Diagnostic, ...]:
        """Return the error diagnostics, which prevented emission if there are any."""
        return tuple(
            diagnostic for diagnostic in self.diagnostics if diagnostic.severity == Severity.ERROR
        )

    @property
    def warnings(self) -> Tuple[Diagnostic, ...]:
        """Return the warning diagnostics."""
        return tuple(
            diagnostic
            for diagnostic in self.diagnostics
            if diagnostic.severity == Severity.WARNING
        )

    @property
    def succeeded(self) -> bool:
        """Return True iff a supergraph was emitted."""
        return self.supergraph is not None

    def raise_for_errors(self) -> SupergraphSchema:
        """Return the supergraph, or raise CompositionError if composition failed.

        Raises:
            - CompositionError carrying the error diagnostics, if there are any
        """
        if self.supergraph is None:
            raise CompositionError(self.errors)
        return self.supergraph


def _make_result(
    accumulator: DiagnosticsAccumulator, supergraph: Optional[SupergraphSchema]
) -> CompositionResult:
    """Package the diagnostics of a run, and log its outcome."""
    result = CompositionResult(supergraph=supergraph, diagnostics=accumulator.diagnostics)
    if supergraph is None:
        logger.warning(
            "Composition failed with %(error_count)d errors and %(warning_count)d warnings.",
            {"error_count": len(result.errors), "warning_count": len(result.warnings)},
        )
    else:
        logger.info(
            "Composition succeeded with %(type_count)d types and %(warning_count)d warnings.",
            {"type_count": len(supergraph.type_origins), "warning_count": len(result.warnings)},
        )
    return result


def compose(
    subgraphs: Sequence[SubgraphSchema], options: Optional[CompositionOptions] = None
) -> CompositionResult:
    """Compose the subgraphs into a supergraph, reporting every problem found along the way.

    Composition checks the subgraphs' types for kind agreement, then merges each type, checks
    fields resolved by several subgraphs, and validates that every field is resolvable by some
    sequence of subgraph calls. Independent checks run to completion, so a single run reports
    every problem at once: only differing type kinds stop composition early, and only invalid
    entity keys prevent resolvability validation. The supergraph is only emitted if no errors
    were found.

    Args:
        subgraphs: subgraphs to compose, in input order. Input order decides the order of
                   emitted elements and diagnostics, and never depends on the number of workers.
        options: settings of the run, or None for the defaults

    Returns:
        CompositionResult with the supergraph (None if there were errors) and all diagnostics

    Raises:
        - ValueError if there are no subgraphs, or if subgraph names are not unique, even when
          letter case is ignored
    """
    if options is None:
        options = CompositionOptions()
    accumulator = DiagnosticsAccumulator()

    registry = build_type_registry(subgraphs, accumulator)
    get_graph_enum_value_names(registry.subgraph_names)
    if accumulator.has_errors:
        # Types declared with different kinds cannot be merged.
        return _make_result(accumulator, None)

    validate_entity_keys(registry, accumulator)
    enum_usages = classify_enum_usages(registry)
    merged_types = merge_types(registry, enum_usages, accumulator, options)
    check_shareable_fields(registry, accumulator, options)
    check_inaccessible_references(merged_types, registry.root_type_names, accumulator)

    report: Optional[ResolvabilityReport] = None
    if options.validate_resolvability:
        if accumulator.has_any_of_kinds(_RESOLVABILITY_BLOCKING_KINDS):
            logger.info("Skipping resolvability validation, since some entity keys are invalid.")
        else:
            report = validate_resolvability(registry, merged_types, accumulator)

    composed_directives = compose_directives(registry, accumulator, options)

    if accumulator.has_errors:
        return _make_result(accumulator, None)
    return _make_result(
        accumulator, emit_supergraph(registry, merged_types, composed_directives, report)
    )


def compose_documents(
    subgraph_documents: Mapping[str, DocumentNode],
    options: Optional[CompositionOptions] = None,
    subgraph_urls: Optional[Mapping[str, str]] = None,
) -> CompositionResult:
    """Load the subgraph schema documents, then compose them.

    Args:
        subgraph_documents: subgraph name to its parsed schema document, in input order
        options: settings of the run, or None for the defaults
        subgraph_urls: optional subgraph name to the URL the router reaches the subgraph at

    Returns:
        CompositionResult of composing the loaded subgraphs

    Raises:
        - ValueError if there are no subgraphs, or if a subgraph name is invalid
        - SubgraphStructureError if a document is not a valid subgraph schema
    """
    if subgraph_urls is None:
        subgraph_urls = {}
    unknown_url_names = set(subgraph_urls) - set(subgraph_documents)
    if unknown_url_names:
        raise ValueError(
            "Received URLs for unknown subgraphs: {}".format(sorted(unknown_url_names))
        )
    subgraphs = [
        load_subgraph(name, document_ast, url=subgraph_urls.get(name))
        for name, document_ast in subgraph_documents.items()
    ]
    return compose(subgraphs, options=options)
