# Copyright 2017-present Kensho Technologies, LLC.
"""Commonly-used functions and data types from this package."""
from .composition import (  # noqa
    CompositionOptions,
    CompositionResult,
    Diagnostic,
    DiagnosticKind,
    FieldOrigin,
    RouterDirective,
    Severity,
    SubgraphSchema,
    SupergraphSchema,
    TypeOrigin,
    compose,
    compose_documents,
    load_subgraph,
)
from .exceptions import (  # noqa
    CompositionError,
    SubgraphStructureError,
    SupergraphComposerError,
)


__package_name__ = "supergraph-composer"
__version__ = "1.0.0"
