# Copyright 2021-present Kensho Technologies, LLC.
from .compose import CompositionResult, compose, compose_documents  # noqa
from .diagnostics import Diagnostic, DiagnosticKind, Severity  # noqa
from .directive_composer import RouterDirective  # noqa
from .options import CompositionOptions  # noqa
from .schema_model import SubgraphSchema, load_subgraph  # noqa
from .supergraph_emitter import FieldOrigin, SupergraphSchema, TypeOrigin  # noqa
