# Copyright 2021-present Kensho Technologies, LLC.
"""Decide which custom directive definitions reach the supergraph, and in which role.

Executable directives (usable in queries) are exposed to clients only if every subgraph defines
them identically, since the router may forward a query to any subgraph. Type-system directives
never reach the client-facing schema; the ones named by @composeDirective are handed to the
router as metadata, together with every place a subgraph applies them.
"""
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum, unique
import logging
from typing import AbstractSet, Dict, FrozenSet, List, Sequence, Tuple

from graphql import DirectiveLocation, print_ast
from graphql.language.ast import (
    DirectiveDefinitionNode,
    InputValueDefinitionNode,
    NameNode,
)

from .diagnostics import Diagnostic, DiagnosticKind, DiagnosticsAccumulator
from .options import CompositionOptions
from .schema_model import FEDERATION_DIRECTIVE_NAMES, DirectiveApplication
from .type_registry import TypeRegistry


logger = logging.getLogger(__name__)


EXECUTABLE_DIRECTIVE_LOCATIONS: FrozenSet[str] = frozenset(
    location.name
    for location in (
        DirectiveLocation.QUERY,
        DirectiveLocation.MUTATION,
        DirectiveLocation.SUBSCRIPTION,
        DirectiveLocation.FIELD,
        DirectiveLocation.FRAGMENT_DEFINITION,
        DirectiveLocation.FRAGMENT_SPREAD,
        DirectiveLocation.INLINE_FRAGMENT,
        DirectiveLocation.VARIABLE_DEFINITION,
    )
)

# Directives every GraphQL schema has, which are never redefined by composition.
BUILTIN_DIRECTIVE_NAMES: FrozenSet[str] = frozenset(
    {"skip", "include", "deprecated", "specifiedBy"}
)


@unique
class ComposeControl(Enum):
    """How composition treats a directive, beyond what its locations imply."""

    DEFAULT = "default"
    PASS_THROUGH = "pass through"
    EXCLUDED = "excluded"


@dataclass(frozen=True)
class DirectiveSpec:
    """Classification of one directive name."""

    name: str
    locations: Tuple[str, ...]
    compose_control: ComposeControl

    @property
    def is_executable(self) -> bool:
        """Return True iff the directive may be applied in queries."""
        return any(location in EXECUTABLE_DIRECTIVE_LOCATIONS for location in self.locations)


@dataclass(frozen=True)
class RouterDirective:
    """A type-system directive passed through to the router, with every place it is applied."""

    name: str
    definition: DirectiveDefinitionNode
    applications: Tuple[DirectiveApplication, ...]


@dataclass(frozen=True)
class ComposedDirectives:
    """Outcome of directive composition."""

    # Executable directive definitions of the supergraph, sorted by name, restricted to their
    # executable locations.
    executable_definitions: Tuple[DirectiveDefinitionNode, ...]

    # Pass-through type-system directives, sorted by name.
    router_directives: Tuple[RouterDirective, ...]


def get_directive_spec(
    definition: DirectiveDefinitionNode,
    composed_directive_names: AbstractSet[str],
    options: CompositionOptions,
) -> DirectiveSpec:
    """Classify a directive from its definition and the composition controls applied to it."""
    directive_name = definition.name.value
    if (
        directive_name in BUILTIN_DIRECTIVE_NAMES
        or directive_name in FEDERATION_DIRECTIVE_NAMES
        or directive_name in options.excluded_directive_names
    ):
        compose_control = ComposeControl.EXCLUDED
    elif directive_name in composed_directive_names:
        compose_control = ComposeControl.PASS_THROUGH
    else:
        compose_control = ComposeControl.DEFAULT
    return DirectiveSpec(
        name=directive_name,
        locations=tuple(location.value for location in definition.locations),
        compose_control=compose_control,
    )


def get_directive_signature(definition: DirectiveDefinitionNode) -> str:
    """Print the parts of a definition that must agree across subgraphs.

    Descriptions are ignored, and locations are compared as a set.
    """
    arguments = [
        InputValueDefinitionNode(
            name=argument.name,
            type=argument.type,
            default_value=argument.default_value,
            directives=(),
        )
        for argument in definition.arguments or ()
    ]
    locations = [
        NameNode(value=location_name)
        for location_name in sorted({location.value for location in definition.locations})
    ]
    return print_ast(
        DirectiveDefinitionNode(
            name=definition.name,
            arguments=arguments,
            repeatable=definition.repeatable,
            locations=locations,
        )
    )


def _restrict_to_executable_locations(
    definition: DirectiveDefinitionNode,
) -> DirectiveDefinitionNode:
    """Return a copy of the definition without its type-system locations."""
    return DirectiveDefinitionNode(
        description=definition.description,
        name=definition.name,
        arguments=definition.arguments,
        repeatable=definition.repeatable,
        locations=[
            location
            for location in definition.locations
            if location.value in EXECUTABLE_DIRECTIVE_LOCATIONS
        ],
    )


def _make_mismatch_diagnostic(
    directive_name: str,
    role: str,
    definitions: Sequence[Tuple[str, DirectiveDefinitionNode]],
    missing_subgraphs: Sequence[str],
) -> Diagnostic:
    """Describe why a directive's definitions cannot be composed."""
    problems = []
    if missing_subgraphs:
        problems.append(
            "it is not defined in subgraph(s) {}".format(
                ", ".join('"{}"'.format(subgraph) for subgraph in missing_subgraphs)
            )
        )
    signatures = OrderedDict()
    for subgraph_name, definition in definitions:
        signatures.setdefault(get_directive_signature(definition), []).append(subgraph_name)
    if len(signatures) > 1:
        problems.append(
            "its definitions differ: {}".format(
                "; ".join(
                    '"{}" in {}'.format(
                        signature, ", ".join('"{}"'.format(name) for name in subgraph_names)
                    )
                    for signature, subgraph_names in signatures.items()
                )
            )
        )
    return Diagnostic(
        kind=DiagnosticKind.DIRECTIVE_DEFINITION_MISMATCH,
        message='{} directive "@{}" is left out of the supergraph, since {}.'.format(
            role, directive_name, " and ".join(problems)
        ),
        subgraphs=tuple(subgraph_name for subgraph_name, _ in definitions),
    )


def compose_directives(
    registry: TypeRegistry, accumulator: DiagnosticsAccumulator, options: CompositionOptions
) -> ComposedDirectives:
    """Classify and merge the custom directive definitions of all subgraphs.

    Args:
        registry: index of all subgraphs, whose directive definitions and applications are read
        accumulator: receives a DirectiveDefinitionMismatch warning for every executable directive
                     not defined identically in every subgraph, and for every pass-through
                     directive defined differently by different subgraphs
        options: names of directives to exclude from composition

    Returns:
        ComposedDirectives with the directives that made it into the supergraph
    """
    composed_directive_names = frozenset(
        directive_name
        for subgraph in registry.subgraphs
        for directive_name in subgraph.composed_directive_names
    )
    name_to_definitions: Dict[str, List[Tuple[str, DirectiveDefinitionNode]]] = {}
    for subgraph in registry.subgraphs:
        for directive_name, definition in subgraph.directive_definitions.items():
            name_to_definitions.setdefault(directive_name, []).append((subgraph.name, definition))

    for directive_name in sorted(composed_directive_names - set(name_to_definitions)):
        logger.warning(
            "Directive @%(name)s is named by @composeDirective but no subgraph defines it.",
            {"name": directive_name},
        )

    executable_definitions: List[DirectiveDefinitionNode] = []
    router_directives: List[RouterDirective] = []
    for directive_name in sorted(name_to_definitions):
        definitions = name_to_definitions[directive_name]
        spec = get_directive_spec(definitions[0][1], composed_directive_names, options)
        if spec.compose_control == ComposeControl.EXCLUDED:
            logger.debug("Excluding directive @%s from composition.", directive_name)
            continue

        signature_count = len(
            {get_directive_signature(definition) for _, definition in definitions}
        )
        if spec.is_executable:
            defining_subgraphs = {subgraph_name for subgraph_name, _ in definitions}
            missing_subgraphs = [
                subgraph_name
                for subgraph_name in registry.subgraph_names
                if subgraph_name not in defining_subgraphs
            ]
            if missing_subgraphs or signature_count > 1:
                accumulator.add(
                    _make_mismatch_diagnostic(
                        directive_name, "Executable", definitions, missing_subgraphs
                    )
                )
                continue
            executable_definitions.append(_restrict_to_executable_locations(definitions[0][1]))
        elif spec.compose_control == ComposeControl.PASS_THROUGH:
            if signature_count > 1:
                accumulator.add(
                    _make_mismatch_diagnostic(directive_name, "Composed", definitions, ())
                )
                continue
            router_directives.append(
                RouterDirective(
                    name=directive_name,
                    definition=definitions[0][1],
                    applications=tuple(
                        application
                        for subgraph in registry.subgraphs
                        for application in subgraph.directive_applications
                        if application.directive_name == directive_name
                    ),
                )
            )
        else:
            logger.debug(
                "Type-system directive @%s is not passed through, so it is not composed.",
                directive_name,
            )

    logger.debug(
        "Composed %(executable)d executable directives and %(router)d router directives.",
        {"executable": len(executable_definitions), "router": len(router_directives)},
    )
    return ComposedDirectives(
        executable_definitions=tuple(executable_definitions),
        router_directives=tuple(router_directives),
    )
