# Copyright 2021-present Kensho Technologies, LLC.
"""Build the client-facing API schema and the router-facing supergraph schema from merged types.

The API schema contains only what clients may query: inaccessible types, fields, arguments and
enum values are removed, as are all type-system directives except the built-in ones.

The supergraph schema contains every merged element, annotated with join directives recording
which subgraphs define it, so that a router can plan queries against it.
"""
from collections import OrderedDict
from dataclasses import dataclass
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from graphql import build_ast_schema, parse, print_ast
from graphql.language.ast import (
    ArgumentNode,
    BooleanValueNode,
    DefinitionNode,
    DirectiveDefinitionNode,
    DirectiveNode,
    DocumentNode,
    EnumTypeDefinitionNode,
    EnumValueDefinitionNode,
    EnumValueNode,
    FieldDefinitionNode,
    InputObjectTypeDefinitionNode,
    InputValueDefinitionNode,
    InterfaceTypeDefinitionNode,
    NamedTypeNode,
    NameNode,
    ObjectTypeDefinitionNode,
    OperationTypeDefinitionNode,
    ScalarTypeDefinitionNode,
    SchemaDefinitionNode,
    StringValueNode,
    TypeDefinitionNode,
    UnionTypeDefinitionNode,
)
from graphql.type.schema import GraphQLSchema

from .diagnostics import Diagnostic, DiagnosticKind, DiagnosticsAccumulator
from .directive_composer import ComposedDirectives, RouterDirective
from .merge_strategies import MergedEnumValue, MergedField, MergedInputValue, MergedType
from .resolvability import ResolvabilityReport
from .schema_model import (
    CANONICAL_ROOT_TYPE_NAMES,
    INACCESSIBLE_DIRECTIVE,
    ROOT_OPERATION_TYPES,
    Key,
    TypeKind,
)
from .type_registry import TypeRegistry


logger = logging.getLogger(__name__)


JOIN_GRAPH_ENUM_NAME = "join__Graph"

_JOIN_DEFINITIONS_SDL = """
directive @join__graph(name: String!, url: String!) on ENUM_VALUE

directive @join__type(
    graph: join__Graph!
    key: join__FieldSet
    resolvable: Boolean = true
) repeatable on OBJECT | INTERFACE | UNION | ENUM | INPUT_OBJECT | SCALAR

directive @join__field(
    graph: join__Graph
    external: Boolean
) repeatable on FIELD_DEFINITION | INPUT_FIELD_DEFINITION

directive @join__implements(
    graph: join__Graph!
    interface: String!
) repeatable on OBJECT | INTERFACE

directive @join__unionMember(graph: join__Graph!, member: String!) repeatable on UNION

directive @join__enumValue(graph: join__Graph!) repeatable on ENUM_VALUE

directive @inaccessible on
    | FIELD_DEFINITION
    | OBJECT
    | INTERFACE
    | UNION
    | ARGUMENT_DEFINITION
    | SCALAR
    | ENUM
    | ENUM_VALUE
    | INPUT_OBJECT
    | INPUT_FIELD_DEFINITION

scalar join__FieldSet
"""


@dataclass(frozen=True)
class TypeOrigin:
    """Which subgraphs contributed a type of the supergraph, and with which keys."""

    type_name: str
    subgraphs: Tuple[str, ...]
    keys: Tuple[Key, ...]


@dataclass(frozen=True)
class FieldOrigin:
    """Which subgraphs resolve a field of the supergraph, and how other subgraphs reach them."""

    type_name: str
    field_name: str

    # Subgraphs resolving the field themselves, in subgraph input order.
    subgraphs: Tuple[str, ...]
    external_subgraphs: Tuple[str, ...]

    # Subgraph holding a value of the type to the route of subgraphs resolving the field from
    # there, for subgraphs that can only resolve the field through entity keys.
    key_routes: Dict[str, Tuple[str, ...]]


@dataclass(frozen=True)
class SupergraphSchema:
    """The composed schema, in its client-facing and router-facing forms."""

    api_schema_ast: DocumentNode
    supergraph_ast: DocumentNode
    type_origins: "OrderedDict[str, TypeOrigin]"
    field_origins: "OrderedDict[Tuple[str, str], FieldOrigin]"
    router_directives: Tuple[RouterDirective, ...]

    # Subgraph name to the join__Graph enum value naming it in the supergraph schema.
    subgraph_name_to_graph_value: Dict[str, str]

    @property
    def api_schema_sdl(self) -> str:
        """Return the printed client-facing schema."""
        return print_ast(self.api_schema_ast)

    @property
    def supergraph_sdl(self) -> str:
        """Return the printed router-facing schema."""
        return print_ast(self.supergraph_ast)

    def build_api_schema(self) -> GraphQLSchema:
        """Return the client-facing schema as an executable graphql-core schema."""
        return build_ast_schema(self.api_schema_ast)


def get_graph_enum_value_names(subgraph_names: Sequence[str]) -> Dict[str, str]:
    """Return the join__Graph enum value naming each subgraph.

    Raises:
        - ValueError if two subgraph names map to the same enum value
    """
    subgraph_name_to_graph_value: Dict[str, str] = {}
    graph_value_to_subgraph_name: Dict[str, str] = {}
    for subgraph_name in subgraph_names:
        graph_value = subgraph_name.upper()
        if graph_value[0].isdigit():
            graph_value = "_" + graph_value
        if graph_value in graph_value_to_subgraph_name:
            raise ValueError(
                'Subgraph names "{}" and "{}" both map to supergraph graph name "{}". Subgraph '
                "names must differ in more than letter case.".format(
                    graph_value_to_subgraph_name[graph_value], subgraph_name, graph_value
                )
            )
        graph_value_to_subgraph_name[graph_value] = subgraph_name
        subgraph_name_to_graph_value[subgraph_name] = graph_value
    return subgraph_name_to_graph_value


def check_inaccessible_references(
    merged_types: Dict[str, MergedType],
    root_type_names: Sequence[str],
    accumulator: DiagnosticsAccumulator,
) -> None:
    """Report every client-visible element that would depend on an inaccessible one.

    Root types may not be inaccessible. Accessible fields, arguments and input fields may not
    have an inaccessible type, and required arguments and input fields may not be inaccessible.
    Accessible types may not lose all of their fields or values to @inaccessible.
    """
    for root_type_name in root_type_names:
        if merged_types[root_type_name].inaccessible:
            accumulator.add(
                Diagnostic(
                    kind=DiagnosticKind.REFERENCED_INACCESSIBLE,
                    message='Root operation type "{}" is marked @{}, which would leave clients '
                    "unable to run any such operation.".format(
                        root_type_name, INACCESSIBLE_DIRECTIVE
                    ),
                    type_name=root_type_name,
                    subgraphs=merged_types[root_type_name].subgraphs,
                )
            )

    for merged_type in merged_types.values():
        if merged_type.inaccessible:
            continue
        for merged_field in merged_type.fields:
            if merged_field.inaccessible:
                continue
            _check_type_is_accessible(
                merged_types,
                merged_type,
                merged_field.name,
                "{}.{}".format(merged_type.name, merged_field.name),
                merged_field.type.named_type,
                accumulator,
            )
            for argument in merged_field.arguments:
                _check_input_value(
                    merged_types,
                    merged_type,
                    merged_field.name,
                    "{}.{}({}:)".format(merged_type.name, merged_field.name, argument.name),
                    argument,
                    accumulator,
                )
        for input_field in merged_type.input_fields:
            _check_input_value(
                merged_types,
                merged_type,
                input_field.name,
                "{}.{}".format(merged_type.name, input_field.name),
                input_field,
                accumulator,
            )
        _check_not_emptied(merged_type, accumulator)


def _check_type_is_accessible(
    merged_types: Dict[str, MergedType],
    merged_type: MergedType,
    field_name: str,
    coordinate: str,
    referenced_type_name: str,
    accumulator: DiagnosticsAccumulator,
) -> None:
    """Report the reference if the referenced type is inaccessible."""
    referenced_type = merged_types.get(referenced_type_name)
    if referenced_type is None or not referenced_type.inaccessible:
        return
    accumulator.add(
        Diagnostic(
            kind=DiagnosticKind.REFERENCED_INACCESSIBLE,
            message='"{}" is visible to clients but has type "{}", which is marked @{}.'.format(
                coordinate, referenced_type_name, INACCESSIBLE_DIRECTIVE
            ),
            type_name=merged_type.name,
            field_name=field_name,
            subgraphs=referenced_type.subgraphs,
        )
    )


def _check_input_value(
    merged_types: Dict[str, MergedType],
    merged_type: MergedType,
    field_name: str,
    coordinate: str,
    input_value: MergedInputValue,
    accumulator: DiagnosticsAccumulator,
) -> None:
    """Check an argument or input field of an accessible element."""
    if not input_value.inaccessible:
        _check_type_is_accessible(
            merged_types,
            merged_type,
            field_name,
            coordinate,
            input_value.type.named_type,
            accumulator,
        )
    elif input_value.type.is_non_null and input_value.default_value is None:
        accumulator.add(
            Diagnostic(
                kind=DiagnosticKind.REFERENCED_INACCESSIBLE,
                message='"{}" is required, so it cannot be marked @{}.'.format(
                    coordinate, INACCESSIBLE_DIRECTIVE
                ),
                type_name=merged_type.name,
                field_name=field_name,
                subgraphs=input_value.subgraphs,
            )
        )


def _check_not_emptied(merged_type: MergedType, accumulator: DiagnosticsAccumulator) -> None:
    """Report an accessible type all of whose fields or values are inaccessible."""
    elements: Sequence
    if merged_type.kind in (TypeKind.OBJECT, TypeKind.INTERFACE):
        elements = merged_type.fields
    elif merged_type.kind == TypeKind.INPUT_OBJECT:
        elements = merged_type.input_fields
    elif merged_type.kind == TypeKind.ENUM:
        elements = merged_type.values
    else:
        return
    if elements and all(element.inaccessible for element in elements):
        accumulator.add(
            Diagnostic(
                kind=DiagnosticKind.EMPTY_MERGED_TYPE,
                message='Every field or value of type "{}" is marked @{}, but the type itself is '
                "visible to clients.".format(merged_type.name, INACCESSIBLE_DIRECTIVE),
                type_name=merged_type.name,
                subgraphs=merged_type.subgraphs,
            )
        )


def _make_name(value: str) -> NameNode:
    """Wrap a name in an AST node."""
    return NameNode(value=value)


def _make_directive(directive_name: str, arguments: Sequence[Tuple[str, object]]) -> DirectiveNode:
    """Build a directive application, with arguments given as (name, value node) pairs."""
    return DirectiveNode(
        name=_make_name(directive_name),
        arguments=[
            ArgumentNode(name=_make_name(argument_name), value=value)
            for argument_name, value in arguments
        ],
    )


class _DocumentBuilder:
    """Builds either the API schema or the supergraph schema from the merged types."""

    def __init__(
        self,
        merged_types: Dict[str, MergedType],
        subgraph_name_to_graph_value: Optional[Dict[str, str]],
    ) -> None:
        """Prepare to build the supergraph schema, or the API schema if graph values are None."""
        self._merged_types = merged_types
        self._subgraph_name_to_graph_value = subgraph_name_to_graph_value

    @property
    def _is_supergraph(self) -> bool:
        return self._subgraph_name_to_graph_value is not None

    def _graph(self, subgraph_name: str) -> Tuple[str, EnumValueNode]:
        """Return the graph argument naming the subgraph."""
        if self._subgraph_name_to_graph_value is None:
            raise AssertionError(
                "Unreachable code reached. Join directives requested for the API schema."
            )
        return ("graph", EnumValueNode(value=self._subgraph_name_to_graph_value[subgraph_name]))

    def _is_emitted(self, inaccessible: bool) -> bool:
        """Return True iff an element with the given visibility belongs in the document."""
        return self._is_supergraph or not inaccessible

    def _is_type_emitted(self, type_name: str) -> bool:
        merged_type = self._merged_types.get(type_name)
        return merged_type is None or self._is_emitted(merged_type.inaccessible)

    def _get_directives(
        self, kept_directives: Sequence[DirectiveNode], inaccessible: bool
    ) -> List[DirectiveNode]:
        """Return the directives of an element, with @inaccessible in the supergraph schema."""
        directives = list(kept_directives)
        if self._is_supergraph and inaccessible:
            directives.append(_make_directive(INACCESSIBLE_DIRECTIVE, ()))
        return directives

    def _build_input_value(self, input_value: MergedInputValue) -> InputValueDefinitionNode:
        return InputValueDefinitionNode(
            description=input_value.description,
            name=_make_name(input_value.name),
            type=input_value.type.to_type_node(),
            default_value=input_value.default_value,
            directives=self._get_directives(input_value.directives, input_value.inaccessible),
        )

    def _build_field(
        self, merged_type: MergedType, merged_field: MergedField
    ) -> FieldDefinitionNode:
        directives = self._get_directives(merged_field.directives, merged_field.inaccessible)
        if self._is_supergraph and (
            merged_field.external_subgraphs
            or set(merged_field.subgraphs) != set(merged_type.subgraphs)
        ):
            for subgraph_name in merged_field.subgraphs:
                directives.append(_make_directive("join__field", (self._graph(subgraph_name),)))
            for subgraph_name in merged_field.external_subgraphs:
                directives.append(
                    _make_directive(
                        "join__field",
                        (self._graph(subgraph_name), ("external", BooleanValueNode(value=True))),
                    )
                )
        return FieldDefinitionNode(
            description=merged_field.description,
            name=_make_name(merged_field.name),
            arguments=[
                self._build_input_value(argument)
                for argument in merged_field.arguments
                if self._is_emitted(argument.inaccessible)
            ],
            type=merged_field.type.to_type_node(),
            directives=directives,
        )

    def _build_enum_value(self, value: MergedEnumValue) -> EnumValueDefinitionNode:
        directives = self._get_directives(value.directives, value.inaccessible)
        if self._is_supergraph:
            directives.extend(
                _make_directive("join__enumValue", (self._graph(subgraph_name),))
                for subgraph_name in value.subgraphs
            )
        return EnumValueDefinitionNode(
            description=value.description,
            name=_make_name(value.name),
            directives=directives,
        )

    def _build_type_directives(self, merged_type: MergedType) -> List[DirectiveNode]:
        directives = self._get_directives(merged_type.directives, merged_type.inaccessible)
        if not self._is_supergraph:
            return directives

        for subgraph_name in merged_type.subgraphs:
            subgraph_keys = [key for key in merged_type.keys if key.subgraph == subgraph_name]
            if not subgraph_keys:
                directives.append(_make_directive("join__type", (self._graph(subgraph_name),)))
            for key in subgraph_keys:
                arguments = [
                    self._graph(subgraph_name),
                    ("key", StringValueNode(value=key.field_set)),
                ]
                if not key.resolvable:
                    arguments.append(("resolvable", BooleanValueNode(value=False)))
                directives.append(_make_directive("join__type", arguments))

        for interface_name, subgraph_names in merged_type.interfaces.items():
            directives.extend(
                _make_directive(
                    "join__implements",
                    (
                        self._graph(subgraph_name),
                        ("interface", StringValueNode(value=interface_name)),
                    ),
                )
                for subgraph_name in subgraph_names
            )
        for member_name, subgraph_names in merged_type.members.items():
            directives.extend(
                _make_directive(
                    "join__unionMember",
                    (
                        self._graph(subgraph_name),
                        ("member", StringValueNode(value=member_name)),
                    ),
                )
                for subgraph_name in subgraph_names
            )
        return directives

    def build_type(self, merged_type: MergedType) -> TypeDefinitionNode:
        """Build the definition of one merged type."""
        name = _make_name(merged_type.name)
        directives = self._build_type_directives(merged_type)
        if merged_type.kind in (TypeKind.OBJECT, TypeKind.INTERFACE):
            node_type = (
                ObjectTypeDefinitionNode
                if merged_type.kind == TypeKind.OBJECT
                else InterfaceTypeDefinitionNode
            )
            return node_type(
                description=merged_type.description,
                name=name,
                interfaces=[
                    NamedTypeNode(name=_make_name(interface_name))
                    for interface_name in merged_type.interfaces
                    if self._is_type_emitted(interface_name)
                ],
                directives=directives,
                fields=[
                    self._build_field(merged_type, merged_field)
                    for merged_field in merged_type.fields
                    if self._is_emitted(merged_field.inaccessible)
                ],
            )
        elif merged_type.kind == TypeKind.UNION:
            return UnionTypeDefinitionNode(
                description=merged_type.description,
                name=name,
                directives=directives,
                types=[
                    NamedTypeNode(name=_make_name(member_name))
                    for member_name in merged_type.members
                    if self._is_type_emitted(member_name)
                ],
            )
        elif merged_type.kind == TypeKind.ENUM:
            return EnumTypeDefinitionNode(
                description=merged_type.description,
                name=name,
                directives=directives,
                values=[
                    self._build_enum_value(value)
                    for value in merged_type.values
                    if self._is_emitted(value.inaccessible)
                ],
            )
        elif merged_type.kind == TypeKind.INPUT_OBJECT:
            return InputObjectTypeDefinitionNode(
                description=merged_type.description,
                name=name,
                directives=directives,
                fields=[
                    self._build_input_value(input_field)
                    for input_field in merged_type.input_fields
                    if self._is_emitted(input_field.inaccessible)
                ],
            )
        elif merged_type.kind == TypeKind.SCALAR:
            return ScalarTypeDefinitionNode(
                description=merged_type.description, name=name, directives=directives
            )
        else:
            raise AssertionError(
                "Unreachable code reached. Missed type kind: {}".format(merged_type.kind)
            )

    def build_types(self) -> List[DefinitionNode]:
        """Build the definitions of every emitted merged type, in emission order."""
        return [
            self.build_type(merged_type)
            for merged_type in self._merged_types.values()
            if self._is_emitted(merged_type.inaccessible)
        ]


def _build_schema_definition(root_type_names: Sequence[str]) -> SchemaDefinitionNode:
    """Build the schema definition naming the root operation types that exist."""
    operation_types: List[OperationTypeDefinitionNode] = []
    for operation in ROOT_OPERATION_TYPES:
        root_type_name = CANONICAL_ROOT_TYPE_NAMES[operation]
        if root_type_name in root_type_names:
            operation_types.append(
                OperationTypeDefinitionNode(
                    operation=operation, type=NamedTypeNode(name=_make_name(root_type_name))
                )
            )
    return SchemaDefinitionNode(directives=[], operation_types=operation_types)


def _build_join_graph_enum(
    registry: TypeRegistry, subgraph_name_to_graph_value: Dict[str, str]
) -> EnumTypeDefinitionNode:
    """Build the enum naming every subgraph, with the URL the router reaches it at."""
    return EnumTypeDefinitionNode(
        name=_make_name(JOIN_GRAPH_ENUM_NAME),
        directives=[],
        values=[
            EnumValueDefinitionNode(
                name=_make_name(subgraph_name_to_graph_value[subgraph.name]),
                directives=[
                    _make_directive(
                        "join__graph",
                        (
                            ("name", StringValueNode(value=subgraph.name)),
                            ("url", StringValueNode(value=subgraph.url or "")),
                        ),
                    )
                ],
            )
            for subgraph in registry.subgraphs
        ],
    )


def _get_origins(
    merged_types: Dict[str, MergedType], report: Optional[ResolvabilityReport]
) -> Tuple["OrderedDict[str, TypeOrigin]", "OrderedDict[Tuple[str, str], FieldOrigin]"]:
    """Collect the provenance of every merged type and field."""
    type_origins: "OrderedDict[str, TypeOrigin]" = OrderedDict()
    field_origins: "OrderedDict[Tuple[str, str], FieldOrigin]" = OrderedDict()
    key_routes = report.key_routes if report is not None else {}
    for merged_type in merged_types.values():
        type_origins[merged_type.name] = TypeOrigin(
            type_name=merged_type.name, subgraphs=merged_type.subgraphs, keys=merged_type.keys
        )
        for merged_field in merged_type.fields:
            field_origins[(merged_type.name, merged_field.name)] = FieldOrigin(
                type_name=merged_type.name,
                field_name=merged_field.name,
                subgraphs=merged_field.subgraphs,
                external_subgraphs=merged_field.external_subgraphs,
                key_routes=key_routes.get((merged_type.name, merged_field.name), {}),
            )
    return type_origins, field_origins


def emit_supergraph(
    registry: TypeRegistry,
    merged_types: Dict[str, MergedType],
    composed_directives: ComposedDirectives,
    report: Optional[ResolvabilityReport],
) -> SupergraphSchema:
    """Build the supergraph from error-free composition results.

    Args:
        registry: index of all subgraphs, for root types, names and URLs
        merged_types: merged types in emission order
        composed_directives: the directives that made it into the supergraph
        report: resolvability report with key routes, or None if validation was skipped

    Returns:
        SupergraphSchema with both printed documents and the provenance of every element
    """
    root_type_names = registry.root_type_names
    subgraph_name_to_graph_value = get_graph_enum_value_names(registry.subgraph_names)
    schema_definition = _build_schema_definition(root_type_names)
    executable_definitions: List[DirectiveDefinitionNode] = list(
        composed_directives.executable_definitions
    )

    api_definitions: List[DefinitionNode] = [schema_definition]
    api_definitions.extend(executable_definitions)
    api_definitions.extend(_DocumentBuilder(merged_types, None).build_types())

    join_definitions = list(parse(_JOIN_DEFINITIONS_SDL, no_location=True).definitions)
    supergraph_directive_definitions = sorted(
        [
            definition
            for definition in join_definitions
            if isinstance(definition, DirectiveDefinitionNode)
        ]
        + executable_definitions,
        key=lambda definition: definition.name.value,
    )
    supergraph_definitions: List[DefinitionNode] = [schema_definition]
    supergraph_definitions.extend(supergraph_directive_definitions)
    supergraph_definitions.extend(
        _DocumentBuilder(merged_types, subgraph_name_to_graph_value).build_types()
    )
    supergraph_definitions.extend(
        definition
        for definition in join_definitions
        if not isinstance(definition, DirectiveDefinitionNode)
    )
    supergraph_definitions.append(_build_join_graph_enum(registry, subgraph_name_to_graph_value))

    type_origins, field_origins = _get_origins(merged_types, report)
    logger.debug(
        "Emitted supergraph with %(type_count)d types, %(directive_count)d executable "
        "directives and %(router_count)d router directives.",
        {
            "type_count": len(merged_types),
            "directive_count": len(executable_definitions),
            "router_count": len(composed_directives.router_directives),
        },
    )
    return SupergraphSchema(
        api_schema_ast=DocumentNode(definitions=api_definitions),
        supergraph_ast=DocumentNode(definitions=supergraph_definitions),
        type_origins=type_origins,
        field_origins=field_origins,
        router_directives=composed_directives.router_directives,
        subgraph_name_to_graph_value=subgraph_name_to_graph_value,
    )
