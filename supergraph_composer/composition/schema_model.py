# Copyright 2021-present Kensho Technologies, LLC.
"""Immutable model of subgraph schemas, and the loader that builds it from graphql-core ASTs."""
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum, unique
import logging
import string
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple, Type

from graphql import specified_scalar_types
from graphql.language.ast import (
    DirectiveDefinitionNode,
    DirectiveNode,
    DocumentNode,
    EnumTypeDefinitionNode,
    EnumTypeExtensionNode,
    EnumValueDefinitionNode,
    ExecutableDefinitionNode,
    FieldDefinitionNode,
    InputObjectTypeDefinitionNode,
    InputObjectTypeExtensionNode,
    InputValueDefinitionNode,
    InterfaceTypeDefinitionNode,
    InterfaceTypeExtensionNode,
    ListTypeNode,
    NamedTypeNode,
    NameNode,
    NonNullTypeNode,
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    OperationType,
    ScalarTypeDefinitionNode,
    ScalarTypeExtensionNode,
    SchemaDefinitionNode,
    SchemaExtensionNode,
    SelectionSetNode,
    StringValueNode,
    TypeDefinitionNode,
    TypeExtensionNode,
    TypeNode,
    UnionTypeDefinitionNode,
    UnionTypeExtensionNode,
    ValueNode,
)

from ..ast_manipulation import (
    get_boolean_argument,
    get_directives_by_name,
    get_field_paths,
    get_string_argument,
    has_directive,
    parse_field_set,
)
from ..exceptions import SubgraphStructureError


logger = logging.getLogger(__name__)


KEY_DIRECTIVE = "key"
SHAREABLE_DIRECTIVE = "shareable"
EXTERNAL_DIRECTIVE = "external"
INACCESSIBLE_DIRECTIVE = "inaccessible"
COMPOSE_DIRECTIVE = "composeDirective"

# Directives that control composition. Their applications are consumed by the loader and are never
# copied into the supergraph, and their definitions (if a subgraph spells them out) are ignored.
FEDERATION_DIRECTIVE_NAMES: FrozenSet[str] = frozenset(
    {
        KEY_DIRECTIVE,
        SHAREABLE_DIRECTIVE,
        EXTERNAL_DIRECTIVE,
        INACCESSIBLE_DIRECTIVE,
        COMPOSE_DIRECTIVE,
        "extends",
        "link",
        "override",
        "provides",
        "requires",
        "tag",
    }
)

# Built-in type-system directives whose applications are part of the client-facing schema.
KEPT_DIRECTIVE_NAMES: FrozenSet[str] = frozenset({"deprecated", "specifiedBy"})

# Types and root fields that federation-aware subgraph libraries add to their printed SDL.
# They describe the subgraph protocol rather than the data graph, so they are not composed.
FEDERATION_TYPE_NAMES: FrozenSet[str] = frozenset(
    {"_Any", "_Entity", "_Service", "_FieldSet", "FieldSet"}
)
FEDERATION_TYPE_NAME_PREFIXES: Tuple[str, ...] = ("link__", "federation__", "join__")
FEDERATION_ROOT_FIELD_NAMES: FrozenSet[str] = frozenset({"_entities", "_service"})

builtin_scalar_type_names: FrozenSet[str] = frozenset(specified_scalar_types.keys())

ROOT_OPERATION_TYPES: Tuple[OperationType, ...] = (
    OperationType.QUERY,
    OperationType.MUTATION,
    OperationType.SUBSCRIPTION,
)
CANONICAL_ROOT_TYPE_NAMES: Dict[OperationType, str] = {
    OperationType.QUERY: "Query",
    OperationType.MUTATION: "Mutation",
    OperationType.SUBSCRIPTION: "Subscription",
}

_alphanumeric_and_underscore: FrozenSet[str] = frozenset(
    string.ascii_letters + string.digits + "_"
)


@unique
class TypeKind(Enum):
    """The closed set of named type kinds that can appear in a subgraph."""

    OBJECT = "object"
    INTERFACE = "interface"
    UNION = "union"
    ENUM = "enum"
    INPUT_OBJECT = "input object"
    SCALAR = "scalar"

    @property
    def is_composite(self) -> bool:
        """Return True for kinds whose values carry a selection set."""
        return self in (TypeKind.OBJECT, TypeKind.INTERFACE, TypeKind.UNION)


_NODE_TYPE_TO_KIND: Dict[Type[TypeDefinitionNode], TypeKind] = {
    ObjectTypeDefinitionNode: TypeKind.OBJECT,
    InterfaceTypeDefinitionNode: TypeKind.INTERFACE,
    UnionTypeDefinitionNode: TypeKind.UNION,
    EnumTypeDefinitionNode: TypeKind.ENUM,
    InputObjectTypeDefinitionNode: TypeKind.INPUT_OBJECT,
    ScalarTypeDefinitionNode: TypeKind.SCALAR,
}
_EXTENSION_NODE_TYPE_TO_KIND: Dict[Type[TypeExtensionNode], TypeKind] = {
    ObjectTypeExtensionNode: TypeKind.OBJECT,
    InterfaceTypeExtensionNode: TypeKind.INTERFACE,
    UnionTypeExtensionNode: TypeKind.UNION,
    EnumTypeExtensionNode: TypeKind.ENUM,
    InputObjectTypeExtensionNode: TypeKind.INPUT_OBJECT,
    ScalarTypeExtensionNode: TypeKind.SCALAR,
}


@dataclass(frozen=True)
class TypeReference:
    """A reference to a named type, together with its list and non-null wrapping.

    non_null has one entry per level, outermost first: the type "[Int!]" is represented as
    TypeReference("Int", (False, True)), and its list depth is len(non_null) - 1.
    """

    named_type: str
    non_null: Tuple[bool, ...]

    def __post_init__(self) -> None:
        """Validate fields."""
        if not self.non_null:
            raise AssertionError("The non_null field is expected to be non-empty.")

    @classmethod
    def from_type_node(
        cls, type_node: TypeNode, type_renamings: Optional[Mapping[str, str]] = None
    ) -> "TypeReference":
        """Build a reference from a type AST node, optionally renaming the named type."""
        non_null: List[bool] = []
        current_non_null = False
        while True:
            if isinstance(type_node, NonNullTypeNode):
                current_non_null = True
                type_node = type_node.type
            elif isinstance(type_node, ListTypeNode):
                non_null.append(current_non_null)
                current_non_null = False
                type_node = type_node.type
            elif isinstance(type_node, NamedTypeNode):
                non_null.append(current_non_null)
                break
            else:
                raise AssertionError(
                    "Unreachable code reached. Missed type node type: "
                    '"{}"'.format(type(type_node).__name__)
                )

        named_type = type_node.name.value
        if type_renamings is not None:
            named_type = type_renamings.get(named_type, named_type)
        return cls(named_type=named_type, non_null=tuple(non_null))

    @property
    def list_depth(self) -> int:
        """Return the number of list wrappers around the named type."""
        return len(self.non_null) - 1

    @property
    def is_non_null(self) -> bool:
        """Return True iff the outermost level is non-null."""
        return self.non_null[0]

    def with_non_null(self, non_null: Tuple[bool, ...]) -> "TypeReference":
        """Return a reference to the same named type and list depth with different nullability."""
        if len(non_null) != len(self.non_null):
            raise AssertionError(
                "Cannot change the list depth of {} when changing its nullability to "
                "{}.".format(self, non_null)
            )
        return TypeReference(named_type=self.named_type, non_null=non_null)

    def to_type_node(self) -> TypeNode:
        """Build the equivalent type AST node."""
        type_node: TypeNode = NamedTypeNode(name=NameNode(value=self.named_type))
        if self.non_null[-1]:
            type_node = NonNullTypeNode(type=type_node)
        for level_non_null in reversed(self.non_null[:-1]):
            type_node = ListTypeNode(type=type_node)
            if level_non_null:
                type_node = NonNullTypeNode(type=type_node)
        return type_node

    def __str__(self) -> str:
        """Print the reference in SDL notation, e.g. "[Int!]!"."""
        printed = self.named_type + ("!" if self.non_null[-1] else "")
        for level_non_null in reversed(self.non_null[:-1]):
            printed = "[{}]{}".format(printed, "!" if level_non_null else "")
        return printed


@dataclass(frozen=True)
class InputValueDefinition:
    """A field argument, or a field of an input object type."""

    name: str
    type: TypeReference
    default_value: Optional[ValueNode]
    description: Optional[StringValueNode]
    inaccessible: bool
    # Applications of built-in directives that are kept in the client-facing schema.
    directives: Tuple[DirectiveNode, ...]


@dataclass(frozen=True)
class FieldDefinition:
    """A field of an object or interface type, as defined by one subgraph."""

    name: str
    type: TypeReference
    arguments: Tuple[InputValueDefinition, ...]
    subgraph: str
    description: Optional[StringValueNode]

    # True if the field is marked @shareable, its type definition is marked @shareable, or the
    # field is part of one of the type's keys in this subgraph.
    shareable: bool

    # External fields are declared for typing purposes, but this subgraph cannot resolve them.
    external: bool
    inaccessible: bool
    directives: Tuple[DirectiveNode, ...]

    def get_argument(self, argument_name: str) -> Optional[InputValueDefinition]:
        """Return the argument of the given name, if defined."""
        for argument in self.arguments:
            if argument.name == argument_name:
                return argument
        return None


@dataclass(frozen=True)
class EnumValueDefinition:
    """A value of an enum type, as defined by one subgraph."""

    name: str
    description: Optional[StringValueNode]
    inaccessible: bool
    directives: Tuple[DirectiveNode, ...]


@dataclass(frozen=True)
class Key:
    """The set of fields that uniquely identifies an entity in one subgraph."""

    type_name: str
    subgraph: str

    # Normalized field set, e.g. "id organization { id }".
    field_set: str

    # Root-to-leaf field paths of the field set, e.g. (("id",), ("organization", "id")).
    field_paths: Tuple[Tuple[str, ...], ...]

    # Whether other subgraphs may jump into this subgraph using the key.
    resolvable: bool

    @property
    def identity(self) -> FrozenSet[Tuple[str, ...]]:
        """Return the selection order-independent identity of the field set."""
        return frozenset(self.field_paths)


@dataclass(frozen=True)
class DirectiveApplication:
    """A type-system directive applied somewhere in a subgraph, recorded for router metadata."""

    directive_name: str

    # Schema coordinate of the element the directive is applied to, e.g. "Product.price".
    coordinate: str
    subgraph: str
    node: DirectiveNode


@dataclass(frozen=True)
class TypeDefinition:
    """A named type as defined by one subgraph, with all of its extensions folded in."""

    name: str
    kind: TypeKind
    subgraph: str
    description: Optional[StringValueNode]

    # Object and interface types.
    fields: Tuple[FieldDefinition, ...]
    interfaces: Tuple[str, ...]

    # Input object types.
    input_fields: Tuple[InputValueDefinition, ...]

    # Union types.
    members: Tuple[str, ...]

    # Enum types.
    values: Tuple[EnumValueDefinition, ...]

    keys: Tuple[Key, ...]
    shareable: bool
    inaccessible: bool
    directives: Tuple[DirectiveNode, ...]

    @property
    def is_entity(self) -> bool:
        """Return True iff the type declares at least one key in this subgraph."""
        return bool(self.keys)

    def get_field(self, field_name: str) -> Optional[FieldDefinition]:
        """Return the object or interface field of the given name, if defined."""
        for field_definition in self.fields:
            if field_definition.name == field_name:
                return field_definition
        return None

    def get_input_field(self, field_name: str) -> Optional[InputValueDefinition]:
        """Return the input object field of the given name, if defined."""
        for input_field in self.input_fields:
            if input_field.name == field_name:
                return input_field
        return None


@dataclass(frozen=True)
class SubgraphSchema:
    """An independently authored schema contributed to composition. Immutable once loaded."""

    name: str
    url: Optional[str]

    # Canonical name ("Query", "Mutation", "Subscription") of each root operation type present.
    root_types: Dict[OperationType, str]

    # Type name to its definition, in declaration order.
    types: "OrderedDict[str, TypeDefinition]"

    # Custom directive definitions (federation and built-in directives are excluded).
    directive_definitions: "OrderedDict[str, DirectiveDefinitionNode]"

    # Names (without "@") of type-system directives this subgraph asks to pass through.
    composed_directive_names: FrozenSet[str]

    # Applications of custom directives, used for router metadata of pass-through directives.
    directive_applications: Tuple[DirectiveApplication, ...]

    @classmethod
    def from_ast(
        cls, name: str, document_ast: DocumentNode, url: Optional[str] = None
    ) -> "SubgraphSchema":
        """Load a subgraph from its parsed SDL. The AST is not modified."""
        return load_subgraph(name, document_ast, url=url)

    @property
    def root_type_names(self) -> FrozenSet[str]:
        """Return the names of all root operation types in this subgraph."""
        return frozenset(self.root_types.values())


def check_subgraph_identifier_is_valid(identifier: str) -> None:
    """Check if input is a valid identifier, made of alphanumeric and underscore characters.

    Args:
        identifier: str, used for identifying subgraphs when composing them

    Raises:
        - ValueError if the name is the empty string, or if it consists of characters other
          than alphanumeric characters and underscores
    """
    if not isinstance(identifier, str):
        raise ValueError('Subgraph identifier "{}" is not a string.'.format(identifier))
    if identifier == "":
        raise ValueError("Subgraph identifier must be a nonempty string.")
    illegal_characters = frozenset(identifier) - _alphanumeric_and_underscore
    if illegal_characters:
        raise ValueError(
            'Subgraph identifier "{}" contains illegal characters: {}'.format(
                identifier, sorted(illegal_characters)
            )
        )


def is_federation_type_name(type_name: str) -> bool:
    """Return True iff the type belongs to the subgraph protocol rather than the data graph."""
    return type_name in FEDERATION_TYPE_NAMES or type_name.startswith(
        FEDERATION_TYPE_NAME_PREFIXES
    )


def load_subgraph(
    name: str, document_ast: DocumentNode, url: Optional[str] = None
) -> SubgraphSchema:
    """Build the immutable model of a subgraph from its parsed SDL.

    Extensions of a type within the subgraph are folded into its definition; an extension of a
    type that the subgraph never defines acts as the definition. Custom root operation type names
    are renamed to "Query", "Mutation" and "Subscription".

    Args:
        name: identifier of the subgraph, made of alphanumeric and underscore characters
        document_ast: parsed SDL of the subgraph
        url: optional routing URL of the subgraph, passed through to the supergraph metadata

    Returns:
        SubgraphSchema describing the subgraph

    Raises:
        - ValueError if the subgraph identifier is invalid
        - SubgraphStructureError if the document contains executable definitions, defines a
          type or directive twice, declares a root operation type that is not an object type,
          or contains an unparseable key field set
    """
    check_subgraph_identifier_is_valid(name)

    root_type_nodes: Dict[OperationType, str] = {}
    composed_directive_names: List[str] = []
    directive_definitions: "OrderedDict[str, DirectiveDefinitionNode]" = OrderedDict()
    type_nodes: "OrderedDict[str, List[TypeDefinitionNode]]" = OrderedDict()
    extension_nodes: "OrderedDict[str, List[TypeExtensionNode]]" = OrderedDict()

    for definition in document_ast.definitions:
        if isinstance(definition, ExecutableDefinitionNode):
            raise SubgraphStructureError(
                'Subgraph "{}" contains an executable definition of type "{}", which is not '
                "allowed in a schema document.".format(name, type(definition).__name__)
            )
        elif isinstance(definition, (SchemaDefinitionNode, SchemaExtensionNode)):
            for operation_type_definition in definition.operation_types or ():
                operation = operation_type_definition.operation
                if operation in root_type_nodes:
                    raise SubgraphStructureError(
                        'Subgraph "{}" declares the {} root operation type more than '
                        "once.".format(name, operation.value)
                    )
                root_type_nodes[operation] = operation_type_definition.type.name.value
            for directive in get_directives_by_name(definition.directives, COMPOSE_DIRECTIVE):
                composed_name = get_string_argument(directive, "name")
                if composed_name is None:
                    raise SubgraphStructureError(
                        'Subgraph "{}" applies @{} without a "name" argument.'.format(
                            name, COMPOSE_DIRECTIVE
                        )
                    )
                composed_directive_names.append(composed_name.lstrip("@"))
        elif isinstance(definition, DirectiveDefinitionNode):
            directive_name = definition.name.value
            if directive_name in FEDERATION_DIRECTIVE_NAMES:
                continue
            if directive_name in directive_definitions:
                raise SubgraphStructureError(
                    'Subgraph "{}" defines directive "@{}" more than once.'.format(
                        name, directive_name
                    )
                )
            directive_definitions[directive_name] = definition
        elif isinstance(definition, TypeDefinitionNode):
            type_name = definition.name.value
            if type_name in type_nodes:
                raise SubgraphStructureError(
                    'Subgraph "{}" defines type "{}" more than once.'.format(name, type_name)
                )
            type_nodes[type_name] = [definition]
        elif isinstance(definition, TypeExtensionNode):
            extension_nodes.setdefault(definition.name.value, []).append(definition)
        else:  # All definition types should've been covered
            raise AssertionError(
                "Unreachable code reached. Missed definition type: "
                '"{}"'.format(type(definition).__name__)
            )

    all_type_names = list(type_nodes)
    all_type_names.extend(
        type_name for type_name in extension_nodes if type_name not in type_nodes
    )

    root_types, type_renamings = _get_root_types(name, root_type_nodes, all_type_names)

    types: "OrderedDict[str, TypeDefinition]" = OrderedDict()
    directive_applications: List[DirectiveApplication] = []
    for type_name in all_type_names:
        if type_name in builtin_scalar_type_names or is_federation_type_name(type_name):
            continue
        nodes: List = list(type_nodes.get(type_name, ())) + list(extension_nodes.get(type_name, ()))
        type_definition, applications = _build_type_definition(
            name, nodes, type_renamings, root_types
        )
        types[type_definition.name] = type_definition
        directive_applications.extend(applications)

    for operation, root_type_name in root_types.items():
        root_type = types.get(root_type_name)
        if root_type is None or root_type.kind != TypeKind.OBJECT:
            raise SubgraphStructureError(
                'The {} root operation type "{}" of subgraph "{}" is not defined as an object '
                "type.".format(operation.value, root_type_name, name)
            )

    logger.debug(
        "Loaded subgraph %(subgraph)s with %(type_count)d types and %(directive_count)d "
        "custom directive definitions.",
        {
            "subgraph": name,
            "type_count": len(types),
            "directive_count": len(directive_definitions),
        },
    )
    return SubgraphSchema(
        name=name,
        url=url,
        root_types=root_types,
        types=types,
        directive_definitions=directive_definitions,
        composed_directive_names=frozenset(composed_directive_names),
        directive_applications=tuple(directive_applications),
    )


def _get_root_types(
    subgraph_name: str,
    root_type_nodes: Dict[OperationType, str],
    all_type_names: Sequence[str],
) -> Tuple[Dict[OperationType, str], Dict[str, str]]:
    """Return the canonical root types of the subgraph, and the renamings needed to reach them."""
    if not root_type_nodes:
        # Without a schema definition, root types are found by their conventional names.
        root_type_nodes = {
            operation: canonical_name
            for operation, canonical_name in CANONICAL_ROOT_TYPE_NAMES.items()
            if canonical_name in all_type_names
        }

    root_types: Dict[OperationType, str] = {}
    type_renamings: Dict[str, str] = {}
    for operation in ROOT_OPERATION_TYPES:
        declared_name = root_type_nodes.get(operation)
        if declared_name is None:
            continue
        canonical_name = CANONICAL_ROOT_TYPE_NAMES[operation]
        root_types[operation] = canonical_name
        if declared_name != canonical_name:
            if canonical_name in all_type_names:
                raise SubgraphStructureError(
                    'Subgraph "{}" uses "{}" as its {} root operation type, but also defines a '
                    'type named "{}", which would clash with the canonical root type name. '
                    "Consider renaming that type.".format(
                        subgraph_name, declared_name, operation.value, canonical_name
                    )
                )
            type_renamings[declared_name] = canonical_name

    return root_types, type_renamings


def _get_kind(subgraph_name: str, nodes: Sequence) -> TypeKind:
    """Return the kind shared by a type definition and all of its extensions."""
    kinds = set()
    for node in nodes:
        kind = _NODE_TYPE_TO_KIND.get(type(node)) or _EXTENSION_NODE_TYPE_TO_KIND.get(type(node))
        if kind is None:
            raise AssertionError(
                "Unreachable code reached. Missed type definition node type: "
                '"{}"'.format(type(node).__name__)
            )
        kinds.add(kind)
    if len(kinds) != 1:
        raise SubgraphStructureError(
            'Type "{}" in subgraph "{}" is extended with a different kind than it is defined '
            "with: {}.".format(
                nodes[0].name.value, subgraph_name, sorted(kind.value for kind in kinds)
            )
        )
    return kinds.pop()


def _get_kept_directives(
    directives: Optional[Sequence[DirectiveNode]],
    subgraph_name: str,
    coordinate: str,
    applications: List[DirectiveApplication],
) -> Tuple[DirectiveNode, ...]:
    """Split directive applications into kept built-ins and recorded custom applications.

    Applications of federation directives are dropped, since the loader consumes them.
    """
    kept: List[DirectiveNode] = []
    for directive in directives or ():
        directive_name = directive.name.value
        if directive_name in KEPT_DIRECTIVE_NAMES:
            kept.append(directive)
        elif directive_name not in FEDERATION_DIRECTIVE_NAMES:
            applications.append(
                DirectiveApplication(
                    directive_name=directive_name,
                    coordinate=coordinate,
                    subgraph=subgraph_name,
                    node=directive,
                )
            )
    return tuple(kept)


def _build_keys(
    subgraph_name: str, type_name: str, directives: Sequence[DirectiveNode]
) -> Tuple[Key, ...]:
    """Build the keys declared on a type definition and its extensions."""
    keys: List[Key] = []
    for directive in get_directives_by_name(directives, KEY_DIRECTIVE):
        field_set = get_string_argument(directive, "fields")
        if field_set is None:
            raise SubgraphStructureError(
                'A @{} directive on type "{}" in subgraph "{}" is missing its "fields" '
                "argument.".format(KEY_DIRECTIVE, type_name, subgraph_name)
            )
        selection_set = parse_field_set(field_set)
        keys.append(
            Key(
                type_name=type_name,
                subgraph=subgraph_name,
                field_set=print_field_set(selection_set),
                field_paths=get_field_paths(selection_set),
                resolvable=get_boolean_argument(directive, "resolvable", True),
            )
        )
    return tuple(keys)


def print_field_set(selection_set: SelectionSetNode) -> str:
    """Print a selection set on one line, without the outermost braces."""
    printed_selections = []
    for selection in selection_set.selections:
        if selection.selection_set is None:
            printed_selections.append(selection.name.value)
        else:
            printed_selections.append(
                "{} {{ {} }}".format(selection.name.value, print_field_set(selection.selection_set))
            )
    return " ".join(printed_selections)


def _build_input_value(
    node: InputValueDefinitionNode,
    subgraph_name: str,
    coordinate: str,
    type_renamings: Mapping[str, str],
    applications: List[DirectiveApplication],
) -> InputValueDefinition:
    """Build the model of an argument or input field."""
    return InputValueDefinition(
        name=node.name.value,
        type=TypeReference.from_type_node(node.type, type_renamings),
        default_value=node.default_value,
        description=node.description,
        inaccessible=has_directive(node.directives, INACCESSIBLE_DIRECTIVE),
        directives=_get_kept_directives(node.directives, subgraph_name, coordinate, applications),
    )


def _build_field(
    node: FieldDefinitionNode,
    subgraph_name: str,
    type_name: str,
    type_is_shareable: bool,
    key_field_names: FrozenSet[str],
    type_renamings: Mapping[str, str],
    applications: List[DirectiveApplication],
) -> FieldDefinition:
    """Build the model of an object or interface field."""
    field_name = node.name.value
    field_coordinate = "{}.{}".format(type_name, field_name)
    arguments = tuple(
        _build_input_value(
            argument_node,
            subgraph_name,
            "{}({}:)".format(field_coordinate, argument_node.name.value),
            type_renamings,
            applications,
        )
        for argument_node in node.arguments or ()
    )
    return FieldDefinition(
        name=field_name,
        type=TypeReference.from_type_node(node.type, type_renamings),
        arguments=arguments,
        subgraph=subgraph_name,
        description=node.description,
        shareable=(
            type_is_shareable
            or field_name in key_field_names
            or has_directive(node.directives, SHAREABLE_DIRECTIVE)
        ),
        external=has_directive(node.directives, EXTERNAL_DIRECTIVE),
        inaccessible=has_directive(node.directives, INACCESSIBLE_DIRECTIVE),
        directives=_get_kept_directives(
            node.directives, subgraph_name, field_coordinate, applications
        ),
    )


def _build_type_definition(
    subgraph_name: str,
    nodes: Sequence,
    type_renamings: Mapping[str, str],
    root_types: Mapping[OperationType, str],
) -> Tuple[TypeDefinition, List[DirectiveApplication]]:
    """Fold a type definition and its extensions into one TypeDefinition."""
    kind = _get_kind(subgraph_name, nodes)
    declared_name = nodes[0].name.value
    type_name = type_renamings.get(declared_name, declared_name)
    is_root_type = type_name in root_types.values()
    applications: List[DirectiveApplication] = []

    all_directives: List[DirectiveNode] = []
    for node in nodes:
        all_directives.extend(node.directives or ())

    keys = _build_keys(subgraph_name, type_name, all_directives)
    key_field_names = frozenset(path[0] for key in keys for path in key.field_paths)

    description = None
    fields: List[FieldDefinition] = []
    input_fields: List[InputValueDefinition] = []
    interfaces: List[str] = []
    members: List[str] = []
    values: List[EnumValueDefinition] = []
    for node in nodes:
        if description is None:
            description = getattr(node, "description", None)

        # @shareable on a definition or extension applies to the fields declared within it.
        node_is_shareable = has_directive(node.directives, SHAREABLE_DIRECTIVE)
        for field_node in getattr(node, "fields", None) or ():
            if kind == TypeKind.INPUT_OBJECT:
                input_fields.append(
                    _build_input_value(
                        field_node,
                        subgraph_name,
                        "{}.{}".format(type_name, field_node.name.value),
                        type_renamings,
                        applications,
                    )
                )
            elif is_root_type and field_node.name.value in FEDERATION_ROOT_FIELD_NAMES:
                continue
            else:
                fields.append(
                    _build_field(
                        field_node,
                        subgraph_name,
                        type_name,
                        node_is_shareable,
                        key_field_names,
                        type_renamings,
                        applications,
                    )
                )
        for interface_node in getattr(node, "interfaces", None) or ():
            interfaces.append(interface_node.name.value)
        for member_node in getattr(node, "types", None) or ():
            members.append(type_renamings.get(member_node.name.value, member_node.name.value))
        for value_node in getattr(node, "values", None) or ():
            values.append(_build_enum_value(value_node, subgraph_name, type_name, applications))

    _check_no_duplicate_names(
        subgraph_name,
        type_name,
        [field_definition.name for field_definition in fields]
        + [input_field.name for input_field in input_fields]
        + [value.name for value in values],
    )

    type_directives = _get_kept_directives(all_directives, subgraph_name, type_name, applications)
    type_definition = TypeDefinition(
        name=type_name,
        kind=kind,
        subgraph=subgraph_name,
        description=description,
        fields=tuple(fields),
        interfaces=tuple(interfaces),
        input_fields=tuple(input_fields),
        members=tuple(members),
        values=tuple(values),
        keys=keys,
        shareable=has_directive(all_directives, SHAREABLE_DIRECTIVE),
        inaccessible=has_directive(all_directives, INACCESSIBLE_DIRECTIVE),
        directives=type_directives,
    )
    return type_definition, applications


def _build_enum_value(
    node: EnumValueDefinitionNode,
    subgraph_name: str,
    type_name: str,
    applications: List[DirectiveApplication],
) -> EnumValueDefinition:
    """Build the model of an enum value."""
    value_name = node.name.value
    return EnumValueDefinition(
        name=value_name,
        description=node.description,
        inaccessible=has_directive(node.directives, INACCESSIBLE_DIRECTIVE),
        directives=_get_kept_directives(
            node.directives, subgraph_name, "{}.{}".format(type_name, value_name), applications
        ),
    )


def _check_no_duplicate_names(subgraph_name: str, type_name: str, names: Sequence[str]) -> None:
    """Raise SubgraphStructureError if a type's definition and extensions repeat a name."""
    seen = set()
    for name in names:
        if name in seen:
            raise SubgraphStructureError(
                'Type "{}" in subgraph "{}" declares "{}" more than once.'.format(
                    type_name, subgraph_name, name
                )
            )
        seen.add(name)
