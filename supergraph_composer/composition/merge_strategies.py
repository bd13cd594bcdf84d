# Copyright 2021-present Kensho Technologies, LLC.
"""Merge the per-subgraph definitions of each type name into one supergraph definition.

Each type kind has its own merge function:
- object, interface and union types take the union of their fields or members;
- input object types and field arguments take the intersection of their input values;
- enum types take the union, intersection or exact match of their values, depending on whether
  the enum is used only in responses, only in arguments, or in both;
- scalar types have no structure to merge.
"""
from collections import OrderedDict
from dataclasses import dataclass
import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from funcy import ldistinct
from graphql.language.ast import DirectiveNode, StringValueNode, ValueNode

from ..global_utils import map_in_order
from .diagnostics import Diagnostic, DiagnosticKind, DiagnosticsAccumulator
from .options import CompositionOptions
from .schema_model import (
    EnumValueDefinition,
    FieldDefinition,
    InputValueDefinition,
    Key,
    TypeDefinition,
    TypeKind,
    TypeReference,
)
from .type_registry import TypeRegistry
from .usage_classifier import EnumUsage


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergedInputValue:
    """A field argument or input object field that survived the intersection."""

    name: str
    type: TypeReference
    default_value: Optional[ValueNode]
    description: Optional[StringValueNode]
    inaccessible: bool
    directives: Tuple[DirectiveNode, ...]
    subgraphs: Tuple[str, ...]


@dataclass(frozen=True)
class MergedField:
    """An object or interface field of the supergraph."""

    name: str
    type: TypeReference
    arguments: Tuple[MergedInputValue, ...]
    description: Optional[StringValueNode]
    inaccessible: bool
    directives: Tuple[DirectiveNode, ...]

    # Subgraphs that can resolve the field themselves, in subgraph input order.
    subgraphs: Tuple[str, ...]

    # Subgraphs that declare the field as @external.
    external_subgraphs: Tuple[str, ...]

    def get_argument(self, argument_name: str) -> Optional[MergedInputValue]:
        """Return the argument of the given name, if it survived the merge."""
        for argument in self.arguments:
            if argument.name == argument_name:
                return argument
        return None


@dataclass(frozen=True)
class MergedEnumValue:
    """An enum value of the supergraph."""

    name: str
    description: Optional[StringValueNode]
    inaccessible: bool
    directives: Tuple[DirectiveNode, ...]
    subgraphs: Tuple[str, ...]


@dataclass(frozen=True)
class MergedType:
    """A named type of the supergraph, with the provenance of each of its parts."""

    name: str
    kind: TypeKind
    description: Optional[StringValueNode]
    inaccessible: bool
    directives: Tuple[DirectiveNode, ...]

    # Subgraphs defining the type, in subgraph input order.
    subgraphs: Tuple[str, ...]

    fields: Tuple[MergedField, ...]
    input_fields: Tuple[MergedInputValue, ...]
    values: Tuple[MergedEnumValue, ...]

    # Implemented interface or union member name to the subgraphs that declare it.
    interfaces: Dict[str, Tuple[str, ...]]
    members: Dict[str, Tuple[str, ...]]

    # Keys of every subgraph, in subgraph input order.
    keys: Tuple[Key, ...]

    @property
    def is_entity(self) -> bool:
        """Return True iff the type declares a key in at least one subgraph."""
        return bool(self.keys)

    def get_field(self, field_name: str) -> Optional[MergedField]:
        """Return the object or interface field of the given name, if present."""
        for merged_field in self.fields:
            if merged_field.name == field_name:
                return merged_field
        return None


MergeFunction = Callable[
    [Sequence[TypeDefinition], Optional[EnumUsage], List[Diagnostic]], MergedType
]


def _first_description(candidates: Sequence) -> Optional[StringValueNode]:
    """Return the first description provided, in subgraph input order."""
    for candidate in candidates:
        if candidate.description is not None:
            return candidate.description
    return None


def _first_directives(candidates: Sequence) -> Tuple[DirectiveNode, ...]:
    """Return the kept directive applications of the first candidate that has any."""
    for candidate in candidates:
        if candidate.directives:
            return candidate.directives
    return ()


def _format_subgraphs(subgraph_names: Sequence[str]) -> str:
    """Format subgraph names for diagnostic messages."""
    return ", ".join('"{}"'.format(subgraph_name) for subgraph_name in subgraph_names)


def merge_output_types(types: Sequence[TypeReference]) -> Optional[TypeReference]:
    """Return the output type all the given types can satisfy, or None if there is none.

    The types must agree on the named type and list depth. A level of the merged type is non-null
    only if it is non-null in every input, since a subgraph returning null there must be allowed
    to do so.
    """
    first_type = types[0]
    for other_type in types[1:]:
        if (
            other_type.named_type != first_type.named_type
            or other_type.list_depth != first_type.list_depth
        ):
            return None
    return first_type.with_non_null(
        tuple(all(levels) for levels in zip(*(merged_type.non_null for merged_type in types)))
    )


def merge_input_types(types: Sequence[TypeReference]) -> Optional[TypeReference]:
    """Return the input type every subgraph accepts, or None if there is none.

    The types must agree on the named type and list depth. A level of the merged type is non-null
    if it is non-null in any input, since the value must be acceptable to every subgraph.
    """
    first_type = types[0]
    for other_type in types[1:]:
        if (
            other_type.named_type != first_type.named_type
            or other_type.list_depth != first_type.list_depth
        ):
            return None
    return first_type.with_non_null(
        tuple(any(levels) for levels in zip(*(merged_type.non_null for merged_type in types)))
    )


def _merge_input_values(
    parent_coordinate: str,
    type_name: str,
    field_name: Optional[str],
    per_subgraph_values: Sequence[Tuple[str, Sequence[InputValueDefinition]]],
    report_type_conflicts: bool,
    diagnostics: List[Diagnostic],
) -> Tuple[MergedInputValue, ...]:
    """Intersect the input values (arguments or input fields) contributed by several subgraphs.

    Args:
        parent_coordinate: schema coordinate of the field or input type owning the values,
                           used in messages
        type_name: name of the type owning the values
        field_name: name of the field owning the values, if they are arguments
        per_subgraph_values: (subgraph name, input values) for every contributing subgraph
        report_type_conflicts: whether to report values whose types cannot be merged. The
                               arguments of object fields are type-checked by the shareable
                               compatibility checker instead.
        diagnostics: receives InputIntersectionNonNullLoss and FieldTypeConflict diagnostics

    Returns:
        the merged values present in every contributing subgraph, in first-appearance order
    """
    contributing_subgraphs = [subgraph_name for subgraph_name, _ in per_subgraph_values]
    name_to_definitions: "OrderedDict[str, List[Tuple[str, InputValueDefinition]]]" = (
        OrderedDict()
    )
    for subgraph_name, input_values in per_subgraph_values:
        for input_value in input_values:
            name_to_definitions.setdefault(input_value.name, []).append(
                (subgraph_name, input_value)
            )

    merged_values: List[MergedInputValue] = []
    for value_name, definitions in name_to_definitions.items():
        defining_subgraphs = [subgraph_name for subgraph_name, _ in definitions]
        value_coordinate = (
            "{}({}:)".format(parent_coordinate, value_name)
            if field_name is not None
            else "{}.{}".format(parent_coordinate, value_name)
        )
        if len(definitions) < len(per_subgraph_values):
            missing_subgraphs = [
                subgraph_name
                for subgraph_name in contributing_subgraphs
                if subgraph_name not in defining_subgraphs
            ]
            required_subgraphs = [
                subgraph_name
                for subgraph_name, definition in definitions
                if definition.type.is_non_null
            ]
            if required_subgraphs:
                diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.INPUT_INTERSECTION_NON_NULL_LOSS,
                        message='"{}" is non-null in subgraph(s) {} but is not defined in '
                        "subgraph(s) {}. Input values are merged by intersection, so it would be "
                        "dropped although some subgraphs require it.".format(
                            value_coordinate,
                            _format_subgraphs(required_subgraphs),
                            _format_subgraphs(missing_subgraphs),
                        ),
                        type_name=type_name,
                        field_name=field_name if field_name is not None else value_name,
                        subgraphs=tuple(contributing_subgraphs),
                    )
                )
            else:
                logger.info(
                    'Dropping "%(coordinate)s", since subgraph(s) %(missing)s do not define it.',
                    {
                        "coordinate": value_coordinate,
                        "missing": _format_subgraphs(missing_subgraphs),
                    },
                )
            continue

        input_values = [definition for _, definition in definitions]
        merged_type = merge_input_types([input_value.type for input_value in input_values])
        if merged_type is None:
            if report_type_conflicts:
                diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.FIELD_TYPE_CONFLICT,
                        message='"{}" has incompatible types in different subgraphs: {}.'.format(
                            value_coordinate,
                            ", ".join(
                                '"{}" in "{}"'.format(definition.type, subgraph_name)
                                for subgraph_name, definition in definitions
                            ),
                        ),
                        type_name=type_name,
                        field_name=field_name if field_name is not None else value_name,
                        subgraphs=tuple(defining_subgraphs),
                    )
                )
            merged_type = input_values[0].type

        default_value = None
        for input_value in input_values:
            if input_value.default_value is not None:
                default_value = input_value.default_value
                break

        merged_values.append(
            MergedInputValue(
                name=value_name,
                type=merged_type,
                default_value=default_value,
                description=_first_description(input_values),
                inaccessible=any(input_value.inaccessible for input_value in input_values),
                directives=_first_directives(input_values),
                subgraphs=tuple(defining_subgraphs),
            )
        )
    return tuple(merged_values)


def _merge_field(
    type_definitions: Sequence[TypeDefinition],
    field_definitions: Sequence[FieldDefinition],
    diagnostics: List[Diagnostic],
) -> MergedField:
    """Merge the definitions of one object or interface field."""
    kind = type_definitions[0].kind
    type_name = type_definitions[0].name
    field_name = field_definitions[0].name
    resolving_definitions = [
        field_definition for field_definition in field_definitions if not field_definition.external
    ]
    contributing_definitions = resolving_definitions or list(field_definitions)

    merged_type = merge_output_types(
        [field_definition.type for field_definition in contributing_definitions]
    )
    if merged_type is None:
        if kind == TypeKind.INTERFACE:
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.FIELD_TYPE_CONFLICT,
                    message='Interface field "{}.{}" has incompatible types in different '
                    "subgraphs: {}.".format(
                        type_name,
                        field_name,
                        ", ".join(
                            '"{}" in "{}"'.format(field_definition.type, field_definition.subgraph)
                            for field_definition in contributing_definitions
                        ),
                    ),
                    type_name=type_name,
                    field_name=field_name,
                    subgraphs=tuple(
                        field_definition.subgraph for field_definition in contributing_definitions
                    ),
                )
            )
        # Object field type conflicts are reported by the shareable compatibility checker.
        merged_type = contributing_definitions[0].type

    arguments = _merge_input_values(
        "{}.{}".format(type_name, field_name),
        type_name,
        field_name,
        [
            (field_definition.subgraph, field_definition.arguments)
            for field_definition in contributing_definitions
        ],
        kind != TypeKind.OBJECT,
        diagnostics,
    )

    return MergedField(
        name=field_name,
        type=merged_type,
        arguments=arguments,
        description=_first_description(field_definitions),
        inaccessible=any(field_definition.inaccessible for field_definition in field_definitions),
        directives=_first_directives(field_definitions),
        subgraphs=tuple(field_definition.subgraph for field_definition in resolving_definitions),
        external_subgraphs=tuple(
            field_definition.subgraph
            for field_definition in field_definitions
            if field_definition.external
        ),
    )


def _collect_declarations(
    definitions: Sequence[TypeDefinition], get_names: Callable[[TypeDefinition], Sequence[str]]
) -> Dict[str, Tuple[str, ...]]:
    """Map each declared name to the subgraphs declaring it, in first-appearance order."""
    name_to_subgraphs: "OrderedDict[str, List[str]]" = OrderedDict()
    for definition in definitions:
        for name in get_names(definition):
            name_to_subgraphs.setdefault(name, []).append(definition.subgraph)
    return OrderedDict(
        (name, tuple(subgraph_names)) for name, subgraph_names in name_to_subgraphs.items()
    )


def _make_merged_type(definitions: Sequence[TypeDefinition], **kwargs) -> MergedType:
    """Build a MergedType with the type-level properties shared by every kind."""
    type_properties = dict(
        name=definitions[0].name,
        kind=definitions[0].kind,
        description=_first_description(definitions),
        inaccessible=any(definition.inaccessible for definition in definitions),
        directives=_first_directives(definitions),
        subgraphs=tuple(definition.subgraph for definition in definitions),
        fields=(),
        input_fields=(),
        values=(),
        interfaces={},
        members={},
        keys=tuple(key for definition in definitions for key in definition.keys),
    )
    type_properties.update(kwargs)
    return MergedType(**type_properties)


def _merge_object_or_interface_type(
    definitions: Sequence[TypeDefinition],
    enum_usage: Optional[EnumUsage],
    diagnostics: List[Diagnostic],
) -> MergedType:
    """Union strategy: the merged type has every field that any subgraph defines."""
    field_name_to_definitions: "OrderedDict[str, List[FieldDefinition]]" = OrderedDict()
    for definition in definitions:
        for field_definition in definition.fields:
            field_name_to_definitions.setdefault(field_definition.name, []).append(
                field_definition
            )

    fields = tuple(
        _merge_field(definitions, field_definitions, diagnostics)
        for field_definitions in field_name_to_definitions.values()
    )
    return _make_merged_type(
        definitions,
        fields=fields,
        interfaces=_collect_declarations(definitions, lambda definition: definition.interfaces),
    )


def _merge_union_type(
    definitions: Sequence[TypeDefinition],
    enum_usage: Optional[EnumUsage],
    diagnostics: List[Diagnostic],
) -> MergedType:
    """Union strategy: the merged union has every member that any subgraph declares."""
    return _make_merged_type(
        definitions,
        members=_collect_declarations(definitions, lambda definition: definition.members),
    )


def _merge_input_object_type(
    definitions: Sequence[TypeDefinition],
    enum_usage: Optional[EnumUsage],
    diagnostics: List[Diagnostic],
) -> MergedType:
    """Intersection strategy: the merged input type has the fields every subgraph defines."""
    type_name = definitions[0].name
    input_fields = _merge_input_values(
        type_name,
        type_name,
        None,
        [(definition.subgraph, definition.input_fields) for definition in definitions],
        True,
        diagnostics,
    )
    if not input_fields:
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.EMPTY_MERGED_TYPE,
                message='Input object type "{}" has no field that is defined in every one of '
                "subgraphs {}, so it would be empty in the supergraph.".format(
                    type_name,
                    _format_subgraphs([definition.subgraph for definition in definitions]),
                ),
                type_name=type_name,
                subgraphs=tuple(definition.subgraph for definition in definitions),
            )
        )
    return _make_merged_type(definitions, input_fields=input_fields)


def _merge_enum_values(
    definitions: Sequence[TypeDefinition], value_names: Sequence[str]
) -> Tuple[MergedEnumValue, ...]:
    """Merge the definitions of the given values, in the given order."""
    name_to_definitions: Dict[str, List[Tuple[str, EnumValueDefinition]]] = {}
    for definition in definitions:
        for value in definition.values:
            name_to_definitions.setdefault(value.name, []).append((definition.subgraph, value))

    merged_values = []
    for value_name in value_names:
        value_definitions = [value for _, value in name_to_definitions[value_name]]
        merged_values.append(
            MergedEnumValue(
                name=value_name,
                description=_first_description(value_definitions),
                inaccessible=any(value.inaccessible for value in value_definitions),
                directives=_first_directives(value_definitions),
                subgraphs=tuple(subgraph for subgraph, _ in name_to_definitions[value_name]),
            )
        )
    return tuple(merged_values)


def _merge_enum_type(
    definitions: Sequence[TypeDefinition],
    enum_usage: Optional[EnumUsage],
    diagnostics: List[Diagnostic],
) -> MergedType:
    """Union, intersection or exact-match strategy, depending on where the enum is used."""
    if enum_usage is None:
        raise AssertionError(
            'Unreachable code reached. Enum type "{}" was not classified.'.format(
                definitions[0].name
            )
        )
    type_name = definitions[0].name
    all_subgraphs = tuple(definition.subgraph for definition in definitions)
    all_value_names = ldistinct(
        value.name for definition in definitions for value in definition.values
    )
    value_name_sets = [
        frozenset(value.name for value in definition.values) for definition in definitions
    ]

    if enum_usage in (EnumUsage.OUTPUT_ONLY, EnumUsage.UNUSED):
        value_names = all_value_names
    elif enum_usage == EnumUsage.INPUT_ONLY:
        value_names = [
            value_name
            for value_name in all_value_names
            if all(value_name in value_name_set for value_name_set in value_name_sets)
        ]
        dropped_value_names = [
            value_name for value_name in all_value_names if value_name not in value_names
        ]
        if dropped_value_names:
            logger.info(
                "Dropping values %(values)s of input enum %(type_name)s, since not every "
                "subgraph defines them.",
                {"values": dropped_value_names, "type_name": type_name},
            )
        if not value_names:
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.EMPTY_MERGED_TYPE,
                    message='Enum type "{}" is only used as an input, so its values are merged by '
                    "intersection, but no value is defined in every one of subgraphs "
                    "{}.".format(type_name, _format_subgraphs(all_subgraphs)),
                    type_name=type_name,
                    subgraphs=all_subgraphs,
                )
            )
    elif enum_usage == EnumUsage.BOTH:
        value_names = all_value_names
        mismatches = []
        for definition, value_name_set in zip(definitions, value_name_sets):
            missing_value_names = [
                value_name for value_name in all_value_names if value_name not in value_name_set
            ]
            if missing_value_names:
                mismatches.append(
                    'subgraph "{}" lacks {}'.format(definition.subgraph, missing_value_names)
                )
        if mismatches:
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.ENUM_EXACT_MATCH_MISMATCH,
                    message='Enum type "{}" is used both as an input and as an output, so every '
                    "subgraph defining it must define exactly the same values, but {}.".format(
                        type_name, "; ".join(mismatches)
                    ),
                    type_name=type_name,
                    subgraphs=all_subgraphs,
                )
            )
    else:
        raise AssertionError(
            "Unreachable code reached. Missed enum usage: {}".format(enum_usage)
        )

    return _make_merged_type(definitions, values=_merge_enum_values(definitions, value_names))


def _merge_scalar_type(
    definitions: Sequence[TypeDefinition],
    enum_usage: Optional[EnumUsage],
    diagnostics: List[Diagnostic],
) -> MergedType:
    """Scalars have no structure to merge."""
    return _make_merged_type(definitions)


_MERGE_FUNCTIONS: Dict[TypeKind, MergeFunction] = {
    TypeKind.OBJECT: _merge_object_or_interface_type,
    TypeKind.INTERFACE: _merge_object_or_interface_type,
    TypeKind.UNION: _merge_union_type,
    TypeKind.ENUM: _merge_enum_type,
    TypeKind.INPUT_OBJECT: _merge_input_object_type,
    TypeKind.SCALAR: _merge_scalar_type,
}


def merge_type(
    definitions: Sequence[TypeDefinition], enum_usage: Optional[EnumUsage] = None
) -> Tuple[MergedType, List[Diagnostic]]:
    """Merge every subgraph's definition of one type name, using the strategy for its kind.

    Args:
        definitions: definitions of the same type name, all of the same kind, in subgraph
                     input order
        enum_usage: for enum types, where the enum is used in the merged reference graph

    Returns:
        tuple (merged_type, diagnostics), with the diagnostics found while merging
    """
    if not definitions:
        raise AssertionError("Expected at least one type definition to merge.")
    diagnostics: List[Diagnostic] = []
    merge_function = _MERGE_FUNCTIONS[definitions[0].kind]
    merged_type = merge_function(definitions, enum_usage, diagnostics)
    return merged_type, diagnostics


def merge_types(
    registry: TypeRegistry,
    enum_usages: Dict[str, EnumUsage],
    accumulator: DiagnosticsAccumulator,
    options: CompositionOptions,
) -> "OrderedDict[str, MergedType]":
    """Merge every type of the registry, then check interface implementations.

    Types are merged independently of each other, on up to options.max_workers threads.

    Returns:
        OrderedDict mapping type name to its merged type, in emission order
    """
    type_names = registry.get_ordered_type_names()
    results = map_in_order(
        lambda type_name: merge_type(
            registry.get_definitions(type_name), enum_usages.get(type_name)
        ),
        type_names,
        options.max_workers,
    )

    merged_types: "OrderedDict[str, MergedType]" = OrderedDict()
    for type_name, (merged_type, diagnostics) in zip(type_names, results):
        merged_types[type_name] = merged_type
        accumulator.extend(diagnostics)

    check_interface_implementations(merged_types, accumulator)
    logger.debug("Merged %d types.", len(merged_types))
    return merged_types


def _is_possible_type(
    merged_types: Dict[str, MergedType], abstract_type_name: str, type_name: str
) -> bool:
    """Return True iff values of the named type are always values of the abstract type."""
    if abstract_type_name == type_name:
        return True
    abstract_type = merged_types.get(abstract_type_name)
    candidate_type = merged_types.get(type_name)
    if abstract_type is None or candidate_type is None:
        return False
    if abstract_type.kind == TypeKind.UNION:
        return type_name in abstract_type.members
    if abstract_type.kind == TypeKind.INTERFACE:
        return abstract_type_name in candidate_type.interfaces
    return False


def _is_valid_implementation_type(
    merged_types: Dict[str, MergedType],
    interface_field_type: TypeReference,
    implementation_field_type: TypeReference,
) -> bool:
    """Return True iff the implementing field's type can stand in for the interface field's."""
    if interface_field_type.list_depth != implementation_field_type.list_depth:
        return False
    for interface_non_null, implementation_non_null in zip(
        interface_field_type.non_null, implementation_field_type.non_null
    ):
        if interface_non_null and not implementation_non_null:
            return False
    return _is_possible_type(
        merged_types, interface_field_type.named_type, implementation_field_type.named_type
    )


def check_interface_implementations(
    merged_types: Dict[str, MergedType], accumulator: DiagnosticsAccumulator
) -> None:
    """Check every type implements all fields of the interfaces it claims in the supergraph.

    Interface fields contributed by any subgraph are part of the merged interface, so a type
    implementing the interface in one subgraph must implement them even if that subgraph never
    heard of them.
    """
    for merged_type in merged_types.values():
        for interface_name, declaring_subgraphs in merged_type.interfaces.items():
            interface_type = merged_types.get(interface_name)
            if interface_type is None or interface_type.kind != TypeKind.INTERFACE:
                accumulator.add(
                    Diagnostic(
                        kind=DiagnosticKind.INTERFACE_FIELD_IMPLEMENTATION_MISSING,
                        message='Type "{}" implements "{}" in subgraph(s) {}, but "{}" is not '
                        "an interface type in any subgraph.".format(
                            merged_type.name,
                            interface_name,
                            _format_subgraphs(declaring_subgraphs),
                            interface_name,
                        ),
                        type_name=merged_type.name,
                        subgraphs=declaring_subgraphs,
                    )
                )
                continue
            for interface_field in interface_type.fields:
                _check_interface_field_implementation(
                    merged_types, merged_type, interface_type, interface_field, accumulator
                )


def _check_interface_field_implementation(
    merged_types: Dict[str, MergedType],
    merged_type: MergedType,
    interface_type: MergedType,
    interface_field: MergedField,
    accumulator: DiagnosticsAccumulator,
) -> None:
    """Report the ways in which a type fails to implement one interface field."""
    implementation_field = merged_type.get_field(interface_field.name)
    interface_subgraphs = interface_field.subgraphs or interface_type.subgraphs
    if implementation_field is None:
        accumulator.add(
            Diagnostic(
                kind=DiagnosticKind.INTERFACE_FIELD_IMPLEMENTATION_MISSING,
                message='Type "{}" implements interface "{}", but does not define field "{}", '
                "which the interface declares in subgraph(s) {}.".format(
                    merged_type.name,
                    interface_type.name,
                    interface_field.name,
                    _format_subgraphs(interface_subgraphs),
                ),
                type_name=merged_type.name,
                field_name=interface_field.name,
                subgraphs=merged_type.subgraphs,
            )
        )
        return

    if not _is_valid_implementation_type(
        merged_types, interface_field.type, implementation_field.type
    ):
        accumulator.add(
            Diagnostic(
                kind=DiagnosticKind.INTERFACE_FIELD_IMPLEMENTATION_MISSING,
                message='Field "{}.{}" has type "{}", which is not compatible with type "{}" of '
                'interface field "{}.{}".'.format(
                    merged_type.name,
                    implementation_field.name,
                    implementation_field.type,
                    interface_field.type,
                    interface_type.name,
                    interface_field.name,
                ),
                type_name=merged_type.name,
                field_name=interface_field.name,
                subgraphs=implementation_field.subgraphs,
            )
        )

    for interface_argument in interface_field.arguments:
        implementation_argument = implementation_field.get_argument(interface_argument.name)
        if implementation_argument is None or str(implementation_argument.type) != str(
            interface_argument.type
        ):
            accumulator.add(
                Diagnostic(
                    kind=DiagnosticKind.INTERFACE_FIELD_IMPLEMENTATION_MISSING,
                    message='Field "{}.{}" must accept argument "{}: {}" to implement interface '
                    'field "{}.{}".'.format(
                        merged_type.name,
                        implementation_field.name,
                        interface_argument.name,
                        interface_argument.type,
                        interface_type.name,
                        interface_field.name,
                    ),
                    type_name=merged_type.name,
                    field_name=interface_field.name,
                    subgraphs=implementation_field.subgraphs,
                )
            )
