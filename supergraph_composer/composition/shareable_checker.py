# Copyright 2021-present Kensho Technologies, LLC.
from collections import OrderedDict
import logging
from typing import List, Sequence

from ..global_utils import map_in_order
from .diagnostics import Diagnostic, DiagnosticKind, DiagnosticsAccumulator
from .options import CompositionOptions
from .schema_model import FieldDefinition, TypeDefinition, TypeKind
from .type_registry import TypeRegistry


logger = logging.getLogger(__name__)


def _format_field_types(field_definitions: Sequence[FieldDefinition]) -> str:
    """Describe the type of each definition of a field, for diagnostic messages."""
    return ", ".join(
        '"{}" in "{}"'.format(field_definition.type, field_definition.subgraph)
        for field_definition in field_definitions
    )


def _check_shared_field(
    type_name: str, field_definitions: Sequence[FieldDefinition]
) -> List[Diagnostic]:
    """Check that the definitions of one field resolved by several subgraphs are compatible.

    Nullability may differ at any list level; the named return type, the list depth, the argument
    names and the named types and list depths of the arguments must match exactly.
    """
    diagnostics: List[Diagnostic] = []
    field_name = field_definitions[0].name
    coordinate = "{}.{}".format(type_name, field_name)
    subgraphs = tuple(field_definition.subgraph for field_definition in field_definitions)

    non_shareable_subgraphs = [
        field_definition.subgraph
        for field_definition in field_definitions
        if not field_definition.shareable
    ]
    if non_shareable_subgraphs:
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.FIELD_TYPE_CONFLICT,
                message='Field "{}" is resolved by subgraphs {}, but is not marked @shareable in '
                "subgraph(s) {}. A field may only be resolved by several subgraphs if every one "
                "of them marks it @shareable.".format(
                    coordinate,
                    ", ".join('"{}"'.format(subgraph) for subgraph in subgraphs),
                    ", ".join('"{}"'.format(subgraph) for subgraph in non_shareable_subgraphs),
                ),
                type_name=type_name,
                field_name=field_name,
                subgraphs=subgraphs,
            )
        )

    first_type = field_definitions[0].type
    if any(
        field_definition.type.named_type != first_type.named_type
        or field_definition.type.list_depth != first_type.list_depth
        for field_definition in field_definitions
    ):
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.FIELD_TYPE_CONFLICT,
                message='Field "{}" has incompatible types in the subgraphs resolving it: {}. '
                "Only the nullability of a shared field's type may differ between "
                "subgraphs.".format(coordinate, _format_field_types(field_definitions)),
                type_name=type_name,
                field_name=field_name,
                subgraphs=subgraphs,
            )
        )

    argument_names = [
        [argument.name for argument in field_definition.arguments]
        for field_definition in field_definitions
    ]
    if any(set(names) != set(argument_names[0]) for names in argument_names):
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.FIELD_TYPE_CONFLICT,
                message='Field "{}" has different arguments in the subgraphs resolving it: '
                "{}.".format(
                    coordinate,
                    ", ".join(
                        '{} in "{}"'.format(sorted(names), field_definition.subgraph)
                        for names, field_definition in zip(argument_names, field_definitions)
                    ),
                ),
                type_name=type_name,
                field_name=field_name,
                subgraphs=subgraphs,
            )
        )
        return diagnostics

    for argument in field_definitions[0].arguments:
        argument_definitions = [
            (field_definition.subgraph, field_definition.get_argument(argument.name))
            for field_definition in field_definitions
        ]
        if any(
            other_argument.type.named_type != argument.type.named_type
            or other_argument.type.list_depth != argument.type.list_depth
            for _, other_argument in argument_definitions
        ):
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.FIELD_TYPE_CONFLICT,
                    message='Argument "{}({}:)" has incompatible types in the subgraphs resolving '
                    "the field: {}.".format(
                        coordinate,
                        argument.name,
                        ", ".join(
                            '"{}" in "{}"'.format(other_argument.type, subgraph)
                            for subgraph, other_argument in argument_definitions
                        ),
                    ),
                    type_name=type_name,
                    field_name=field_name,
                    subgraphs=subgraphs,
                )
            )
    return diagnostics


def check_shareable_type(definitions: Sequence[TypeDefinition]) -> List[Diagnostic]:
    """Check every field of an object type that more than one subgraph resolves.

    External field declarations are not counted, since their subgraph does not resolve them.
    """
    if definitions[0].kind != TypeKind.OBJECT:
        return []

    field_name_to_definitions: "OrderedDict[str, List[FieldDefinition]]" = OrderedDict()
    for definition in definitions:
        for field_definition in definition.fields:
            if not field_definition.external:
                field_name_to_definitions.setdefault(field_definition.name, []).append(
                    field_definition
                )

    diagnostics: List[Diagnostic] = []
    for field_definitions in field_name_to_definitions.values():
        if len(field_definitions) > 1:
            diagnostics.extend(_check_shared_field(definitions[0].name, field_definitions))
    return diagnostics


def check_shareable_fields(
    registry: TypeRegistry, accumulator: DiagnosticsAccumulator, options: CompositionOptions
) -> None:
    """Report every incompatible field contributed to the same object type by several subgraphs.

    Types are checked independently of each other, on up to options.max_workers threads.
    """
    type_names = registry.get_ordered_type_names()
    results = map_in_order(
        lambda type_name: check_shareable_type(registry.get_definitions(type_name)),
        type_names,
        options.max_workers,
    )
    for diagnostics in results:
        accumulator.extend(diagnostics)
    logger.debug("Checked shared fields of %d types.", len(type_names))
