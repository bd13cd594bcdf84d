# Copyright 2019-present Kensho Technologies, LLC.
from typing import Iterable, List, Optional, Tuple

from graphql.error import GraphQLSyntaxError
from graphql.language.ast import (
    BooleanValueNode,
    DirectiveNode,
    FieldNode,
    OperationDefinitionNode,
    SelectionSetNode,
    StringValueNode,
    ValueNode,
)
from graphql.language.parser import parse

from .exceptions import SubgraphStructureError


def get_directives_by_name(
    directives: Optional[Iterable[DirectiveNode]], directive_name: str
) -> List[DirectiveNode]:
    """Return all applications of the named directive, in the order they appear."""
    if directives is None:
        return []
    return [directive for directive in directives if directive.name.value == directive_name]


def has_directive(directives: Optional[Iterable[DirectiveNode]], directive_name: str) -> bool:
    """Return True iff the named directive is applied at least once."""
    return bool(get_directives_by_name(directives, directive_name))


def get_directive_argument_value(
    directive: DirectiveNode, argument_name: str
) -> Optional[ValueNode]:
    """Return the value node of the named argument of the directive application, if present."""
    for argument in directive.arguments or ():
        if argument.name.value == argument_name:
            return argument.value
    return None


def get_string_argument(directive: DirectiveNode, argument_name: str) -> Optional[str]:
    """Return the value of a String argument of the directive, or None if it is not supplied.

    Raises:
        SubgraphStructureError if the argument is supplied, but is not a string literal
    """
    value = get_directive_argument_value(directive, argument_name)
    if value is None:
        return None
    if not isinstance(value, StringValueNode):
        raise SubgraphStructureError(
            'Argument "{}" of directive "@{}" must be a string literal, but got {}.'.format(
                argument_name, directive.name.value, type(value).__name__
            )
        )
    return value.value


def get_boolean_argument(directive: DirectiveNode, argument_name: str, default: bool) -> bool:
    """Return the value of a Boolean argument of the directive, or the default if not supplied."""
    value = get_directive_argument_value(directive, argument_name)
    if value is None:
        return default
    if not isinstance(value, BooleanValueNode):
        raise SubgraphStructureError(
            'Argument "{}" of directive "@{}" must be a boolean literal, but got {}.'.format(
                argument_name, directive.name.value, type(value).__name__
            )
        )
    return value.value


def parse_field_set(field_set: str) -> SelectionSetNode:
    """Parse a field set string such as 'id organization { id }' into a selection set.

    Raises:
        SubgraphStructureError if the string is not a valid selection set without arguments,
        aliases, directives or fragments
    """
    try:
        document = parse("{" + field_set + "}", no_location=True)
    except GraphQLSyntaxError as e:
        raise SubgraphStructureError(
            'Field set "{}" could not be parsed: {}'.format(field_set, e.message)
        ) from e

    operation = document.definitions[0]
    if not isinstance(operation, OperationDefinitionNode):
        raise AssertionError(
            "Unreachable code reached. Parsing a selection set produced a definition of type "
            '"{}".'.format(type(operation).__name__)
        )
    _check_plain_selection_set(field_set, operation.selection_set)
    return operation.selection_set


def _check_plain_selection_set(field_set: str, selection_set: SelectionSetNode) -> None:
    """Ensure the selection set consists only of plain, unaliased fields."""
    for selection in selection_set.selections:
        if not isinstance(selection, FieldNode):
            raise SubgraphStructureError(
                'Field set "{}" may only select fields, but contains a {}.'.format(
                    field_set, type(selection).__name__
                )
            )
        if selection.alias is not None or selection.arguments or selection.directives:
            raise SubgraphStructureError(
                'Field set "{}" may not use aliases, arguments or directives, but field "{}" '
                "does.".format(field_set, selection.name.value)
            )
        if selection.selection_set is not None:
            _check_plain_selection_set(field_set, selection.selection_set)


def get_field_paths(selection_set: SelectionSetNode) -> Tuple[Tuple[str, ...], ...]:
    """Return every root-to-leaf field path of the selection set, in selection order."""
    paths: List[Tuple[str, ...]] = []
    for selection in selection_set.selections:
        field_name = selection.name.value
        if selection.selection_set is None:
            paths.append((field_name,))
        else:
            for sub_path in get_field_paths(selection.selection_set):
                paths.append((field_name,) + sub_path)
    return tuple(paths)
