# Copyright 2021-present Kensho Technologies, LLC.
from collections import deque
from enum import Enum, unique
import logging
from typing import Callable, Deque, Dict, FrozenSet, Iterable, List, Set

from .schema_model import TypeKind
from .type_registry import TypeRegistry


logger = logging.getLogger(__name__)


@unique
class EnumUsage(Enum):
    """Where an enum type may appear in a query, which decides how its values are merged."""

    OUTPUT_ONLY = "output only"
    INPUT_ONLY = "input only"
    BOTH = "both"
    UNUSED = "unused"


def _get_output_neighbors(registry: TypeRegistry, type_name: str) -> List[str]:
    """Return the types a response may contain directly below a value of the given type."""
    neighbors: List[str] = []
    for definition in registry.get_definitions(type_name):
        neighbors.extend(field.type.named_type for field in definition.fields)
        neighbors.extend(definition.interfaces)
        neighbors.extend(definition.members)
    if registry.get_kind(type_name) == TypeKind.INTERFACE:
        neighbors.extend(registry.get_possible_type_names(type_name))
    return neighbors


def _get_input_neighbors(registry: TypeRegistry, type_name: str) -> List[str]:
    """Return the types of the fields of an input object type."""
    neighbors: List[str] = []
    for definition in registry.get_definitions(type_name):
        neighbors.extend(input_field.type.named_type for input_field in definition.input_fields)
    return neighbors


def _collect_reachable_type_names(
    seeds: Iterable[str], get_neighbors: Callable[[str], Iterable[str]]
) -> FrozenSet[str]:
    """Return every type name reachable from the seeds, including the seeds themselves."""
    reachable: Set[str] = set()
    queue: Deque[str] = deque(seeds)
    while queue:
        type_name = queue.popleft()
        if type_name in reachable:
            continue
        reachable.add(type_name)
        queue.extend(
            neighbor for neighbor in get_neighbors(type_name) if neighbor not in reachable
        )
    return frozenset(reachable)


def get_output_reachable_type_names(registry: TypeRegistry) -> FrozenSet[str]:
    """Return the names of the types a query response may contain.

    The scan starts at the root operation types and follows field return types, implemented
    interfaces, interface implementations and union members across all subgraphs, since a type
    unreachable in one subgraph may be reachable through another.
    """
    return _collect_reachable_type_names(
        registry.root_type_names,
        lambda type_name: _get_output_neighbors(registry, type_name),
    )


def get_input_reachable_type_names(registry: TypeRegistry) -> FrozenSet[str]:
    """Return the names of the types a query may pass as an argument value.

    The scan starts at the types of all field arguments and of all input object fields, and
    follows input object fields transitively.
    """
    seeds: List[str] = []
    for definitions in registry.type_name_to_definitions.values():
        for definition in definitions:
            for field in definition.fields:
                seeds.extend(argument.type.named_type for argument in field.arguments)
            seeds.extend(input_field.type.named_type for input_field in definition.input_fields)
    return _collect_reachable_type_names(
        seeds, lambda type_name: _get_input_neighbors(registry, type_name)
    )


def classify_enum_usages(registry: TypeRegistry) -> Dict[str, EnumUsage]:
    """Tag every enum type with where it is used across the merged reference graph.

    Args:
        registry: index of all subgraphs' type definitions

    Returns:
        dict mapping the name of every enum type to its EnumUsage
    """
    output_reachable = get_output_reachable_type_names(registry)
    input_reachable = get_input_reachable_type_names(registry)

    enum_usages: Dict[str, EnumUsage] = {}
    for type_name in registry.type_name_to_definitions:
        if registry.get_kind(type_name) != TypeKind.ENUM:
            continue
        in_output = type_name in output_reachable
        in_input = type_name in input_reachable
        if in_output and in_input:
            enum_usages[type_name] = EnumUsage.BOTH
        elif in_output:
            enum_usages[type_name] = EnumUsage.OUTPUT_ONLY
        elif in_input:
            enum_usages[type_name] = EnumUsage.INPUT_ONLY
        else:
            enum_usages[type_name] = EnumUsage.UNUSED

    logger.debug("Classified enum usages: %s", enum_usages)
    return enum_usages
