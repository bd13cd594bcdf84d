# Copyright 2021-present Kensho Technologies, LLC.
from collections import OrderedDict
from dataclasses import dataclass
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from funcy import ldistinct

from .diagnostics import Diagnostic, DiagnosticKind, DiagnosticsAccumulator
from .schema_model import (
    CANONICAL_ROOT_TYPE_NAMES,
    ROOT_OPERATION_TYPES,
    Key,
    SubgraphSchema,
    TypeDefinition,
    TypeKind,
    TypeReference,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TypeRegistry:
    """Index of every subgraph's type definitions, grouped by type name."""

    subgraphs: Tuple[SubgraphSchema, ...]

    # Type name to its definitions, one per defining subgraph in subgraph input order. Type names
    # appear in the order in which they are first encountered.
    type_name_to_definitions: "OrderedDict[str, Tuple[TypeDefinition, ...]]"

    # Kind of each type name, as defined by the first subgraph that defines it.
    type_name_to_kind: Dict[str, TypeKind]

    subgraph_name_to_index: Dict[str, int]

    @property
    def subgraph_names(self) -> Tuple[str, ...]:
        """Return the names of all subgraphs, in input order."""
        return tuple(subgraph.name for subgraph in self.subgraphs)

    @property
    def root_type_names(self) -> Tuple[str, ...]:
        """Return the canonical names of the root operation types defined by any subgraph."""
        return tuple(
            CANONICAL_ROOT_TYPE_NAMES[operation]
            for operation in ROOT_OPERATION_TYPES
            if any(operation in subgraph.root_types for subgraph in self.subgraphs)
        )

    def get_subgraph(self, subgraph_name: str) -> SubgraphSchema:
        """Return the subgraph with the given name."""
        return self.subgraphs[self.subgraph_name_to_index[subgraph_name]]

    def get_definitions(self, type_name: str) -> Tuple[TypeDefinition, ...]:
        """Return every subgraph's definition of the type, in subgraph input order."""
        return self.type_name_to_definitions.get(type_name, ())

    def get_definition(self, type_name: str, subgraph_name: str) -> Optional[TypeDefinition]:
        """Return the definition of the type in the given subgraph, if it defines the type."""
        return self.get_subgraph(subgraph_name).types.get(type_name)

    def get_kind(self, type_name: str) -> Optional[TypeKind]:
        """Return the kind of the type, or None for built-in scalars and unknown names."""
        return self.type_name_to_kind.get(type_name)

    def get_defining_subgraphs(self, type_name: str) -> Tuple[str, ...]:
        """Return the names of the subgraphs defining the type, in subgraph input order."""
        return tuple(definition.subgraph for definition in self.get_definitions(type_name))

    def is_entity(self, type_name: str) -> bool:
        """Return True iff the type declares a key in at least one subgraph."""
        return any(definition.is_entity for definition in self.get_definitions(type_name))

    def get_ordered_type_names(self) -> List[str]:
        """Return every type name, root types first, then by first subgraph of origin and name."""
        root_type_names = self.root_type_names
        other_type_names = sorted(
            (
                type_name
                for type_name in self.type_name_to_definitions
                if type_name not in root_type_names
            ),
            key=lambda type_name: (
                self.subgraph_name_to_index[self.get_definitions(type_name)[0].subgraph],
                type_name,
            ),
        )
        return list(root_type_names) + other_type_names

    def get_possible_type_names(
        self, type_name: str, subgraph_name: Optional[str] = None
    ) -> List[str]:
        """Return the object types a value of the given composite type may have.

        For an object type, that is the type itself. For interfaces, it is every object type
        implementing the interface, and for unions every member, as declared by the given
        subgraph or by any subgraph if none is given. Results are in first-appearance order.
        """
        kind = self.get_kind(type_name)
        if kind == TypeKind.OBJECT:
            return [type_name]

        subgraphs: Sequence[SubgraphSchema]
        if subgraph_name is None:
            subgraphs = self.subgraphs
        else:
            subgraphs = (self.get_subgraph(subgraph_name),)

        possible_type_names: List[str] = []
        for subgraph in subgraphs:
            if kind == TypeKind.UNION:
                definition = subgraph.types.get(type_name)
                if definition is not None:
                    possible_type_names.extend(definition.members)
            elif kind == TypeKind.INTERFACE:
                possible_type_names.extend(
                    definition.name
                    for definition in subgraph.types.values()
                    if definition.kind == TypeKind.OBJECT and type_name in definition.interfaces
                )
        return ldistinct(possible_type_names)


def build_type_registry(
    subgraphs: Sequence[SubgraphSchema], accumulator: DiagnosticsAccumulator
) -> TypeRegistry:
    """Group the type definitions of all subgraphs by type name.

    Args:
        subgraphs: all subgraphs to compose, in input order
        accumulator: receives a TypeKindMismatch diagnostic for every type name declared with
                     different kinds in different subgraphs. Such diagnostics are fatal, and the
                     caller must not run further stages if any were reported.

    Returns:
        TypeRegistry indexing all type definitions

    Raises:
        - ValueError if there are no subgraphs, or if two subgraphs share a name
    """
    if not subgraphs:
        raise ValueError("Expected at least one subgraph to compose.")

    subgraph_name_to_index: Dict[str, int] = {}
    for index, subgraph in enumerate(subgraphs):
        if subgraph.name in subgraph_name_to_index:
            raise ValueError(
                'Subgraph name "{}" is used by more than one input subgraph. Subgraph names '
                "must be unique.".format(subgraph.name)
            )
        subgraph_name_to_index[subgraph.name] = index

    grouped_definitions: "OrderedDict[str, List[TypeDefinition]]" = OrderedDict()
    for subgraph in subgraphs:
        for type_name, definition in subgraph.types.items():
            grouped_definitions.setdefault(type_name, []).append(definition)

    type_name_to_kind: Dict[str, TypeKind] = {}
    for type_name, definitions in grouped_definitions.items():
        type_name_to_kind[type_name] = definitions[0].kind
        kinds = ldistinct(definition.kind for definition in definitions)
        if len(kinds) > 1:
            accumulator.add(_make_type_kind_mismatch_diagnostic(type_name, definitions, kinds))

    logger.debug(
        "Registered %(type_count)d type names across %(subgraph_count)d subgraphs.",
        {"type_count": len(grouped_definitions), "subgraph_count": len(subgraphs)},
    )
    return TypeRegistry(
        subgraphs=tuple(subgraphs),
        type_name_to_definitions=OrderedDict(
            (type_name, tuple(definitions))
            for type_name, definitions in grouped_definitions.items()
        ),
        type_name_to_kind=type_name_to_kind,
        subgraph_name_to_index=subgraph_name_to_index,
    )


def _make_type_kind_mismatch_diagnostic(
    type_name: str, definitions: Sequence[TypeDefinition], kinds: Sequence[TypeKind]
) -> Diagnostic:
    """Describe which subgraphs define the type with which kind."""
    kind_descriptions = []
    for kind in kinds:
        kind_subgraphs = [
            definition.subgraph for definition in definitions if definition.kind == kind
        ]
        kind_descriptions.append(
            "{} type in subgraph(s) {}".format(
                kind.value, ", ".join('"{}"'.format(name) for name in kind_subgraphs)
            )
        )
    return Diagnostic(
        kind=DiagnosticKind.TYPE_KIND_MISMATCH,
        message='Type "{}" is declared with different kinds: {}. A type name must denote the '
        "same kind of type in every subgraph.".format(type_name, "; ".join(kind_descriptions)),
        type_name=type_name,
        subgraphs=tuple(definition.subgraph for definition in definitions),
    )


def get_key_field_types(
    registry: TypeRegistry, key: Key
) -> Optional[Tuple[Tuple[Tuple[str, ...], TypeReference], ...]]:
    """Return the type of the leaf field of every path of the key, or None if a path is invalid.

    Paths are resolved against the key's own subgraph, which is where its fields must be defined.
    """
    subgraph = registry.get_subgraph(key.subgraph)
    path_types = []
    for field_path in key.field_paths:
        current_definition: Optional[TypeDefinition] = subgraph.types.get(key.type_name)
        field_type: Optional[TypeReference] = None
        for field_name in field_path:
            if current_definition is None:
                return None
            field_definition = current_definition.get_field(field_name)
            if field_definition is None:
                return None
            field_type = field_definition.type
            current_definition = subgraph.types.get(field_type.named_type)
        if field_type is None:
            raise AssertionError(
                "Unreachable code reached. Key {} contains an empty field path.".format(key)
            )
        if current_definition is not None and current_definition.kind.is_composite:
            # A composite leaf needs a sub-selection to identify anything.
            return None
        path_types.append((field_path, field_type))
    return tuple(path_types)


def validate_entity_keys(registry: TypeRegistry, accumulator: DiagnosticsAccumulator) -> None:
    """Report an InvalidKeyFields diagnostic for every key whose fields its subgraph lacks."""
    for type_name, definitions in registry.type_name_to_definitions.items():
        for definition in definitions:
            for key in definition.keys:
                if get_key_field_types(registry, key) is not None:
                    continue
                accumulator.add(
                    Diagnostic(
                        kind=DiagnosticKind.INVALID_KEY_FIELDS,
                        message='Key "{}" of type "{}" in subgraph "{}" selects fields that '
                        "the subgraph does not define, or selects a composite field without "
                        "a sub-selection.".format(key.field_set, type_name, key.subgraph),
                        type_name=type_name,
                        subgraphs=(key.subgraph,),
                    )
                )
