# Copyright 2021-present Kensho Technologies, LLC.
"""Check that every field a valid query can select is resolvable by some sequence of subgraph calls.

The check runs on a small graph whose nodes are (type name, subgraph) pairs: a query that reached
a value of type T through subgraph S sits at node (T, S). Such a query can select any field S
resolves itself. For entity types, it can also jump to any subgraph S' that shares a key with S,
by sending the key fields of the value to S'. Hence a field of T is resolvable at (T, S) iff some
node reachable from (T, S) through key edges resolves it.

Starting from every root field of every subgraph, the validator walks the graph the way a query
planner would, and reports every field of every reached object type that cannot be resolved.
Fields of abstract types are resolved through their possible object types, which are checked in
turn.
"""
from collections import OrderedDict, deque
from dataclasses import dataclass
import logging
from typing import Deque, Dict, FrozenSet, List, Optional, Set, Tuple

from .diagnostics import Diagnostic, DiagnosticKind, DiagnosticsAccumulator
from .merge_strategies import MergedField, MergedType
from .schema_model import Key, TypeDefinition, TypeKind
from .type_registry import TypeRegistry, get_key_field_types


logger = logging.getLogger(__name__)


_ROOT_TYPE_NAME_TO_OPERATION_KEYWORD = {
    "Query": "query",
    "Mutation": "mutation",
    "Subscription": "subscription",
}

# A key's field paths with the named type and list depth of each path's leaf field.
KeySignature = FrozenSet[Tuple[Tuple[str, ...], str, int]]


@dataclass(frozen=True)
class FederationNode:
    """A value of the named type, as seen by a query currently executing in the subgraph."""

    type_name: str
    subgraph: str


@dataclass(frozen=True)
class ResolvabilityReport:
    """Result of resolvability validation, consumed by the supergraph emitter."""

    # (type name, field name) to a mapping from each subgraph a query may hold a value of the type
    # in, to the route of subgraphs through which the field is resolved from there. Only fields
    # that some subgraph can resolve only through key edges appear, and the route starts with the
    # subgraph holding the value and ends with the subgraph resolving the field.
    key_routes: Dict[Tuple[str, str], Dict[str, Tuple[str, ...]]]

    # Every node that some query can reach.
    reachable_nodes: FrozenSet[FederationNode]


@dataclass(frozen=True)
class _Visit:
    """A node reached by a query, together with how the query got there."""

    node: FederationNode

    # Root field through which the node was reached, e.g. "Query.positionA".
    access_point: str

    # Selections leading from the root type to the node, e.g. ("positionA",) or
    # ("node", "... on Product").
    selection_path: Tuple[str, ...]


class FederationGraph:
    """The (type name, subgraph) nodes of the merged types, linked by entity key edges."""

    def __init__(self, registry: TypeRegistry, merged_types: Dict[str, MergedType]) -> None:
        """Build every node and key edge of the graph.

        Args:
            registry: index of all subgraphs' type definitions
            merged_types: the merged types of the supergraph
        """
        self._registry = registry
        self._merged_types = merged_types
        self._key_signatures: Dict[Key, Optional[KeySignature]] = {}

        self.nodes: Tuple[FederationNode, ...] = tuple(
            FederationNode(type_name, subgraph_name)
            for type_name in merged_types
            for subgraph_name in registry.get_defining_subgraphs(type_name)
        )
        self.edges: Dict[FederationNode, Tuple[FederationNode, ...]] = {
            node: self._compute_neighbors(node) for node in self.nodes
        }

    def _get_key_signature(self, key: Key) -> Optional[KeySignature]:
        """Return the signature of the key, or None if its fields are invalid."""
        if key not in self._key_signatures:
            path_types = get_key_field_types(self._registry, key)
            if path_types is None:
                self._key_signatures[key] = None
            else:
                self._key_signatures[key] = frozenset(
                    (field_path, field_type.named_type, field_type.list_depth)
                    for field_path, field_type in path_types
                )
        return self._key_signatures[key]

    def _shares_key(self, source: TypeDefinition, target: TypeDefinition) -> bool:
        """Return True iff the target accepts a key the source can send."""
        source_signatures = set()
        for key in source.keys:
            signature = self._get_key_signature(key)
            if signature is not None:
                source_signatures.add(signature)
        for key in target.keys:
            if key.resolvable and self._get_key_signature(key) in source_signatures:
                return True
        return False

    def _compute_neighbors(self, node: FederationNode) -> Tuple[FederationNode, ...]:
        """Return the nodes reachable from the node with one key edge, in subgraph input order."""
        merged_type = self._merged_types[node.type_name]
        if not merged_type.is_entity:
            return ()
        source = self._registry.get_definition(node.type_name, node.subgraph)
        if source is None:
            raise AssertionError(
                "Unreachable code reached. Node {} has no type definition.".format(node)
            )
        neighbors = []
        for target in self._registry.get_definitions(node.type_name):
            if target.subgraph != node.subgraph and self._shares_key(source, target):
                neighbors.append(FederationNode(node.type_name, target.subgraph))
        return tuple(neighbors)

    def get_neighbors(self, node: FederationNode) -> Tuple[FederationNode, ...]:
        """Return the nodes reachable from the node with one key edge."""
        return self.edges.get(node, ())

    def get_routes(self, node: FederationNode) -> "OrderedDict[str, Tuple[str, ...]]":
        """Return the shortest route to every subgraph reachable from the node through keys.

        Routes are tuples of subgraph names starting with the node's subgraph. Ties between
        routes of the same length are broken by subgraph input order.
        """
        routes: "OrderedDict[str, Tuple[str, ...]]" = OrderedDict()
        routes[node.subgraph] = (node.subgraph,)
        queue: Deque[FederationNode] = deque([node])
        while queue:
            current = queue.popleft()
            for neighbor in self.get_neighbors(current):
                if neighbor.subgraph not in routes:
                    routes[neighbor.subgraph] = routes[current.subgraph] + (neighbor.subgraph,)
                    queue.append(neighbor)
        return routes

    def get_serving_routes(
        self, node: FederationNode, merged_field: MergedField
    ) -> List[Tuple[str, ...]]:
        """Return the routes through which a query at the node can resolve the field.

        If the node's own subgraph resolves the field, that is the only route a planner needs.
        Otherwise, every reachable subgraph resolving the field yields a route. An empty list
        means the field is not resolvable from the node.
        """
        if node.subgraph in merged_field.subgraphs:
            return [(node.subgraph,)]
        return [
            route
            for subgraph_name, route in self.get_routes(node).items()
            if subgraph_name in merged_field.subgraphs
        ]


def _build_example_query(
    root_type_name: str, selection_path: Tuple[str, ...], field_name: str
) -> str:
    """Build a one-line query selecting the field at the end of the selection path."""
    selection = field_name
    for selection_name in reversed(selection_path):
        selection = "{} {{ {} }}".format(selection_name, selection)
    return "{} {{ {} }}".format(_ROOT_TYPE_NAME_TO_OPERATION_KEYWORD[root_type_name], selection)


def _make_unresolvable_field_diagnostic(
    visit: _Visit, merged_type: MergedType, merged_field: MergedField
) -> Diagnostic:
    """Describe a field that a query at the visited node cannot resolve."""
    root_type_name = visit.access_point.split(".", 1)[0]
    example_query = _build_example_query(root_type_name, visit.selection_path, merged_field.name)
    if merged_field.subgraphs:
        resolving_description = (
            "it is only resolved by subgraph(s) {}, none of which is reachable from \"{}\" "
            "through a key of \"{}\"".format(
                ", ".join('"{}"'.format(subgraph) for subgraph in merged_field.subgraphs),
                visit.node.subgraph,
                merged_type.name,
            )
        )
    else:
        resolving_description = "no subgraph resolves it"
    return Diagnostic(
        kind=DiagnosticKind.UNRESOLVABLE_FIELD,
        message='Field "{}.{}" cannot be resolved from subgraph "{}", which is reached through '
        '"{}": {}. Example query that cannot be served: {}'.format(
            merged_type.name,
            merged_field.name,
            visit.node.subgraph,
            visit.access_point,
            resolving_description,
            example_query,
        ),
        type_name=merged_type.name,
        field_name=merged_field.name,
        subgraphs=(visit.node.subgraph,) + tuple(
            subgraph for subgraph in merged_field.subgraphs if subgraph != visit.node.subgraph
        ),
        access_point=visit.access_point,
        example_query=example_query,
    )


def validate_resolvability(
    registry: TypeRegistry,
    merged_types: Dict[str, MergedType],
    accumulator: DiagnosticsAccumulator,
) -> ResolvabilityReport:
    """Check that every field of every type a query can reach is resolvable where it is reached.

    Args:
        registry: index of all subgraphs' type definitions
        merged_types: the merged types of the supergraph, free of merge errors
        accumulator: receives an UnresolvableField diagnostic for every field that cannot be
                     resolved at some reachable node

    Returns:
        ResolvabilityReport with the key routes through which fields are resolved
    """
    graph = FederationGraph(registry, merged_types)
    root_type_names = frozenset(registry.root_type_names)

    queue: Deque[_Visit] = deque()
    for root_type_name in registry.root_type_names:
        for root_field in merged_types[root_type_name].fields:
            if root_field.inaccessible:
                continue
            for subgraph_name in root_field.subgraphs:
                _enqueue_field_target(
                    queue,
                    merged_types,
                    root_type_names,
                    root_field,
                    subgraph_name,
                    "{}.{}".format(root_type_name, root_field.name),
                    (root_field.name,),
                )

    key_routes: Dict[Tuple[str, str], Dict[str, Tuple[str, ...]]] = {}
    visited: Set[FederationNode] = set()
    while queue:
        visit = queue.popleft()
        if visit.node in visited:
            continue
        visited.add(visit.node)
        merged_type = merged_types[visit.node.type_name]

        for merged_field in merged_type.fields:
            if merged_field.inaccessible or merged_type.kind != TypeKind.OBJECT:
                continue
            routes = graph.get_serving_routes(visit.node, merged_field)
            if not routes:
                accumulator.add(
                    _make_unresolvable_field_diagnostic(visit, merged_type, merged_field)
                )
                continue
            if len(routes[0]) > 1:
                key_routes.setdefault((merged_type.name, merged_field.name), {})[
                    visit.node.subgraph
                ] = routes[0]
            for route in routes:
                _enqueue_field_target(
                    queue,
                    merged_types,
                    root_type_names,
                    merged_field,
                    route[-1],
                    visit.access_point,
                    visit.selection_path + (merged_field.name,),
                )

        if merged_type.kind in (TypeKind.INTERFACE, TypeKind.UNION):
            for possible_type_name in registry.get_possible_type_names(
                merged_type.name, visit.node.subgraph
            ):
                queue.append(
                    _Visit(
                        node=FederationNode(possible_type_name, visit.node.subgraph),
                        access_point=visit.access_point,
                        selection_path=visit.selection_path
                        + ("... on {}".format(possible_type_name),),
                    )
                )

    logger.debug(
        "Resolvability validation reached %(reached)d of %(total)d federation graph nodes.",
        {"reached": len(visited), "total": len(graph.nodes)},
    )
    return ResolvabilityReport(
        key_routes={
            coordinate: dict(
                sorted(
                    routes.items(),
                    key=lambda item: registry.subgraph_name_to_index[item[0]],
                )
            )
            for coordinate, routes in sorted(key_routes.items())
        },
        reachable_nodes=frozenset(visited),
    )


def _enqueue_field_target(
    queue: Deque[_Visit],
    merged_types: Dict[str, MergedType],
    root_type_names: FrozenSet[str],
    merged_field: MergedField,
    subgraph_name: str,
    access_point: str,
    selection_path: Tuple[str, ...],
) -> None:
    """Queue the node a query reaches by selecting the field in the given subgraph."""
    target_type_name = merged_field.type.named_type
    target_type = merged_types.get(target_type_name)
    if target_type is None or not target_type.kind.is_composite:
        return
    if target_type_name in root_type_names:
        # Root types are entry points of every subgraph, not values held by one.
        return
    queue.append(
        _Visit(
            node=FederationNode(target_type_name, subgraph_name),
            access_point=access_point,
            selection_path=selection_path,
        )
    )
