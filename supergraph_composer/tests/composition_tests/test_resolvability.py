# Copyright 2021-present Kensho Technologies, LLC.
from textwrap import dedent
from typing import Dict, Sequence, Tuple
import unittest

from ...composition.diagnostics import DiagnosticKind, DiagnosticsAccumulator
from ...composition.merge_strategies import MergedType, merge_types
from ...composition.options import CompositionOptions
from ...composition.resolvability import (
    FederationGraph,
    FederationNode,
    validate_resolvability,
)
from ...composition.type_registry import TypeRegistry
from ...composition.usage_classifier import classify_enum_usages
from .composition_test_helpers import build_registry
from .input_schema_strings import InputSchemaStrings as ISS


def _merge(
    named_schema_strings: Sequence[Tuple[str, str]]
) -> Tuple[TypeRegistry, Dict[str, MergedType], DiagnosticsAccumulator]:
    registry, accumulator = build_registry(named_schema_strings)
    merged_types = merge_types(
        registry, classify_enum_usages(registry), accumulator, CompositionOptions()
    )
    if accumulator.has_errors:
        raise AssertionError(
            "Expected test schemas to merge cleanly, but got: {}".format(accumulator.diagnostics)
        )
    return registry, merged_types, accumulator


_NODE_SCHEMA = dedent(
    """\
    type Query {
      node: Node
    }

    interface Node {
      id: ID!
    }

    type User implements Node @key(fields: "id") {
      id: ID!
    }
"""
)

_USER_EMAIL_SCHEMA = dedent(
    """\
    type User @key(fields: "id") {
      id: ID!
      email: String
    }
"""
)


class TestFederationGraph(unittest.TestCase):
    def test_key_edges(self) -> None:
        registry, merged_types, _ = _merge(
            [
                ("a", ISS.thing_by_id_schema),
                ("b", ISS.thing_by_id_and_code_schema),
                ("c", ISS.thing_by_code_schema),
            ]
        )
        graph = FederationGraph(registry, merged_types)
        thing_a = FederationNode("Thing", "a")
        thing_b = FederationNode("Thing", "b")
        thing_c = FederationNode("Thing", "c")
        self.assertEqual((thing_b,), graph.get_neighbors(thing_a))
        self.assertEqual((thing_a, thing_c), graph.get_neighbors(thing_b))
        self.assertEqual((thing_b,), graph.get_neighbors(thing_c))
        self.assertEqual(
            {"a": ("a",), "b": ("a", "b"), "c": ("a", "b", "c")}, dict(graph.get_routes(thing_a))
        )

        # Value types have no key edges.
        self.assertEqual((), graph.get_neighbors(FederationNode("Query", "a")))

    def test_non_resolvable_keys_are_one_way(self) -> None:
        registry, merged_types, _ = _merge(
            [("products", ISS.products_schema), ("reviews", ISS.unresolvable_reviews_schema)]
        )
        graph = FederationGraph(registry, merged_types)
        self.assertEqual((), graph.get_neighbors(FederationNode("Product", "products")))
        self.assertEqual(
            (FederationNode("Product", "products"),),
            graph.get_neighbors(FederationNode("Product", "reviews")),
        )


class TestValidateResolvability(unittest.TestCase):
    def test_unresolvable_value_type_field(self) -> None:
        registry, merged_types, accumulator = _merge(
            [("a", ISS.position_a_schema), ("b", ISS.position_b_schema)]
        )
        report = validate_resolvability(registry, merged_types, accumulator)
        self.assertEqual(1, len(accumulator))
        diagnostic = accumulator.diagnostics[0]
        self.assertEqual(DiagnosticKind.UNRESOLVABLE_FIELD, diagnostic.kind)
        self.assertEqual("Position", diagnostic.type_name)
        self.assertEqual("z", diagnostic.field_name)
        self.assertEqual(("a", "b"), diagnostic.subgraphs)
        self.assertEqual("Query.positionA", diagnostic.access_point)
        self.assertEqual("query { positionA { z } }", diagnostic.example_query)
        self.assertEqual({}, report.key_routes)

    def test_keys_make_fields_resolvable(self) -> None:
        registry, merged_types, accumulator = _merge(
            [("a", ISS.keyed_position_a_schema), ("b", ISS.keyed_position_b_schema)]
        )
        report = validate_resolvability(registry, merged_types, accumulator)
        self.assertEqual(0, len(accumulator))
        self.assertEqual({("Position", "z"): {"a": ("a", "b")}}, report.key_routes)

    def test_entity_round_trip(self) -> None:
        registry, merged_types, accumulator = _merge(
            [("products", ISS.products_schema), ("reviews", ISS.reviews_schema)]
        )
        report = validate_resolvability(registry, merged_types, accumulator)
        self.assertEqual(0, len(accumulator))
        self.assertEqual(
            {
                ("Product", "name"): {"reviews": ("reviews", "products")},
                ("Product", "price"): {"reviews": ("reviews", "products")},
                ("Product", "reviews"): {"products": ("products", "reviews")},
            },
            report.key_routes,
        )
        self.assertEqual(
            frozenset(
                {
                    FederationNode("Product", "products"),
                    FederationNode("Product", "reviews"),
                    FederationNode("Review", "reviews"),
                }
            ),
            report.reachable_nodes,
        )

    def test_non_resolvable_key(self) -> None:
        registry, merged_types, accumulator = _merge(
            [("products", ISS.products_schema), ("reviews", ISS.unresolvable_reviews_schema)]
        )
        validate_resolvability(registry, merged_types, accumulator)
        self.assertEqual(1, len(accumulator))
        diagnostic = accumulator.diagnostics[0]
        self.assertEqual(("Product", "reviews"), (diagnostic.type_name, diagnostic.field_name))
        self.assertEqual(("products", "reviews"), diagnostic.subgraphs)
        self.assertEqual("Query.products", diagnostic.access_point)
        self.assertEqual("query { products { reviews } }", diagnostic.example_query)

    def test_multi_hop_routes(self) -> None:
        registry, merged_types, accumulator = _merge(
            [
                ("a", ISS.thing_by_id_schema),
                ("b", ISS.thing_by_id_and_code_schema),
                ("c", ISS.thing_by_code_schema),
            ]
        )
        report = validate_resolvability(registry, merged_types, accumulator)
        self.assertEqual(0, len(accumulator))
        self.assertEqual(
            {
                ("Thing", "code"): {"a": ("a", "b")},
                ("Thing", "label"): {"a": ("a", "b", "c")},
            },
            report.key_routes,
        )

    def test_abstract_types_reach_their_implementations(self) -> None:
        registry, merged_types, accumulator = _merge(
            [("a", _NODE_SCHEMA), ("b", _USER_EMAIL_SCHEMA)]
        )
        report = validate_resolvability(registry, merged_types, accumulator)
        self.assertEqual(0, len(accumulator))
        self.assertEqual({("User", "email"): {"a": ("a", "b")}}, report.key_routes)

    def test_example_query_through_an_implementation(self) -> None:
        non_resolvable_schema = _USER_EMAIL_SCHEMA.replace(
            '@key(fields: "id")', '@key(fields: "id", resolvable: false)'
        )
        registry, merged_types, accumulator = _merge(
            [("a", _NODE_SCHEMA), ("b", non_resolvable_schema)]
        )
        validate_resolvability(registry, merged_types, accumulator)
        self.assertEqual(1, len(accumulator))
        diagnostic = accumulator.diagnostics[0]
        self.assertEqual("Query.node", diagnostic.access_point)
        self.assertEqual("query { node { ... on User { email } } }", diagnostic.example_query)
