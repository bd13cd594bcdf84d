# Copyright 2021-present Kensho Technologies, LLC.
from collections import OrderedDict
from textwrap import dedent
import unittest

from graphql import build_ast_schema, parse, print_ast

from ... import CompositionError, compose, compose_documents
from ...composition.diagnostics import DiagnosticKind
from ...composition.options import CompositionOptions
from .composition_test_helpers import load_documents, load_subgraphs
from .input_schema_strings import InputSchemaStrings as ISS


def _normalize(schema_string: str) -> str:
    return print_ast(parse(schema_string))


class TestCompose(unittest.TestCase):
    def test_keyed_position(self) -> None:
        result = compose_documents(
            load_documents(
                [("a", ISS.keyed_position_a_schema), ("b", ISS.keyed_position_b_schema)]
            )
        )
        self.assertTrue(result.succeeded)
        self.assertEqual((), result.diagnostics)
        supergraph = result.raise_for_errors()

        expected_api_schema = dedent(
            """\
            schema {
              query: Query
            }

            type Query {
              positionA: Position!
              positionB: Position!
            }

            type Position {
              x: Int!
              y: Int!
              z: Int!
            }
        """
        )
        self.assertEqual(_normalize(expected_api_schema), supergraph.api_schema_sdl)

        supergraph_sdl = supergraph.supergraph_sdl
        self.assertIn(
            'type Position @join__type(graph: A, key: "x y") @join__type(graph: B, key: "x y") {',
            supergraph_sdl,
        )
        self.assertIn("type Query @join__type(graph: A) @join__type(graph: B) {", supergraph_sdl)
        self.assertIn("positionA: Position! @join__field(graph: A)", supergraph_sdl)
        self.assertIn("z: Int! @join__field(graph: B)", supergraph_sdl)
        self.assertIn("  x: Int!\n", supergraph_sdl)
        self.assertIn('A @join__graph(name: "a", url: "")', supergraph_sdl)

        # Both documents are valid GraphQL schemas.
        build_ast_schema(supergraph.supergraph_ast)
        api_schema = supergraph.build_api_schema()
        self.assertIsNotNone(api_schema.get_type("Position"))

        self.assertEqual({"a": "A", "b": "B"}, supergraph.subgraph_name_to_graph_value)
        self.assertEqual(["Query", "Position"], list(supergraph.type_origins))
        self.assertEqual(("a", "b"), supergraph.type_origins["Position"].subgraphs)
        z_origin = supergraph.field_origins[("Position", "z")]
        self.assertEqual(("b",), z_origin.subgraphs)
        self.assertEqual({"a": ("a", "b")}, z_origin.key_routes)
        self.assertEqual({}, supergraph.field_origins[("Position", "x")].key_routes)

    def test_entities_with_urls(self) -> None:
        result = compose_documents(
            load_documents([("products", ISS.products_schema), ("reviews", ISS.reviews_schema)]),
            subgraph_urls={"products": "http://products:4001/graphql"},
        )
        supergraph = result.raise_for_errors()
        supergraph_sdl = supergraph.supergraph_sdl
        self.assertIn(
            'type Product @join__type(graph: PRODUCTS, key: "upc") '
            '@join__type(graph: REVIEWS, key: "upc") {',
            supergraph_sdl,
        )
        self.assertIn("name: String @join__field(graph: PRODUCTS)", supergraph_sdl)
        self.assertIn(
            'PRODUCTS @join__graph(name: "products", url: "http://products:4001/graphql")',
            supergraph_sdl,
        )
        self.assertIn('REVIEWS @join__graph(name: "reviews", url: "")', supergraph_sdl)
        self.assertEqual(
            {"reviews": ("reviews", "products")},
            supergraph.field_origins[("Product", "name")].key_routes,
        )
        build_ast_schema(supergraph.supergraph_ast)

    def test_api_schema_recomposes_to_itself(self) -> None:
        supergraph = compose_documents(
            load_documents([("products", ISS.products_schema), ("reviews", ISS.reviews_schema)])
        ).raise_for_errors()
        recomposed = compose_documents(
            OrderedDict([("api", parse(supergraph.api_schema_sdl))])
        ).raise_for_errors()
        self.assertEqual(supergraph.api_schema_sdl, recomposed.api_schema_sdl)

    def test_output_does_not_depend_on_worker_count(self) -> None:
        named_schema_strings = [
            ("products", ISS.products_schema),
            ("reviews", ISS.reviews_schema),
            ("a", ISS.thing_by_id_schema),
            ("b", ISS.thing_by_id_and_code_schema),
            ("c", ISS.thing_by_code_schema),
            ("colors", ISS.output_color_a_schema),
        ]
        results = [
            compose(
                load_subgraphs(named_schema_strings),
                options=CompositionOptions(max_workers=max_workers),
            )
            for max_workers in (1, 4)
        ]
        first, second = [result.raise_for_errors() for result in results]
        self.assertEqual(first.api_schema_sdl, second.api_schema_sdl)
        self.assertEqual(first.supergraph_sdl, second.supergraph_sdl)
        self.assertEqual(first.field_origins, second.field_origins)
        self.assertEqual(results[0].diagnostics, results[1].diagnostics)

    def test_errors_prevent_emission(self) -> None:
        with self.assertLogs("supergraph_composer.composition.compose", level="WARNING"):
            result = compose(load_subgraphs([("a", ISS.user_a_schema), ("b", ISS.user_b_schema)]))
        self.assertFalse(result.succeeded)
        self.assertIsNone(result.supergraph)
        self.assertEqual(
            [DiagnosticKind.FIELD_TYPE_CONFLICT], [diagnostic.kind for diagnostic in result.errors]
        )
        with self.assertRaises(CompositionError) as context:
            result.raise_for_errors()
        self.assertEqual(result.errors, context.exception.diagnostics)
        self.assertIn("User.name", str(context.exception))

    def test_warnings_do_not_prevent_emission(self) -> None:
        result = compose(
            load_subgraphs(
                [
                    ("a", ISS.cached_directive_a_schema),
                    ("b", ISS.different_cached_directive_schema),
                ]
            )
        )
        supergraph = result.raise_for_errors()
        self.assertEqual((), result.errors)
        self.assertEqual(
            [DiagnosticKind.DIRECTIVE_DEFINITION_MISMATCH],
            [diagnostic.kind for diagnostic in result.warnings],
        )
        self.assertNotIn("@cached", supergraph.api_schema_sdl)

    def test_executable_directives_reach_both_schemas(self) -> None:
        supergraph = compose(
            load_subgraphs(
                [("a", ISS.cached_directive_a_schema), ("b", ISS.cached_directive_b_schema)]
            )
        ).raise_for_errors()
        directive_definition = "directive @cached(ttl: Int) on FIELD | QUERY"
        self.assertIn(directive_definition, supergraph.api_schema_sdl)
        self.assertIn(directive_definition, supergraph.supergraph_sdl)
        self.assertIsNotNone(supergraph.build_api_schema().get_directive("cached"))

    def test_router_directives(self) -> None:
        supergraph = compose(
            load_subgraphs([("accounts", ISS.composed_directive_schema)])
        ).raise_for_errors()
        self.assertEqual(["audit"], [directive.name for directive in supergraph.router_directives])
        self.assertNotIn("@audit", supergraph.api_schema_sdl)
        self.assertNotIn("@internal", supergraph.api_schema_sdl)

    def test_unresolvable_field(self) -> None:
        result = compose(
            load_subgraphs([("a", ISS.position_a_schema), ("b", ISS.position_b_schema)])
        )
        self.assertFalse(result.succeeded)
        self.assertEqual(1, len(result.errors))
        error = result.errors[0]
        self.assertEqual(DiagnosticKind.UNRESOLVABLE_FIELD, error.kind)
        self.assertEqual("Position.z", error.coordinate)
        self.assertEqual("query { positionA { z } }", error.example_query)

    def test_unresolvable_field_is_reported_with_other_errors(self) -> None:
        result = compose(
            load_subgraphs(
                [
                    ("a", ISS.unshareable_position_a_schema),
                    ("b", ISS.unshareable_position_b_schema),
                ]
            )
        )
        self.assertIsNone(result.supergraph)
        self.assertEqual(
            [
                (DiagnosticKind.FIELD_TYPE_CONFLICT, "Position.x"),
                (DiagnosticKind.FIELD_TYPE_CONFLICT, "Position.y"),
                (DiagnosticKind.UNRESOLVABLE_FIELD, "Position.z"),
            ],
            [(diagnostic.kind, diagnostic.coordinate) for diagnostic in result.errors],
        )
        unresolvable = result.errors[2]
        self.assertEqual("Query.positionA", unresolvable.access_point)
        self.assertEqual("query { positionA { z } }", unresolvable.example_query)

    def test_unresolvable_field_is_reported_with_input_merge_errors(self) -> None:
        first_filter = dedent(
            """\

            input Filter {
              a: Int!
              b: Int
            }
        """
        )
        second_filter = dedent(
            """\

            input Filter {
              b: Int
            }
        """
        )
        result = compose(
            load_subgraphs(
                [
                    ("a", ISS.position_a_schema + first_filter),
                    ("b", ISS.position_b_schema + second_filter),
                ]
            )
        )
        self.assertEqual(
            [
                (DiagnosticKind.INPUT_INTERSECTION_NON_NULL_LOSS, "Filter.a"),
                (DiagnosticKind.UNRESOLVABLE_FIELD, "Position.z"),
            ],
            [(diagnostic.kind, diagnostic.coordinate) for diagnostic in result.errors],
        )

    def test_invalid_keys_skip_resolvability_validation(self) -> None:
        member_by_sku_schema = dedent(
            """\
            type Member @key(fields: "sku") {
              sku: ID!
              email: String
            }
        """
        )
        with self.assertLogs("supergraph_composer.composition.compose", level="INFO") as logs:
            result = compose(
                load_subgraphs(
                    [("members", ISS.invalid_key_schema), ("emails", member_by_sku_schema)]
                )
            )
        self.assertEqual(
            [DiagnosticKind.INVALID_KEY_FIELDS, DiagnosticKind.INVALID_KEY_FIELDS],
            [diagnostic.kind for diagnostic in result.errors],
        )
        self.assertTrue(
            any("Skipping resolvability validation" in message for message in logs.output)
        )

    def test_resolvability_validation_can_be_disabled(self) -> None:
        with self.assertLogs("supergraph_composer.composition.compose", level="INFO"):
            result = compose(
                load_subgraphs([("a", ISS.position_a_schema), ("b", ISS.position_b_schema)]),
                options=CompositionOptions(validate_resolvability=False),
            )
        supergraph = result.raise_for_errors()
        self.assertEqual({}, supergraph.field_origins[("Position", "z")].key_routes)
        self.assertIn("z: Int! @join__field(graph: B)", supergraph.supergraph_sdl)

    def test_type_kind_mismatch_stops_composition(self) -> None:
        result = compose(
            load_subgraphs([("a", ISS.thing_object_schema), ("b", ISS.thing_interface_schema)])
        )
        self.assertIsNone(result.supergraph)
        self.assertEqual(
            [DiagnosticKind.TYPE_KIND_MISMATCH], [diagnostic.kind for diagnostic in result.errors]
        )

    def test_inaccessible_elements_are_hidden_from_clients(self) -> None:
        supergraph = compose(
            load_subgraphs([("accounts", ISS.hidden_inaccessible_schema)])
        ).raise_for_errors()
        expected_api_schema = dedent(
            """\
            schema {
              query: Query
            }

            type Query {
              me: User
            }

            type User {
              id: ID!
            }
        """
        )
        self.assertEqual(_normalize(expected_api_schema), supergraph.api_schema_sdl)
        self.assertIn("secret: Secret @inaccessible", supergraph.supergraph_sdl)
        self.assertIn("internalId: ID @inaccessible", supergraph.supergraph_sdl)
        self.assertIn("type Secret @inaccessible", supergraph.supergraph_sdl)
        build_ast_schema(supergraph.supergraph_ast)

    def test_referenced_inaccessible_type(self) -> None:
        result = compose(load_subgraphs([("accounts", ISS.referenced_inaccessible_schema)]))
        self.assertFalse(result.succeeded)
        self.assertEqual(
            [("REFERENCED_INACCESSIBLE", "Query.secret")],
            [(diagnostic.kind.name, diagnostic.coordinate) for diagnostic in result.errors],
        )

    def test_invalid_inputs(self) -> None:
        with self.assertRaises(ValueError):
            compose([])
        with self.assertRaises(ValueError):
            compose(load_subgraphs([("a", ISS.products_schema), ("a", ISS.reviews_schema)]))
        with self.assertRaises(ValueError):
            compose(load_subgraphs([("a", ISS.products_schema), ("A", ISS.reviews_schema)]))
        with self.assertRaises(ValueError):
            compose_documents(
                load_documents([("products", ISS.products_schema)]),
                subgraph_urls={"reviews": "http://reviews"},
            )
