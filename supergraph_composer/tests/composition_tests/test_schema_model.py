# Copyright 2021-present Kensho Technologies, LLC.
from textwrap import dedent
import unittest

from graphql import parse, parse_type, print_ast
from graphql.language.ast import OperationType

from ...composition.schema_model import SubgraphSchema, TypeKind, TypeReference, load_subgraph
from ...exceptions import SubgraphStructureError
from .input_schema_strings import InputSchemaStrings as ISS


class TestTypeReference(unittest.TestCase):
    def test_from_type_node(self) -> None:
        type_reference = TypeReference.from_type_node(parse_type("[[Int!]]!"))
        self.assertEqual("Int", type_reference.named_type)
        self.assertEqual((True, False, True), type_reference.non_null)
        self.assertEqual(2, type_reference.list_depth)
        self.assertTrue(type_reference.is_non_null)

    def test_to_type_node(self) -> None:
        for type_string in ("Int", "Int!", "[Int]", "[Int!]!", "[[String]!]"):
            type_reference = TypeReference.from_type_node(parse_type(type_string))
            self.assertEqual(type_string, print_ast(type_reference.to_type_node()))
            self.assertEqual(type_string, str(type_reference))

    def test_renaming(self) -> None:
        type_reference = TypeReference.from_type_node(
            parse_type("[RootQuery]"), {"RootQuery": "Query"}
        )
        self.assertEqual(TypeReference("Query", (False, False)), type_reference)

    def test_with_non_null_keeps_list_depth(self) -> None:
        type_reference = TypeReference("Int", (False, True))
        self.assertEqual("[Int!]!", str(type_reference.with_non_null((True, True))))
        with self.assertRaises(AssertionError):
            type_reference.with_non_null((True,))


class TestLoadSubgraph(unittest.TestCase):
    def test_basic_entity(self) -> None:
        subgraph = load_subgraph("products", parse(ISS.products_schema), url="http://products")
        self.assertEqual("products", subgraph.name)
        self.assertEqual("http://products", subgraph.url)
        self.assertEqual({OperationType.QUERY: "Query"}, subgraph.root_types)
        self.assertEqual(["Query", "Product"], list(subgraph.types))

        product = subgraph.types["Product"]
        self.assertEqual(TypeKind.OBJECT, product.kind)
        self.assertTrue(product.is_entity)
        self.assertEqual(1, len(product.keys))
        key = product.keys[0]
        self.assertEqual("upc", key.field_set)
        self.assertEqual((("upc",),), key.field_paths)
        self.assertTrue(key.resolvable)

        # Key fields are implicitly shareable, other fields are not.
        self.assertTrue(product.get_field("upc").shareable)
        self.assertFalse(product.get_field("name").shareable)

    def test_from_ast_matches_load_subgraph(self) -> None:
        document = parse(ISS.products_schema)
        self.assertEqual(
            load_subgraph("products", document), SubgraphSchema.from_ast("products", document)
        )

    def test_non_resolvable_key(self) -> None:
        subgraph = load_subgraph("reviews", parse(ISS.unresolvable_reviews_schema))
        self.assertFalse(subgraph.types["Product"].keys[0].resolvable)

    def test_nested_key(self) -> None:
        subgraph = load_subgraph("members", parse(ISS.nested_key_schema))
        key = subgraph.types["Member"].keys[0]
        self.assertEqual("id organization { id }", key.field_set)
        self.assertEqual((("id",), ("organization", "id")), key.field_paths)
        self.assertEqual(frozenset({("id",), ("organization", "id")}), key.identity)

    def test_custom_root_type_is_renamed(self) -> None:
        subgraph = load_subgraph("products", parse(ISS.custom_root_schema))
        self.assertEqual({OperationType.QUERY: "Query"}, subgraph.root_types)
        self.assertEqual(["Query", "Product"], list(subgraph.types))
        product_field = subgraph.types["Query"].get_field("product")
        self.assertEqual("Product", product_field.type.named_type)
        self.assertEqual("String!", str(product_field.get_argument("upc").type))

    def test_federation_protocol_types_are_skipped(self) -> None:
        subgraph = load_subgraph("products", parse(ISS.federation_protocol_schema))
        self.assertEqual(["Query", "Product"], list(subgraph.types))
        self.assertEqual(
            ["topProducts"], [field.name for field in subgraph.types["Query"].fields]
        )

    def test_extensions_are_folded(self) -> None:
        subgraph = load_subgraph("products", parse(ISS.extended_product_schema))
        product = subgraph.types["Product"]
        self.assertEqual(["upc", "name", "title"], [field.name for field in product.fields])
        self.assertEqual(
            ["deprecated"],
            [directive.name.value for directive in product.get_field("name").directives],
        )

    def test_input_object(self) -> None:
        subgraph = load_subgraph("search", parse(ISS.search_with_required_offset_schema))
        search_filter = subgraph.types["Filter"]
        self.assertEqual(TypeKind.INPUT_OBJECT, search_filter.kind)
        self.assertEqual(["term", "offset"], [field.name for field in search_filter.input_fields])
        self.assertEqual("Int!", str(search_filter.get_input_field("offset").type))
        self.assertIsNone(search_filter.get_input_field("limit"))
        self.assertEqual(
            "Filter", subgraph.types["Query"].get_field("searchB").arguments[0].type.named_type
        )

    def test_directive_metadata(self) -> None:
        subgraph = load_subgraph("audited", parse(ISS.composed_directive_schema))
        self.assertEqual(frozenset({"audit"}), subgraph.composed_directive_names)
        self.assertEqual(["audit", "internal"], list(subgraph.directive_definitions))
        self.assertEqual(
            {("audit", "Query.me"), ("internal", "Query")},
            {
                (application.directive_name, application.coordinate)
                for application in subgraph.directive_applications
            },
        )
        # Custom directive applications are not kept on the type model itself.
        self.assertEqual((), subgraph.types["Query"].directives)

    def test_invalid_subgraph_name(self) -> None:
        with self.assertRaises(ValueError):
            load_subgraph("bad-name", parse(ISS.products_schema))
        with self.assertRaises(ValueError):
            load_subgraph("", parse(ISS.products_schema))

    def test_executable_definition_is_rejected(self) -> None:
        with self.assertRaises(SubgraphStructureError):
            load_subgraph("products", parse(ISS.products_schema + "\nquery { products { upc } }"))

    def test_duplicate_type_is_rejected(self) -> None:
        schema_string = ISS.products_schema + dedent(
            """\

            type Product {
              upc: String!
            }
        """
        )
        with self.assertRaises(SubgraphStructureError):
            load_subgraph("products", parse(schema_string))

    def test_non_object_root_type_is_rejected(self) -> None:
        schema_string = dedent(
            """\
            schema {
              query: Root
            }

            scalar Root
        """
        )
        with self.assertRaises(SubgraphStructureError):
            load_subgraph("broken", parse(schema_string))

    def test_key_with_alias_is_rejected(self) -> None:
        schema_string = dedent(
            """\
            type Query {
              product: Product
            }

            type Product @key(fields: "code: upc") {
              upc: String!
            }
        """
        )
        with self.assertRaises(SubgraphStructureError):
            load_subgraph("products", parse(schema_string))
