# Copyright 2021-present Kensho Technologies, LLC.
from textwrap import dedent


class InputSchemaStrings(object):
    position_a_schema = dedent(
        """\
        type Query {
          positionA: Position!
        }

        type Position @shareable {
          x: Int!
          y: Int!
        }
    """
    )

    position_b_schema = dedent(
        """\
        type Query {
          positionB: Position!
        }

        type Position @shareable {
          x: Int!
          y: Int!
          z: Int!
        }
    """
    )

    unshareable_position_a_schema = dedent(
        """\
        type Query {
          positionA: Position!
        }

        type Position {
          x: Int!
          y: Int!
        }
    """
    )

    unshareable_position_b_schema = dedent(
        """\
        type Query {
          positionB: Position!
        }

        type Position {
          x: Int!
          y: Int!
          z: Int!
        }
    """
    )

    keyed_position_a_schema = dedent(
        """\
        type Query {
          positionA: Position!
        }

        type Position @key(fields: "x y") {
          x: Int!
          y: Int!
        }
    """
    )

    keyed_position_b_schema = dedent(
        """\
        type Query {
          positionB: Position!
        }

        type Position @key(fields: "x y") {
          x: Int!
          y: Int!
          z: Int!
        }
    """
    )

    products_schema = dedent(
        """\
        type Query {
          products: [Product!]!
        }

        type Product @key(fields: "upc") {
          upc: String!
          name: String
          price: Int
        }
    """
    )

    reviews_schema = dedent(
        """\
        type Query {
          reviews: [Review!]!
        }

        type Review {
          body: String!
          product: Product!
        }

        type Product @key(fields: "upc") {
          upc: String!
          reviews: [Review!]!
        }
    """
    )

    unresolvable_reviews_schema = dedent(
        """\
        type Query {
          reviews: [Review!]!
        }

        type Review {
          body: String!
          product: Product!
        }

        type Product @key(fields: "upc", resolvable: false) {
          upc: String!
          reviews: [Review!]!
        }
    """
    )

    thing_by_id_schema = dedent(
        """\
        type Query {
          thing: Thing
        }

        type Thing @key(fields: "id") {
          id: ID!
        }
    """
    )

    thing_by_id_and_code_schema = dedent(
        """\
        type Thing @key(fields: "id") @key(fields: "code") {
          id: ID!
          code: String!
        }
    """
    )

    thing_by_code_schema = dedent(
        """\
        type Thing @key(fields: "code") {
          code: String!
          label: String
        }
    """
    )

    output_color_a_schema = dedent(
        """\
        type Query {
          colorA: Color
        }

        enum Color {
          RED
          GREEN
        }
    """
    )

    output_color_b_schema = dedent(
        """\
        type Query {
          colorB: Color
        }

        enum Color {
          RED
          BLUE
        }
    """
    )

    input_color_a_schema = dedent(
        """\
        type Query {
          paintA(color: Color!): Boolean
        }

        enum Color {
          RED
          GREEN
        }
    """
    )

    input_color_b_schema = dedent(
        """\
        type Query {
          paintB(color: Color!): Boolean
        }

        enum Color {
          RED
          BLUE
        }
    """
    )

    input_only_blue_schema = dedent(
        """\
        type Query {
          paintB(color: Color!): Boolean
        }

        enum Color {
          BLUE
        }
    """
    )

    input_and_output_color_schema = dedent(
        """\
        type Query {
          colorA(filter: Color): Color
        }

        enum Color {
          RED
          GREEN
        }
    """
    )

    search_a_schema = dedent(
        """\
        type Query {
          searchA(filter: Filter): Int
        }

        input Filter {
          term: String
          limit: Int
        }
    """
    )

    search_b_schema = dedent(
        """\
        type Query {
          searchB(filter: Filter): Int
        }

        input Filter {
          term: String!
        }
    """
    )

    search_with_required_offset_schema = dedent(
        """\
        type Query {
          searchB(filter: Filter): Int
        }

        input Filter {
          term: String
          offset: Int!
        }
    """
    )

    thing_object_schema = dedent(
        """\
        type Query {
          thing: Thing
        }

        type Thing {
          id: ID
        }
    """
    )

    thing_interface_schema = dedent(
        """\
        type Query {
          otherThing: Thing
        }

        interface Thing {
          id: ID
        }
    """
    )

    user_a_schema = dedent(
        """\
        type Query {
          me: User
        }

        type User @key(fields: "id") {
          id: ID!
          name: String
        }
    """
    )

    user_b_schema = dedent(
        """\
        type Query {
          user(id: ID!): User
        }

        type User @key(fields: "id") {
          id: ID!
          name: String
        }
    """
    )

    shareable_user_a_schema = dedent(
        """\
        type Query {
          me: User
        }

        type User @key(fields: "id") {
          id: ID!
          name: String! @shareable
        }
    """
    )

    shareable_user_b_schema = dedent(
        """\
        type Query {
          user(id: ID!): User
        }

        type User @key(fields: "id") {
          id: ID!
          name: String @shareable
        }
    """
    )

    shareable_user_with_int_name_schema = dedent(
        """\
        type Query {
          user(id: ID!): User
        }

        type User @key(fields: "id") {
          id: ID!
          name: Int @shareable
        }
    """
    )

    node_a_schema = dedent(
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

    node_b_schema = dedent(
        """\
        type Query {
          nodeB: Node
        }

        interface Node {
          id: ID!
          createdAt: String
        }

        type Post implements Node {
          id: ID!
          createdAt: String
        }
    """
    )

    referenced_inaccessible_schema = dedent(
        """\
        type Query {
          me: User
          secret: Secret
        }

        type User {
          id: ID!
        }

        type Secret @inaccessible {
          code: String
        }
    """
    )

    hidden_inaccessible_schema = dedent(
        """\
        type Query {
          me: User
          secret: Secret @inaccessible
        }

        type User {
          id: ID!
          internalId: ID @inaccessible
        }

        type Secret @inaccessible {
          code: String
        }
    """
    )

    cached_directive_a_schema = dedent(
        """\
        directive @cached(ttl: Int) on FIELD | QUERY

        type Query {
          cachedA: Int
        }
    """
    )

    cached_directive_b_schema = dedent(
        """\
        directive @cached(ttl: Int) on QUERY | FIELD

        type Query {
          cachedB: Int
        }
    """
    )

    different_cached_directive_schema = dedent(
        """\
        directive @cached(ttl: Int!) on FIELD | QUERY

        type Query {
          cachedB: Int
        }
    """
    )

    no_directive_schema = dedent(
        """\
        type Query {
          plain: Int
        }
    """
    )

    composed_directive_schema = dedent(
        """\
        extend schema @composeDirective(name: "@audit")

        directive @audit(level: Int) on FIELD_DEFINITION | OBJECT

        directive @internal on OBJECT

        type Query @internal {
          me: String @audit(level: 1)
        }
    """
    )

    mixed_location_directive_schema = dedent(
        """\
        directive @trace(label: String) on FIELD | FIELD_DEFINITION

        type Query {
          traced: Int @trace(label: "traced")
        }
    """
    )

    custom_root_schema = dedent(
        """\
        schema {
          query: RootQuery
        }

        type RootQuery {
          product(upc: String!): Product
        }

        type Product @key(fields: "upc") {
          upc: String!
        }
    """
    )

    federation_protocol_schema = dedent(
        """\
        scalar _Any

        union _Entity = Product

        type _Service {
          sdl: String
        }

        type Query {
          _entities(representations: [_Any!]!): [_Entity]!
          _service: _Service!
          topProducts: [Product]
        }

        type Product @key(fields: "upc") {
          upc: String!
        }
    """
    )

    extended_product_schema = dedent(
        """\
        type Query {
          topProducts: [Product]
        }

        type Product @key(fields: "upc") {
          upc: String!
        }

        extend type Product {
          name: String @deprecated(reason: "Use title.")
          title: String
        }
    """
    )

    nested_key_schema = dedent(
        """\
        type Query {
          member: Member
        }

        type Member @key(fields: "id organization { id }") {
          id: ID!
          organization: Organization!
        }

        type Organization {
          id: ID!
        }
    """
    )

    invalid_key_schema = dedent(
        """\
        type Query {
          member: Member
        }

        type Member @key(fields: "sku") @key(fields: "organization") {
          id: ID!
          organization: Organization!
        }

        type Organization {
          id: ID!
        }
    """
    )
