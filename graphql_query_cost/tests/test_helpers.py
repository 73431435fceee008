# Copyright 2026-present Kensho Technologies, LLC.
"""Common test data and helper functions."""
from typing import Any, Dict, List, Optional

from graphql import GraphQLSchema, build_schema

from ..typedefs import QuerySelectionTree, SelectionNode, TypeKind


# A trimmed-down storefront admin schema. It isn't meant to be complete: it covers connections with
# and without page info, nested connections, interfaces, unions, enums, custom scalars, default
# argument values and mutations.
SCHEMA_TEXT = """
schema {
    query: QueryRoot
    mutation: Mutation
}

scalar DateTime

scalar Decimal

enum CurrencyCode {
    CAD
    EUR
    USD
}

enum OrderDisplayFinancialStatus {
    PAID
    PENDING
    REFUNDED
}

enum OrderTransactionKind {
    REFUND
    SALE
}

enum DiscountApplicationAllocationMethod {
    ACROSS
    EACH
}

interface Node {
    id: ID!
}

interface DiscountApplication {
    allocationMethod: DiscountApplicationAllocationMethod!
    value: PricingValue!
}

union PricingValue = MoneyV2 | PricingPercentageValue

union SearchResult = Customer | Order | Product

type PageInfo {
    hasNextPage: Boolean!
    hasPreviousPage: Boolean!
    startCursor: String
    endCursor: String
}

type MoneyV2 {
    amount: Decimal!
    currencyCode: CurrencyCode!
}

type MoneyBag {
    shopMoney: MoneyV2!
    presentmentMoney: MoneyV2!
}

type PricingPercentageValue {
    percentage: Float!
}

type Shop {
    name: String!
    currencyCode: CurrencyCode!
}

type MailingAddress implements Node {
    id: ID!
    address1: String
    city: String
    country: String
}

type Customer implements Node {
    id: ID!
    email: String
    displayName: String!
    defaultAddress: MailingAddress
    orders(first: Int, last: Int, after: String, before: String): OrderConnection!
}

type ChannelDefinition {
    handle: String!
}

type ChannelInformation implements Node {
    id: ID!
    channelDefinition: ChannelDefinition
}

type Order implements Node {
    id: ID!
    name: String!
    createdAt: DateTime!
    displayFinancialStatus: OrderDisplayFinancialStatus
    tags: [String!]!
    customer: Customer
    billingAddress: MailingAddress
    shippingAddress: MailingAddress
    totalPriceSet: MoneyBag!
    channelInformation: ChannelInformation
    lineItems(first: Int, last: Int, after: String, before: String): LineItemConnection!
    transactions(first: Int, last: Int): OrderTransactionConnection!
    discountApplications(first: Int, last: Int): DiscountApplicationConnection!
}

type OrderConnection {
    edges: [OrderEdge!]!
    nodes: [Order!]!
    pageInfo: PageInfo!
}

type OrderEdge {
    cursor: String!
    node: Order!
}

type LineItem implements Node {
    id: ID!
    title: String!
    quantity: Int!
    variant: ProductVariant
    originalUnitPriceSet: MoneyBag!
}

type LineItemConnection {
    edges: [LineItemEdge!]!
    nodes: [LineItem!]!
    pageInfo: PageInfo!
}

type LineItemEdge {
    cursor: String!
    node: LineItem!
}

type OrderTransaction implements Node {
    id: ID!
    kind: OrderTransactionKind!
    amountSet: MoneyBag!
}

type OrderTransactionConnection {
    edges: [OrderTransactionEdge!]!
    nodes: [OrderTransaction!]!
    pageInfo: PageInfo!
}

type OrderTransactionEdge {
    cursor: String!
    node: OrderTransaction!
}

type DiscountCodeApplication implements DiscountApplication {
    allocationMethod: DiscountApplicationAllocationMethod!
    value: PricingValue!
    code: String!
}

type ManualDiscountApplication implements DiscountApplication {
    allocationMethod: DiscountApplicationAllocationMethod!
    value: PricingValue!
    title: String!
    description: String
}

type DiscountApplicationConnection {
    edges: [DiscountApplicationEdge!]!
    nodes: [DiscountApplication!]!
    pageInfo: PageInfo!
}

type DiscountApplicationEdge {
    cursor: String!
    node: DiscountApplication!
}

type Product implements Node {
    id: ID!
    title: String!
    variants(first: Int, last: Int): ProductVariantConnection!
}

type ProductConnection {
    edges: [ProductEdge!]!
    nodes: [Product!]!
    pageInfo: PageInfo!
}

type ProductEdge {
    cursor: String!
    node: Product!
}

type ProductVariant implements Node {
    id: ID!
    sku: String
    product: Product!
}

type ProductVariantConnection {
    edges: [ProductVariantEdge!]!
    nodes: [ProductVariant!]!
    pageInfo: PageInfo!
}

type ProductVariantEdge {
    cursor: String!
    node: ProductVariant!
}

type UserError {
    field: [String!]
    message: String!
}

input OrderInput {
    id: ID!
    note: String
}

type OrderUpdatePayload {
    order: Order
    userErrors: [UserError!]!
}

type ProductDeletePayload {
    deletedProductId: ID
    userErrors: [UserError!]!
}

type QueryRoot {
    currentApiVersion: String!
    shop: Shop!
    node(id: ID!): Node
    order(id: ID!): Order
    customer(id: ID!): Customer
    orders(
        first: Int
        last: Int
        after: String
        before: String
        query: String
    ): OrderConnection!
    products(first: Int = 5, last: Int, query: String): ProductConnection!
    searchResults(query: String!, first: Int): [SearchResult!]!
}

type Mutation {
    orderUpdate(input: OrderInput!): OrderUpdatePayload
    productDelete(id: ID!): ProductDeletePayload
}
"""


def get_schema() -> GraphQLSchema:
    """Get a schema object for testing."""
    return build_schema(SCHEMA_TEXT)


def make_selection(
    field_name: str,
    parent_type_name: str,
    type_kind: TypeKind = TypeKind.SCALAR,
    children: Optional[List[SelectionNode]] = None,
    **kwargs: Any,
) -> SelectionNode:
    """Make a SelectionNode by hand, for tests that do not go through a schema."""
    return SelectionNode(
        field_name=field_name,
        parent_type_name=parent_type_name,
        type_kind=type_kind,
        children=children or [],
        **kwargs,
    )


def make_connection(
    field_name: str,
    parent_type_name: str,
    children: List[SelectionNode],
    arguments: Optional[Dict[str, Any]] = None,
    **kwargs: Any,
) -> SelectionNode:
    """Make a SelectionNode for a connection field by hand."""
    return make_selection(
        field_name,
        parent_type_name,
        TypeKind.OBJECT,
        children,
        is_connection=True,
        arguments=arguments or {},
        **kwargs,
    )


def make_query_tree(selections: List[SelectionNode]) -> QuerySelectionTree:
    """Wrap top-level selections into a query selection tree."""
    return QuerySelectionTree(
        operation_type="query", root_type_name="QueryRoot", selections=selections
    )
