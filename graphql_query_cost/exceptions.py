# Copyright 2026-present Kensho Technologies, LLC.
class QueryCostError(Exception):
    """Generic error when estimating the cost of a GraphQL query."""


class GraphQLParsingError(QueryCostError):
    """Exception raised when the provided GraphQL string could not be parsed."""


class GraphQLValidationError(QueryCostError):
    """Exception raised when the provided GraphQL document cannot be walked for cost estimation.

    For example:
    - the document has several operations and no operation name was given;
    - a fragment spread refers to a fragment that is not defined;
    - fragment spreads form a cycle.
    """


class RemoteQueryCostError(QueryCostError):
    """Exception raised when a remote API did not report the cost of a query it was sent."""


class RemoteQueryThrottledError(RemoteQueryCostError):
    """Exception raised when a remote API rejected a query because of rate limiting."""


class InvalidCostModelError(QueryCostError):
    """Exception raised when a cost model configuration is malformed.

    For example:
    - the bucket table bounds are not strictly increasing;
    - the bucket multipliers decrease as the page size grows;
    - a constant is negative.
    """
