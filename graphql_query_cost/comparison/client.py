# Copyright 2026-present Kensho Technologies, LLC.
"""Client for a GraphQL admin API that reports the cost it charged for each query."""
from dataclasses import dataclass, field
import os
from typing import Any, Dict, List, Mapping, Optional, Tuple

import requests

from ..exceptions import RemoteQueryCostError, RemoteQueryThrottledError


DEFAULT_API_VERSION = "2025-07"
DEFAULT_TIMEOUT_SECONDS = 15

SHOP_DOMAIN_ENV_VAR = "SHOPIFY_SHOP_DOMAIN"
ACCESS_TOKEN_ENV_VAR = "SHOPIFY_ACCESS_TOKEN"
API_VERSION_ENV_VAR = "SHOPIFY_API_VERSION"

# Asks the API to report the cost of every field, not only the total.
COST_DEBUG_HEADER = "Shopify-GraphQL-Cost-Debug"

# Error code of GraphQL errors reporting that the query exceeded the available rate limit.
THROTTLED_ERROR_CODE = "THROTTLED"


@dataclass(frozen=True)
class RemoteFieldCost:
    """The cost the remote API charged for one field of a query."""

    path: Tuple[str, ...]
    defined_cost: Optional[int]
    requested_total_cost: Optional[int]
    requested_children_cost: Optional[int]

    @property
    def name(self) -> str:
        """Return the response key of the field."""
        return self.path[-1] if self.path else ""


@dataclass
class RemoteQueryCost:
    """What the remote API reported after being sent a query."""

    requested_query_cost: Optional[int]
    actual_query_cost: Optional[int] = None
    fields: List[RemoteFieldCost] = field(default_factory=list)

    # GraphQL errors returned instead of, or alongside, the data.
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def error_message(self) -> str:
        """Return the messages of all the errors, joined into one string."""
        return ", ".join(str(error.get("message", error)) for error in self.errors)


def _parse_field_costs(field_cost_data: List[Mapping[str, Any]]) -> List[RemoteFieldCost]:
    return [
        RemoteFieldCost(
            path=tuple(str(path_element) for path_element in field_data.get("path", ())),
            defined_cost=field_data.get("definedCost"),
            requested_total_cost=field_data.get("requestedTotalCost"),
            requested_children_cost=field_data.get("requestedChildrenCost"),
        )
        for field_data in field_cost_data
    ]


def parse_remote_query_cost(payload: Mapping[str, Any]) -> RemoteQueryCost:
    """Extract the reported cost from a GraphQL response body."""
    cost_data = payload.get("extensions", {}).get("cost", {})
    return RemoteQueryCost(
        requested_query_cost=cost_data.get("requestedQueryCost"),
        actual_query_cost=cost_data.get("actualQueryCost"),
        fields=_parse_field_costs(cost_data.get("fields", [])),
        errors=list(payload.get("errors") or []),
    )


class AdminApiClient:
    """Sends GraphQL queries to a shop's admin API, and returns the cost the API charged."""

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        api_version: str = DEFAULT_API_VERSION,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Create a client for the given shop.

        Args:
            shop_domain: e.g. "example.myshopify.com"
            access_token: admin API access token
            api_version: dated API version the queries are written against
            session: optional requests.Session, for connection reuse or testing
            timeout: seconds to wait for each response
        """
        if not shop_domain or not access_token:
            raise ValueError("Both a shop domain and an access token are required.")
        self.shop_domain = shop_domain
        self.access_token = access_token
        self.api_version = api_version
        self.session = session or requests.Session()
        self.timeout = timeout

    @classmethod
    def from_environment(
        cls, environ: Optional[Mapping[str, str]] = None, **kwargs: Any
    ) -> "AdminApiClient":
        """Create a client configured by the SHOPIFY_* environment variables."""
        environ = os.environ if environ is None else environ
        return cls(
            shop_domain=environ.get(SHOP_DOMAIN_ENV_VAR, ""),
            access_token=environ.get(ACCESS_TOKEN_ENV_VAR, ""),
            api_version=environ.get(API_VERSION_ENV_VAR, DEFAULT_API_VERSION),
            **kwargs,
        )

    @property
    def endpoint(self) -> str:
        """Return the URL queries are posted to."""
        return f"https://{self.shop_domain}/admin/api/{self.api_version}/graphql.json"

    def execute_query(
        self, query_string: str, variables: Optional[Mapping[str, Any]] = None
    ) -> RemoteQueryCost:
        """Execute the query remotely and return the cost the API reported for it.

        Raises:
            - requests.RequestException if the request could not be sent or received
            - RemoteQueryThrottledError if the API rejected the request due to rate limiting
            - RemoteQueryCostError if the API returned any other unexpected response
        """
        headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": self.access_token,
            COST_DEBUG_HEADER: "1",
        }
        body = {"query": query_string, "variables": dict(variables or {})}
        response = self.session.post(
            self.endpoint, json=body, headers=headers, timeout=self.timeout
        )

        if response.status_code == 429:
            raise RemoteQueryThrottledError(f"Request to {self.endpoint} was rate limited.")
        elif response.status_code != 200:
            error_text = response.text[:200] if response.text else "Unknown error"
            raise RemoteQueryCostError(
                f"Request to {self.endpoint} failed with status {response.status_code}: "
                f"{error_text}"
            )

        try:
            payload: Dict[str, Any] = response.json()
        except ValueError as e:
            raise RemoteQueryCostError(f"{self.endpoint} returned invalid JSON.") from e

        remote_cost = parse_remote_query_cost(payload)
        if any(
            (error.get("extensions") or {}).get("code") == THROTTLED_ERROR_CODE
            for error in remote_cost.errors
        ):
            raise RemoteQueryThrottledError(f"Query sent to {self.endpoint} was throttled.")
        if remote_cost.requested_query_cost is None and not remote_cost.errors:
            raise RemoteQueryCostError(
                f"{self.endpoint} did not report a query cost. Response: {payload}"
            )
        return remote_cost
