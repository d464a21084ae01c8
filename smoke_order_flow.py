#!/usr/bin/env python3
"""
Smoke check of the order submission flow over the HTTP API.

Submits an order through the GraphQL endpoint of a running instance, then
reads it back by order number and checks the confirmation status.

Usage:
    API_BASE_URL=http://localhost:8000 python smoke_order_flow.py
"""
import argparse
import os
import sys
from uuid import uuid4

import requests

API_BASE_URL = os.environ.get("API_BASE_URL", "http://localhost:8000")
GRAPHQL_ENDPOINT = f"{API_BASE_URL}/graphql/"

SUBMIT_ORDER = """
mutation SubmitOrder($input: SubmitOrderInput!) {
  submitOrder(input: $input) {
    ok
    orderId
    orderNumber
    confirmation { sent pending messageId error }
    error { code message stage retryable status details }
  }
}
"""

GET_ORDER = """
query GetOrder($orderNumber: String!) {
  order(orderNumber: $orderNumber) {
    id
    orderNumber
    status
    orderType
    customerName
    subtotal
    deliveryFee
    totalAmount
    estimatedReadyAt
    items { productName quantity unitPrice totalPrice }
  }
}
"""


class GraphQLClient:
    """Client for the GraphQL API."""

    def __init__(self, base_url: str = GRAPHQL_ENDPOINT, timeout: float = 30):
        self.base_url = base_url
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
        })

    def execute(
        self,
        query: str,
        variables: dict = None,
        operation_name: str = None,
        request_id: str = None,
    ) -> dict:
        """Run a GraphQL operation and return the decoded response."""
        payload = {
            "query": query,
        }
        if variables:
            payload["variables"] = variables
        if operation_name:
            payload["operationName"] = operation_name

        headers = {}
        if request_id:
            headers["X-Request-ID"] = request_id

        response = self.session.post(
            self.base_url,
            json=payload,
            headers=headers,
            timeout=self.timeout,
        )

        response.raise_for_status()
        return response.json()

    def submit_order(self, order_input: dict, request_id: str = None) -> dict:
        response = self.execute(
            SUBMIT_ORDER,
            variables={"input": order_input},
            operation_name="SubmitOrder",
            request_id=request_id,
        )
        if "errors" in response:
            raise RuntimeError(f"submitOrder failed: {response['errors']}")
        return response["data"]["submitOrder"]

    def get_order(self, order_number: str) -> dict | None:
        response = self.execute(
            GET_ORDER,
            variables={"orderNumber": order_number},
            operation_name="GetOrder",
        )
        if "errors" in response:
            raise RuntimeError(f"order query failed: {response['errors']}")
        return response["data"]["order"]


def sample_order(email: str) -> dict:
    return {
        "customerName": "Smoke Test Customer",
        "customerEmail": email,
        "customerPhone": "+34 600 000 000",
        "orderType": "pickup",
        "subtotal": "15.00",
        "deliveryFee": "0.00",
        "total": "15.00",
        "items": [
            {"productId": 1, "name": "Margherita", "quantity": 2, "unitPrice": "7.50"},
        ],
    }


def print_section(title: str):
    print("\n" + "=" * 60)
    print(f"  {title}")
    print("=" * 60)


def print_result(success: bool, message: str):
    status = "✓" if success else "✗"
    print(f"{status} {message}")


def run(client: GraphQLClient, email: str) -> bool:
    """Submit one order and read it back. Returns True when every check passed."""
    print_section("Submit order")
    payload = client.submit_order(sample_order(email), request_id=str(uuid4()))
    if not payload["ok"]:
        error = payload["error"]
        print_result(False, f"{error['code']} at {error['stage']}: {error['message']}")
        return False
    print_result(True, f"Order {payload['orderNumber']} committed ({payload['orderId']})")

    confirmation = payload["confirmation"] or {}
    if confirmation.get("pending"):
        print_result(True, "Confirmation handed to background delivery")
    elif confirmation.get("sent"):
        print_result(True, f"Confirmation sent, message id {confirmation['messageId']}")
    else:
        print_result(False, f"Confirmation not sent: {confirmation.get('error')}")

    print_section("Read order back")
    order = client.get_order(payload["orderNumber"])
    if order is None:
        print_result(False, "Order not found by number")
        return False
    print_result(order["totalAmount"] == "15.00", f"Total {order['totalAmount']}")
    print_result(len(order["items"]) == 1, f"{len(order['items'])} item(s)")
    print_result(order["estimatedReadyAt"] is not None, f"Ready at {order['estimatedReadyAt']}")
    return order["totalAmount"] == "15.00" and len(order["items"]) == 1


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--api-url", default=API_BASE_URL)
    parser.add_argument("--email", default="smoke@example.com")
    args = parser.parse_args(argv)

    client = GraphQLClient(base_url=f"{args.api_url}/graphql/")
    try:
        passed = run(client, args.email)
    except (requests.RequestException, RuntimeError) as e:
        print_section("ERROR")
        print_result(False, str(e))
        return 1
    return 0 if passed else 1


if __name__ == "__main__":
    sys.exit(main())
