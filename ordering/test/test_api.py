"""
Integration tests for GraphQL API.
"""
import json

from django.core import mail
from django.test import TestCase, TransactionTestCase, override_settings

from ordering.api.middleware import ErrorHandler
from ordering.domain.errors import DuplicateIdentifier, TransientStorageError
from ordering.infra.models import OrderORM
from ordering.test.fixtures import order_request

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
            orderNumber
            status
            orderType
            customerName
            subtotal
            deliveryFee
            totalAmount
            estimatedReadyAt
            items {
                productId
                productName
                quantity
                unitPrice
                totalPrice
                customizations { name quantity totalPrice }
            }
        }
    }
"""


@override_settings(EMAIL_BACKEND="django.core.mail.backends.locmem.EmailBackend")
class GraphQLAPITest(TransactionTestCase):
    """Integration tests for GraphQL API."""

    def _post(self, query, variables=None, **headers):
        return self.client.post(
            "/graphql/",
            data=json.dumps({"query": query, "variables": variables or {}}),
            content_type="application/json",
            headers=headers,
        )

    def test_submit_order_mutation(self):
        response = self._post(SUBMIT_ORDER, {"input": order_request()})

        self.assertEqual(response.status_code, 200)
        payload = response.json()["data"]["submitOrder"]
        self.assertTrue(payload["ok"])
        self.assertIsNone(payload["error"])
        self.assertRegex(payload["orderNumber"], r"^ORD-\d{8}-\d{4}$")
        self.assertTrue(payload["confirmation"]["sent"])
        self.assertFalse(payload["confirmation"]["pending"])
        self.assertEqual(len(mail.outbox), 1)
        self.assertTrue(OrderORM.objects.filter(id=payload["orderId"]).exists())

    def test_submit_with_customizations(self):
        data = order_request(
            subtotal="16.00",
            total="16.00",
            items=[{
                "productId": 1,
                "name": "Margherita",
                "quantity": 2,
                "unitPrice": "7.50",
                "customizations": [{"name": "Olives", "unitPrice": "1.00"}],
            }],
        )
        payload = self._post(SUBMIT_ORDER, {"input": data}).json()["data"]["submitOrder"]
        self.assertTrue(payload["ok"])

        order = self._post(GET_ORDER, {"orderNumber": payload["orderNumber"]}).json()["data"]["order"]
        customization = order["items"][0]["customizations"][0]
        self.assertEqual(customization, {"name": "Olives", "quantity": 1, "totalPrice": "1.00"})

    def test_validation_error_payload(self):
        data = order_request(customerEmail="nope", items=[])
        response = self._post(SUBMIT_ORDER, {"input": data})

        self.assertEqual(response.status_code, 200)
        payload = response.json()["data"]["submitOrder"]
        self.assertFalse(payload["ok"])
        self.assertIsNone(payload["orderNumber"])
        error = payload["error"]
        self.assertEqual(error["code"], "VALIDATION_ERROR")
        self.assertEqual(error["stage"], "VALIDATING")
        self.assertEqual(error["status"], 400)
        self.assertIn("Invalid email format", error["details"])
        self.assertEqual(OrderORM.objects.count(), 0)
        self.assertEqual(len(mail.outbox), 0)

    def test_order_query(self):
        submitted = self._post(SUBMIT_ORDER, {"input": order_request()}).json()["data"]["submitOrder"]

        response = self._post(GET_ORDER, {"orderNumber": submitted["orderNumber"]})

        self.assertEqual(response.status_code, 200)
        order = response.json()["data"]["order"]
        self.assertEqual(order["orderNumber"], submitted["orderNumber"])
        self.assertEqual(order["status"], "pending")
        self.assertEqual(order["orderType"], "pickup")
        self.assertEqual(order["customerName"], "Test Customer")
        self.assertEqual(order["totalAmount"], "15.00")
        self.assertIsNotNone(order["estimatedReadyAt"])
        self.assertEqual(
            order["items"],
            [{
                "productId": 1,
                "productName": "Margherita",
                "quantity": 2,
                "unitPrice": "7.50",
                "totalPrice": "15.00",
                "customizations": [],
            }],
        )

    def test_unknown_order_is_null(self):
        response = self._post(GET_ORDER, {"orderNumber": "ORD-19990101-0001"})
        self.assertIsNone(response.json()["data"]["order"])

    def test_request_id_is_echoed(self):
        response = self._post(GET_ORDER, {"orderNumber": "ORD-19990101-0001"}, **{"X-Request-ID": "req-42"})
        self.assertEqual(response.headers["X-Request-ID"], "req-42")

    def test_invalid_json(self):
        response = self.client.post("/graphql/", data="{not json", content_type="application/json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["code"], "VALIDATION_ERROR")

    def test_get_returns_hint(self):
        response = self.client.get("/graphql/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("Use POST", response.json()["message"])


@override_settings(EMAIL_BACKEND="django.core.mail.backends.locmem.EmailBackend")
class PendingConfirmationAPITest(TestCase):
    """Inside an open transaction the confirmation waits for the commit."""

    def test_confirmation_is_pending_until_commit(self):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(
                "/graphql/",
                data=json.dumps({"query": SUBMIT_ORDER, "variables": {"input": order_request()}}),
                content_type="application/json",
            )
            payload = response.json()["data"]["submitOrder"]
            self.assertTrue(payload["ok"])
            self.assertEqual(
                payload["confirmation"],
                {"sent": None, "pending": True, "messageId": None, "error": None},
            )
            self.assertEqual(len(mail.outbox), 0)

        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(payload["orderNumber"], mail.outbox[0].subject)

class ErrorHandlerTest(TestCase):
    """Tests for error code to HTTP status mapping."""

    def test_status_mapping(self):
        self.assertEqual(ErrorHandler.status_for("VALIDATION_ERROR"), 400)
        self.assertEqual(ErrorHandler.status_for("DUPLICATE_IDENTIFIER"), 409)
        self.assertEqual(ErrorHandler.status_for("STORAGE_UNAVAILABLE"), 503)
        self.assertEqual(ErrorHandler.status_for("SOMETHING_ELSE"), 500)

    def test_handle_ordering_error(self):
        response = ErrorHandler.handle_error(DuplicateIdentifier(3))
        self.assertEqual(response.status_code, 409)
        body = json.loads(response.content)
        self.assertEqual(body["error"]["code"], "DUPLICATE_IDENTIFIER")

        response = ErrorHandler.handle_error(TransientStorageError("Storage unavailable: timeout"))
        self.assertEqual(response.status_code, 503)

    def test_handle_unexpected_error(self):
        with self.assertLogs("ordering.api.middleware", level="ERROR"):
            response = ErrorHandler.handle_error(RuntimeError("boom"))
        self.assertEqual(response.status_code, 500)
        self.assertEqual(json.loads(response.content)["error"]["code"], "INTERNAL_ERROR")
