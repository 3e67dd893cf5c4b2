from __future__ import annotations

from xml.etree import ElementTree

from tests.support.api_harness import ApiIntegrationTestCase


class StatsApiIntegrationTests(ApiIntegrationTestCase):
    def test_requests_are_counted(self) -> None:
        for _ in range(3):
            status_code, _ = self.request_json("/health/live", headers={"User-Agent": "integration/1"})
            self.assertEqual(status_code, 200)
        missing_status, missing_body = self.request_json("/nowhere")
        self.assertEqual(missing_status, 404)
        self.assertEqual(missing_body["error"]["code"], "http_error")

        status_code, body = self.request_json("/stats")

        self.assertEqual(status_code, 200)
        self.assertGreaterEqual(body["URLRequestCounts"]["/health/live"], 3)
        self.assertEqual(body["URLRequestCounts"]["/nowhere"], 1)
        self.assertEqual(body["UserAgentCounts"]["integration/1"], 3)
        self.assertGreaterEqual(body["total_status_code_count"]["404"], 1)
        self.assertEqual(body["total_count"], sum(body["total_status_code_count"].values()))
        self.assertGreater(body["uptime_sec"], 0)
        self.assertIn("ResponseSince", body["MaxResponseTimes"])

    def test_xml_by_query_and_accept_header(self) -> None:
        status_code, headers, raw = self.request_raw("/stats?format=xml")
        self.assertEqual(status_code, 200)
        self.assertTrue(headers["content-type"].startswith("application/xml"))
        self.assertEqual(ElementTree.fromstring(raw).tag, "data")

        status_code, headers, raw = self.request_raw("/stats", headers={"Accept": "application/xml"})
        self.assertEqual(status_code, 200)
        self.assertEqual(ElementTree.fromstring(raw).tag, "data")

    def test_unsupported_format(self) -> None:
        status_code, body = self.request_json("/stats?format=yaml")

        self.assertEqual(status_code, 400)
        self.assertEqual(body["error"]["code"], "unsupported_format")
        self.assertEqual(body["error"]["details"]["supported"], ["json", "xml"])

    def test_request_id_is_echoed(self) -> None:
        _, headers, _ = self.request_raw("/health/live", headers={"X-Request-ID": "req-42"})

        self.assertEqual(headers.get("x-request-id"), "req-42")
