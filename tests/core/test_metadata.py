import http.client
import io
import unittest

from hostboot.bootstrap_tools import build_tool_registry
from hostboot.core.kernel import Kernel
from hostboot.metadata import INSTANCE_ID_PATH, REGION_PATH, MetadataResolver
from hostboot.profile import load_profile
from hostboot.testing import metadata_fetch
from hostboot.trace.run_log import RunLog


def _resolver(fetch) -> MetadataResolver:
    return MetadataResolver("http://169.254.169.254", default_region="us-east-1", fetch=fetch)


class TestMetadataResolver(unittest.TestCase):
    def setUp(self) -> None:
        self.out = io.StringIO()
        self.log = RunLog(stream=self.out)

    def test_token_authenticated_reads(self) -> None:
        fetch = metadata_fetch(region="eu-west-1", instance_id="i-0123456789abcdef0")
        ident = _resolver(fetch).resolve(self.log)

        self.assertEqual(ident.region, "eu-west-1")
        self.assertEqual(ident.instance_id, "i-0123456789abcdef0")
        self.assertTrue(ident.token_used)
        calls = fetch.calls
        self.assertEqual(calls[0]["method"], "PUT")
        self.assertEqual(calls[0]["headers"], {"X-aws-ec2-metadata-token-ttl-seconds": "21600"})
        for c in calls[1:]:
            self.assertEqual(c["method"], "GET")
            self.assertEqual(c["headers"], {"X-aws-ec2-metadata-token": "tok"})
        self.assertIn("Detected AWS region: eu-west-1", self.out.getvalue())

    def test_empty_region_falls_back_to_default(self) -> None:
        ident = _resolver(metadata_fetch(region="", instance_id="i-1")).resolve(self.log)
        self.assertEqual(ident.region, "us-east-1")
        self.assertFalse(ident.region_from_metadata)
        self.assertIn(
            "Warning: Could not retrieve AWS region from metadata, defaulting to us-east-1",
            self.out.getvalue(),
        )

    def test_region_lookup_error_falls_back_to_default(self) -> None:
        ident = _resolver(metadata_fetch(region=None, instance_id="i-1")).resolve(self.log)
        self.assertEqual(ident.region, "us-east-1")
        self.assertEqual(ident.instance_id, "i-1")

    def test_token_failure_falls_back_to_anonymous_reads(self) -> None:
        fetch = metadata_fetch(region="ap-south-1", instance_id="i-2", token=None)
        ident = _resolver(fetch).resolve(self.log)
        self.assertFalse(ident.token_used)
        self.assertEqual(ident.region, "ap-south-1")
        self.assertEqual(fetch.calls[1]["headers"], {})

    def test_missing_instance_id_is_none(self) -> None:
        ident = _resolver(metadata_fetch(region="us-west-2", instance_id=None)).resolve(self.log)
        self.assertIsNone(ident.instance_id)
        self.assertIn("Could not retrieve instance ID", self.out.getvalue())

    def test_malformed_http_responses_are_not_fatal(self) -> None:
        def fetch(method, url, headers, timeout_s):
            if url.endswith("/latest/api/token"):
                raise http.client.BadStatusLine("garbage")
            raise http.client.IncompleteRead(b"eu-")

        ident = _resolver(fetch).resolve(self.log)
        self.assertEqual(ident.region, "us-east-1")
        self.assertIsNone(ident.instance_id)
        self.assertFalse(ident.token_used)
        self.assertEqual(len([l for l in self.log.lines if " - Warning: " in l]), 3)

    def test_explicit_region_is_not_looked_up(self) -> None:
        fetch = metadata_fetch(region="eu-west-1", instance_id="i-3")
        ident = _resolver(fetch).resolve(self.log, region="ap-south-1")

        self.assertEqual(ident.region, "ap-south-1")
        self.assertFalse(ident.region_from_metadata)
        self.assertEqual(ident.instance_id, "i-3")
        self.assertFalse(any(c["url"].endswith(REGION_PATH) for c in fetch.calls))
        self.assertIn("Using AWS region: ap-south-1", self.out.getvalue())
        self.assertNotIn("eu-west-1", self.out.getvalue())

    def test_explicit_instance_id_is_not_looked_up(self) -> None:
        fetch = metadata_fetch(region="eu-west-1", instance_id=None)
        ident = _resolver(fetch).resolve(self.log, instance_id="i-given")
        self.assertEqual(ident.instance_id, "i-given")
        self.assertFalse(any(c["url"].endswith(INSTANCE_ID_PATH) for c in fetch.calls))
        self.assertNotIn("Could not retrieve instance ID", self.out.getvalue())


class TestKernelContextResolution(unittest.TestCase):
    def test_only_region_given_logs_the_region_used(self) -> None:
        out = io.StringIO()
        log = RunLog(stream=out)
        kernel = Kernel(build_tool_registry(), metadata_fetch=metadata_fetch(region="eu-west-1", instance_id="i-4"))
        pctx = kernel.resolve_context(load_profile(), log, region="ap-south-1")

        self.assertEqual(pctx.region, "ap-south-1")
        self.assertEqual(pctx.instance_id, "i-4")
        self.assertIn("Using AWS region: ap-south-1", out.getvalue())
        self.assertNotIn("Detected AWS region", out.getvalue())


if __name__ == "__main__":
    unittest.main()
