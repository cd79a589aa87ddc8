import unittest
from pathlib import Path

from hostboot.bootstrap_tools import build_tool_registry
from hostboot.core.policy_engine import PolicyEngine


def _plan(tool_id: str, args: dict, *, fs_roots=None, allow_network: bool = True) -> dict:
    return {
        "plan_id": "p1",
        "context": {"repository_url": "x", "target_dir": "/srv/app", "region": "us-east-1", "instance_id": None},
        "scope": {"fs_roots": fs_roots if fs_roots is not None else ["/srv/app"], "allow_network": allow_network},
        "steps": [
            {"step_id": "s1", "title": "t", "phase": "source", "on_error": "abort", "tool": {"tool_id": tool_id, "args": args}}
        ],
    }


class TestPolicyEngine(unittest.TestCase):
    def setUp(self) -> None:
        self.policy = PolicyEngine(build_tool_registry())

    def test_allows_reset_inside_scope(self) -> None:
        result = self.policy.evaluate(_plan("fs.reset_dir", {"path": "/srv/app"}))
        self.assertEqual(result.decision, "allow")

    def test_denies_reset_outside_scope(self) -> None:
        result = self.policy.evaluate(_plan("fs.reset_dir", {"path": "/srv/other/app"}))
        self.assertEqual(result.decision, "deny")
        self.assertEqual(result.reason_codes, ["destructive.out_of_scope"])

    def test_denies_reset_of_protected_paths(self) -> None:
        for path in ("/", "/home", "/opt", str(Path.home())):
            result = self.policy.evaluate(_plan("fs.reset_dir", {"path": path}, fs_roots=["/"]))
            self.assertEqual(result.decision, "deny", path)
            self.assertEqual(result.reason_codes, ["destructive.protected_path"])

    def test_denies_unknown_tool(self) -> None:
        result = self.policy.evaluate(_plan("fs.format_disk", {"path": "/srv/app"}))
        self.assertEqual(result.reason_codes, ["tool.unknown"])

    def test_denies_network_tool_without_allow_network(self) -> None:
        result = self.policy.evaluate(
            _plan("net.download", {"url": "https://bootstrap.pypa.io/get-pip.py", "dest": "/tmp/x"}, allow_network=False)
        )
        self.assertEqual(result.reason_codes, ["network.not_allowed"])

    def test_denies_missing_scope(self) -> None:
        result = self.policy.evaluate(_plan("fs.mkdir", {"path": "/srv/app"}, fs_roots=[]))
        self.assertEqual(result.reason_codes, ["scope.missing"])


if __name__ == "__main__":
    unittest.main()
