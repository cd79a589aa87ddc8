import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import patch

from hostboot.bootstrap_tools import build_tool_registry
from hostboot.cli.hb import main as hb_main
from hostboot.testing import FakeHost, profile_dict, write_profile, write_source_tree


def _run(argv):
    out, err = io.StringIO(), io.StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        rc = hb_main(argv)
    return rc, out.getvalue(), err.getvalue()


class TestHostbootCli(unittest.TestCase):
    def test_list_tools_outputs_json(self) -> None:
        rc, out, _ = _run(["list-tools", "--json"])
        self.assertEqual(rc, 0)
        data = json.loads(out)
        tool_ids = [t["tool_id"] for t in data]
        self.assertIn("fs.reset_dir", tool_ids)
        self.assertIn("proc.run", tool_ids)
        destructive = [t["tool_id"] for t in data if t.get("destructive")]
        self.assertEqual(destructive, ["fs.reset_dir"])

    def test_list_tools_plain(self) -> None:
        rc, out, _ = _run(["list-tools"])
        self.assertEqual(rc, 0)
        self.assertIn("fs.reset_dir - ", out)
        self.assertIn("(destructive)", out)

    def test_bare_repository_url_is_a_usage_error(self) -> None:
        err = io.StringIO()
        with redirect_stderr(err), self.assertRaises(SystemExit) as cm:
            hb_main(["https://example.com/app.git"])
        self.assertEqual(cm.exception.code, 2)
        self.assertIn("invalid choice", err.getvalue())

    def test_check_profile_default(self) -> None:
        rc, out, _ = _run(["check-profile"])
        self.assertEqual(rc, 0)
        self.assertIn("app: agentic-ai-app -> /home/ec2-user/agentic-ai-app", out)
        self.assertTrue(out.rstrip().endswith("Profile OK"))

    def test_check_profile_reports_invalid_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "bad.yml"
            p.write_text("version: '0.1'\napp: {}\n", encoding="utf-8")
            rc, _, err = _run(["check-profile", "--profile", str(p)])
        self.assertEqual(rc, 1)
        self.assertIn("profile.invalid", err)

    def test_check_profile_missing_file(self) -> None:
        rc, _, err = _run(["check-profile", "--profile", "/nonexistent/hostboot-profile.yml"])
        self.assertEqual(rc, 1)
        self.assertIn("profile.not_found", err)

    def test_render_launcher(self) -> None:
        rc, out, _ = _run(["render-launcher", "--target-dir", "/srv/app"])
        self.assertEqual(rc, 0)
        lines = out.splitlines()
        self.assertEqual(lines[0], "#!/bin/bash")
        self.assertIn("cd /srv/app", lines)
        self.assertIn("export OTEL_PYTHON_DISTRO=aws_distro", lines)
        self.assertEqual(lines[-1], "exec opentelemetry-instrument python3 app.py")

    def test_plan_with_explicit_identity(self) -> None:
        rc, out, err = _run(
            [
                "plan",
                "https://example.com/app.git",
                "--region",
                "ap-northeast-1",
                "--instance-id",
                "i-0123456789abcdef0",
                "--target-dir",
                "/srv/app",
            ]
        )
        self.assertEqual(rc, 0)
        plan = json.loads(out)
        self.assertEqual(plan["context"]["region"], "ap-northeast-1")
        self.assertEqual(plan["context"]["repository_url"], "https://example.com/app.git")
        self.assertEqual(plan["scope"]["fs_roots"], ["/srv/app"])
        subst = [s for s in plan["steps"] if s["step_id"] == "agent_config.substitute"]
        self.assertEqual(subst[0]["tool"]["args"]["new"], "i-0123456789abcdef0")
        self.assertIn("Using AWS region: ap-northeast-1", err)

    def test_plan_skip_import_check(self) -> None:
        rc, out, _ = _run(["plan", "--region", "us-west-2", "--instance-id", "i-1", "--skip-import-check"])
        self.assertEqual(rc, 0)
        step_ids = [s["step_id"] for s in json.loads(out)["steps"]]
        self.assertNotIn("dependencies.import_check", step_ids)

    def test_show_trace_outputs_events(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "t.jsonl"
            p.write_text(
                "\n".join(
                    [
                        json.dumps({"ts": "2026-02-03T00:00:00Z", "run_id": "r1", "event_type": "run_started"}),
                        json.dumps({"ts": "2026-02-03T00:00:01Z", "run_id": "r1", "event_type": "step_warned"}),
                        json.dumps({"ts": "2026-02-03T00:00:02Z", "run_id": "r1", "event_type": "run_finished"}),
                    ]
                )
                + "\n",
                encoding="utf-8",
            )

            rc, out, _ = _run(["show-trace", "--trace", str(p), "--tail", "1"])
            self.assertEqual(rc, 0)
            lines = [l for l in out.splitlines() if l.strip()]
            self.assertEqual(len(lines), 1)
            self.assertEqual(json.loads(lines[0])["event_type"], "run_finished")

            rc, out, _ = _run(["show-trace", "--trace", str(p), "--event-type", "step_warned"])
            self.assertEqual(rc, 0)
            self.assertEqual([json.loads(l)["event_type"] for l in out.splitlines() if l.strip()], ["step_warned"])


class TestProvisionCommand(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.root = Path(self._td.name)
        self.log_path = self.root / "setup.log"

    def tearDown(self) -> None:
        self._td.cleanup()

    def _provision(self, host: FakeHost, profile_path: Path, *extra: str):
        with patch("hostboot.cli.hb.build_tool_registry", lambda: host.install(build_tool_registry())):
            return _run(
                [
                    "provision",
                    "https://example.com/agentic-app.git",
                    "--profile",
                    str(profile_path),
                    "--region",
                    "us-east-2",
                    "--instance-id",
                    "i-0aaaabbbbccccdddd",
                    "--log-file",
                    str(self.log_path),
                    *extra,
                ]
            )

    def test_provision_success(self) -> None:
        host = FakeHost(write_source_tree(self.root))
        profile_path = write_profile(self.root)
        trace = self.root / "trace.jsonl"
        rc, out, _ = self._provision(host, profile_path, "--trace", str(trace), "--run-id", "run_cli")

        self.assertEqual(rc, 0)
        self.assertIn(f"Setup completed successfully! Check {self.log_path} for detailed logs.", out)
        self.assertIn("./start-app.sh", out)
        log_text = self.log_path.read_text(encoding="utf-8")
        self.assertIn("Starting application setup...", log_text)
        self.assertIn("CloudWatch Agent configuration updated with instance ID: i-0aaaabbbbccccdddd", log_text)
        events = [json.loads(l) for l in trace.read_text(encoding="utf-8").splitlines() if l.strip()]
        self.assertTrue(all(e["run_id"] == "run_cli" for e in events))

        installed = Path(profile_dict(self.root)["agent"]["config_path"])
        self.assertIn("i-0aaaabbbbccccdddd", installed.read_text(encoding="utf-8"))

    def test_provision_missing_file_fails(self) -> None:
        host = FakeHost(write_source_tree(self.root, omit=["CW-AgentConfig.json"]))
        rc, out, _ = self._provision(host, write_profile(self.root))

        self.assertEqual(rc, 1)
        self.assertNotIn("Setup completed successfully!", out)
        self.assertIn("ERROR: CW-AgentConfig.json not found in repository", self.log_path.read_text(encoding="utf-8"))

    def test_provision_dry_run_changes_nothing(self) -> None:
        host = FakeHost(write_source_tree(self.root))
        rc, out, _ = self._provision(host, write_profile(self.root), "--dry-run")
        self.assertEqual(rc, 0)
        self.assertIn("[dry-run]", out)
        self.assertEqual(host.commands, [])
        self.assertFalse(Path(profile_dict(self.root)["app"]["target_dir"]).exists())

    def test_provision_no_log_file(self) -> None:
        host = FakeHost(write_source_tree(self.root))
        rc, out, _ = self._provision(host, write_profile(self.root), "--no-log-file")
        self.assertEqual(rc, 0)
        self.assertFalse(self.log_path.exists())
        self.assertIn("Setup completed successfully!\n", out)


if __name__ == "__main__":
    unittest.main()
