import re
import unittest
from pathlib import Path

from hostboot.core.errors import ValidationError
from hostboot.launcher import render_launcher
from hostboot.profile import load_profile


class TestLauncher(unittest.TestCase):
    def test_default_profile_env_table_appears_exactly_once(self) -> None:
        profile = load_profile()
        script = render_launcher(
            target_dir=Path("/home/ec2-user/agentic-ai-app"),
            env=profile.launcher.env,
            command=profile.launcher.command,
        )
        lines = script.splitlines()
        self.assertEqual(lines[0], "#!/bin/bash")
        self.assertEqual(lines[1], "cd /home/ec2-user/agentic-ai-app")
        self.assertEqual(len(profile.launcher.env), 10)
        for key, _value in profile.launcher.env:
            matches = [l for l in lines if re.match(rf"^export {key}=", l)]
            self.assertEqual(len(matches), 1, key)
        self.assertIn(
            "export OTEL_RESOURCE_ATTRIBUTES=aws.log.group.names=strands-agent-logs,service.name=strands-agent,deployment.environment=ec2:default",
            lines,
        )
        self.assertEqual(lines[-1], "exec opentelemetry-instrument python3 app.py")

    def test_target_dir_is_shell_quoted(self) -> None:
        script = render_launcher(target_dir=Path("/srv/my app"), env=[("A", "x y")], command=["python3", "app.py"])
        self.assertIn("cd '/srv/my app'", script.splitlines())
        self.assertIn("export A='x y'", script.splitlines())

    def test_rejects_duplicate_and_invalid_names(self) -> None:
        with self.assertRaises(ValidationError):
            render_launcher(target_dir=Path("/x/y"), env=[("A", "1"), ("A", "2")], command=["true"])
        with self.assertRaises(ValidationError):
            render_launcher(target_dir=Path("/x/y"), env=[("1BAD", "1")], command=["true"])
        with self.assertRaises(ValidationError):
            render_launcher(target_dir=Path("/x/y"), env=[], command=[])


if __name__ == "__main__":
    unittest.main()
