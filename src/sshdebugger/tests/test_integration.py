"""End-to-end pipeline tests with real configuration and project files"""

import json
import os
import pytest
import yaml
from unittest.mock import MagicMock

from sshdebugger.build.project import ProjectInfo
from sshdebugger.core.config import Config
from sshdebugger.core.orchestrator import Orchestrator
from sshdebugger.core.steps import StepName, StepOutcome
from sshdebugger.debug.launcher import DebugLauncher
from sshdebugger.exceptions import RemoteCommandError


class CapturingLauncher(DebugLauncher):
    """Keeps the launch document it was given"""

    def __init__(self):
        self.path = None
        self.document = None

    def launch(self, launch_json):
        self.path = launch_json
        with open(launch_json) as f:
            self.document = json.load(f)
        return True


@pytest.fixture
def workspace(temp_dir):
    """Config file plus a published web project"""
    project_dir = os.path.join(temp_dir, "Api")
    os.makedirs(project_dir)
    project_file = os.path.join(project_dir, "Api.csproj")
    with open(project_file, "w") as f:
        f.write('<Project Sdk="Microsoft.NET.Sdk.Web"><PropertyGroup>'
                "<TargetFramework>net8.0</TargetFramework>"
                "<AssemblyName>Company.Api</AssemblyName>"
                "</PropertyGroup></Project>")

    config_file = os.path.join(temp_dir, "debugger.yaml")
    with open(config_file, "w") as f:
        yaml.dump({
            "env": {"TARGET_HOST": "10.0.0.7"},
            "ssh": {"host": "${TARGET_HOST}", "user": "dev", "private_key": "~/.ssh/id_pi"},
            "remote": {"deployment_dir": "/srv/apps"},
            "project": {"path": project_file},
        }, f)

    config = Config(config_file)
    project = ProjectInfo.from_file(config.project_path, configuration=config.project_configuration)
    os.makedirs(project.publish_dir)
    with open(os.path.join(project.publish_dir, "Company.Api.dll"), "wb") as f:
        f.write(b"\0" * 16)
    return config, project


def make_orchestrator(config, project, session, launcher, builder=None):
    if builder is None:
        builder = MagicMock()
        builder.is_up_to_date.return_value = True
        builder.publish.return_value = 0
    return Orchestrator(
        config,
        project,
        builder,
        launcher,
        show_progress=False,
        session_factory=MagicMock(return_value=session),
    )


class TestDeployPipeline:
    """Test the full deploy pipeline"""

    def test_full_run(self, workspace, make_session):
        config, project = workspace
        session = make_session()
        launcher = CapturingLauncher()

        result = make_orchestrator(config, project, session, launcher).run()

        assert result.succeeded
        assert result.step_names == list(StepName)
        assert result.steps[0].outcome is StepOutcome.SKIPPED
        assert session.closed
        assert session.uploads == [(project.publish_dir, "/srv/apps/Api")]
        assert any("--runtime aspnetcore" in command for command in session.commands)

        configuration = launcher.document["configurations"][0]
        assert launcher.document["adapterArgs"].startswith("-i ~/.ssh/id_pi -p 22 dev@10.0.0.7")
        assert configuration["args"] == ["./Company.Api.dll"]
        assert configuration["cwd"] == "/srv/apps/Api"
        assert not os.path.exists(launcher.path)

    def test_runtime_failure_stops_before_uploading(self, workspace, make_session):
        config, project = workspace
        session = make_session({"dotnet-install.sh": "some error: permission denied"})
        launcher = CapturingLauncher()

        result = make_orchestrator(config, project, session, launcher).run()

        assert not result.succeeded
        assert result.failed_step.name is StepName.PROVISION_RUNTIME
        assert result.failed_step.message == "some error: permission denied"
        assert session.uploads == []
        assert launcher.path is None
        assert session.closed

    def test_remote_dir_error_stops_before_uploading(self, workspace, make_session):
        config, project = workspace
        session = make_session({"mkdir -p": RemoteCommandError("mkdir: cannot create directory")})

        result = make_orchestrator(config, project, session, CapturingLauncher()).run()

        assert result.failed_step.name is StepName.MANAGE_TARGET_DIR
        assert session.uploads == []


class TestDebugOnlyPipeline:
    """Test debugging an already deployed project"""

    def test_debug_only(self, workspace, make_session):
        config, project = workspace
        session = make_session()
        launcher = CapturingLauncher()

        result = make_orchestrator(config, project, session, launcher).run_debug_only()

        assert result.succeeded
        assert result.step_names == [StepName.CONNECT, StepName.EMIT_CONFIG, StepName.LAUNCH]
        assert session.uploads == []
        assert not any("dotnet-install.sh" in command for command in session.commands)
