"""Pytest configuration and shared fixtures"""

import os
import tempfile
import pytest
from unittest.mock import MagicMock

from sshdebugger.build.project import ProjectInfo
from sshdebugger.core.reporting import ProgressReporter
from sshdebugger.exceptions import SSHConnectionError
from sshdebugger.transport.base import RemotePaths, RemoteTarget

ALREADY_INSTALLED_DOTNET = (
    "dotnet-install: Attempting to download using aka.ms link\n"
    "dotnet-install: .NET Core Runtime with version '8.0.11' is already installed."
)
SKIPPING_VSDBG = "Info: Using vsdbg version '17.12.11216.3'\nInfo: Skipping downloads"


class FakeSession:
    """Session stand-in answering remote commands from a table"""

    def __init__(self, target, responses=None, ping_response="ping"):
        self.target = target
        self.ping_response = ping_response
        self.responses = {
            "dotnet-install.sh": ALREADY_INSTALLED_DOTNET,
            "dotnet --info": "Host:\n  Version:      8.0.11",
            "getvsdbgsh": SKIPPING_VSDBG,
        }
        self.responses.update(responses or {})
        self.commands = []
        self.uploads = []
        self.closed = False

    def run_command(self, command):
        self.commands.append(command)
        if command == "echo ping":
            return self.ping_response
        for needle, output in self.responses.items():
            if needle in command:
                if isinstance(output, Exception):
                    raise output
                return output
        return ""

    def ping(self):
        result = self.run_command("echo ping")
        if result != "ping":
            raise SSHConnectionError(result)
        return result

    def upload_tree(self, local_dir, remote_dir, progress_callback=None):
        self.uploads.append((local_dir, remote_dir))
        return 1

    def close(self):
        self.closed = True


class RecordingReporter(ProgressReporter):
    """Reporter keeping everything in memory"""

    def __init__(self):
        self.lines = []
        self.steps = []

    def write_line(self, text):
        self.lines.append(text)

    def report_step(self, step):
        self.steps.append(step)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def remote_target():
    return RemoteTarget(host="192.168.1.50", user="pi", private_key="/home/dev/.ssh/id_ecdsa", port=2222)


@pytest.fixture
def remote_paths():
    return RemotePaths()


@pytest.fixture
def project(temp_dir):
    """Project whose publish folder already contains one file"""
    project_file = os.path.join(temp_dir, "App.csproj")
    with open(project_file, "w") as f:
        f.write('<Project Sdk="Microsoft.NET.Sdk"></Project>')

    info = ProjectInfo(
        name="App",
        path=project_file,
        configuration="Debug",
        target_framework="net8.0",
        assembly_name="App",
    )
    os.makedirs(info.publish_dir)
    with open(os.path.join(info.publish_dir, "App.dll"), "wb") as f:
        f.write(b"\0" * 1024)
    return info


@pytest.fixture
def mock_config(remote_target, remote_paths):
    """Mock Config object"""
    config = MagicMock()
    config.target = remote_target
    config.remote_paths = remote_paths
    config.dotnet_channel = "Current"
    config.vsdbg_version = "latest"
    config.adapter = "ssh"
    config.validate.return_value = True
    return config


@pytest.fixture
def mock_builder():
    """Build collaborator reporting an up to date project"""
    builder = MagicMock()
    builder.is_up_to_date.return_value = True
    builder.build.return_value = True
    builder.publish.return_value = 0
    return builder


@pytest.fixture
def mock_launcher():
    launcher = MagicMock()
    launcher.launch.return_value = True
    return launcher


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def make_session(remote_target):
    """Factory for FakeSession with custom command responses"""

    def factory(responses=None, ping_response="ping"):
        return FakeSession(remote_target, responses=responses, ping_response=ping_response)

    return factory


@pytest.fixture
def fake_session(make_session):
    return make_session()


@pytest.fixture
def sample_config_data():
    """Sample configuration data for testing"""
    return {
        "ssh": {
            "host": "raspberrypi.local",
            "port": 22,
            "user": "pi",
            "private_key": "~/.ssh/id_ecdsa",
        },
        "remote": {
            "dotnet_dir": "~/.dotnet",
            "vsdbg_dir": "~/.vsdbg",
            "deployment_dir": "~/apps",
        },
        "project": {
            "path": "./App/App.csproj",
            "configuration": "Release",
        },
    }


@pytest.fixture
def mock_ssh_client():
    """Mock paramiko client with an SFTP session"""
    client = MagicMock()
    sftp = MagicMock()

    client.open_sftp.return_value = sftp
    sftp.stat.return_value = None
    sftp.put.return_value = None
    sftp.mkdir.return_value = None
    sftp.close.return_value = None

    return client, sftp
