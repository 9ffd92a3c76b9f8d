"""Debug adapter launch document (launch.json)"""

import json
import logging
import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator

from sshdebugger.transport.base import RemotePaths, RemoteTarget

logger = logging.getLogger(__name__)

LAUNCH_VERSION = "0.2.0"
CONFIGURATION_NAME = ".NET Remote Launch - Framework-dependent"


@dataclass(frozen=True)
class LaunchSpec:
    """How the debugger spawns vsdbg over SSH and launches the deployed app"""

    adapter: str
    adapter_args: str
    program: str
    entry_point: str
    cwd: str

    @classmethod
    def from_settings(cls, target: RemoteTarget, paths: RemotePaths, project_name: str,
                      assembly_name: str, adapter: str = "ssh") -> "LaunchSpec":
        """Build the launch spec for a deployed project

        Args:
            target: SSH connection settings embedded in the adapter arguments
            paths: Remote install and deployment directories
            project_name: Project name, also the deployment sub-directory
            assembly_name: Assembly to run (without .dll)
            adapter: Local SSH client executable
        """
        adapter_args = (
            f"-i {target.private_key} -p {target.port} {target.address} "
            f"{paths.vsdbg_dir}/vsdbg --interpreter=vscode"
        )
        return cls(
            adapter=adapter,
            adapter_args=adapter_args,
            program=f"{paths.dotnet_dir}/dotnet",
            entry_point=f"./{assembly_name}.dll",
            cwd=paths.project_dir(project_name),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": LAUNCH_VERSION,
            "adapter": self.adapter,
            "adapterArgs": self.adapter_args,
            "configurations": [
                {
                    "name": CONFIGURATION_NAME,
                    "type": "coreclr",
                    "request": "launch",
                    "project": "default",
                    "program": self.program,
                    "args": [self.entry_point],
                    "cwd": self.cwd,
                    "stopAtEntry": False,
                    "console": "internalConsole",
                }
            ],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


@contextmanager
def temporary_launch_file() -> Iterator[str]:
    """Reserve a unique launch.json path, deleted on exit whatever happens

    Yields:
        Path of an empty file
    """
    fd, path = tempfile.mkstemp(prefix="launch-", suffix=".json")
    os.close(fd)
    logger.debug(f"Reserved launch file {path}")
    try:
        yield path
    finally:
        if os.path.exists(path):
            os.remove(path)
            logger.debug(f"Removed launch file {path}")


def write_launch_file(spec: LaunchSpec, path: str) -> None:
    """Write the launch document, replacing any previous content"""
    with open(path, "w", encoding="utf-8") as f:
        f.write(spec.to_json())
