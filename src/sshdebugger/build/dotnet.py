"""Local dotnet build and publish"""

import logging
import os
import subprocess
import tempfile
from typing import List, Optional

from sshdebugger.build.project import ProjectInfo
from sshdebugger.core.cancellation import CancellationToken
from sshdebugger.exceptions import LocalProcessError

logger = logging.getLogger(__name__)

IGNORED_DIRS = {"bin", "obj", ".vs", ".git", ".idea"}


class DotnetBuilder:
    """Builds and publishes projects with the dotnet CLI"""

    def __init__(self, dotnet_cmd: str = "dotnet", poll_interval: float = 0.2):
        """Initialize builder

        Args:
            dotnet_cmd: dotnet executable (default: 'dotnet')
            poll_interval: Seconds between cancellation checks while publishing
        """
        self.dotnet_cmd = dotnet_cmd
        self.poll_interval = poll_interval

    def is_up_to_date(self, project: ProjectInfo) -> bool:
        """Check whether the build output is newer than every source file

        Args:
            project: Project to check

        Returns:
            True if the output assembly exists and nothing changed since
        """
        assembly = project.output_assembly
        if not os.path.exists(assembly):
            logger.debug(f"Output assembly not found: {assembly}")
            return False

        built_at = os.path.getmtime(assembly)
        for root, dirs, files in os.walk(project.directory):
            dirs[:] = [d for d in dirs if d not in IGNORED_DIRS]
            for name in files:
                source = os.path.join(root, name)
                if os.path.getmtime(source) > built_at:
                    logger.debug(f"Source changed since last build: {source}")
                    return False
        return True

    @staticmethod
    def _framework_args(project: ProjectInfo) -> List[str]:
        # Multi-targeting projects refuse to publish without an explicit framework
        return ["-f", project.target_framework] if project.target_framework else []

    def _run(self, cmd: List[str], label: str,
             cancel_token: Optional[CancellationToken]) -> Optional[int]:
        """Run a dotnet command, polling the cancellation token while it runs

        Output is captured and logged only when the command fails.

        Returns:
            Process exit code, or None if cancelled

        Raises:
            LocalProcessError: If dotnet cannot be started
        """
        logger.debug(f"Running: {' '.join(cmd)}")

        with tempfile.TemporaryFile() as output:
            try:
                process = subprocess.Popen(cmd, stdout=output, stderr=subprocess.STDOUT)
            except FileNotFoundError as e:
                raise LocalProcessError(f"dotnet is not available: {e}") from e

            while True:
                try:
                    exit_code = process.wait(timeout=self.poll_interval)
                    break
                except subprocess.TimeoutExpired:
                    if cancel_token is not None and cancel_token.is_cancelled:
                        logger.info(f"{label} cancelled, terminating dotnet")
                        self._terminate(process)
                        return None

            # Ctrl-C reaches dotnet too, which then exits on its own with a failure code
            if cancel_token is not None and cancel_token.is_cancelled:
                logger.info(f"{label} cancelled, dotnet exited with code {exit_code}")
                return None

            if exit_code != 0:
                # MSBuild reports errors on stdout
                output.seek(0)
                logger.error(f"{label} failed:\n{output.read().decode('utf-8', errors='replace')}")

        return exit_code

    def build(self, project: ProjectInfo, cancel_token: Optional[CancellationToken] = None) -> Optional[bool]:
        """Build the project

        Returns:
            True if the build succeeded, None if cancelled

        Raises:
            LocalProcessError: If dotnet cannot be started
        """
        cmd = [self.dotnet_cmd, "build", project.path, "-c", project.configuration]
        exit_code = self._run(cmd + self._framework_args(project), "Build", cancel_token)
        if exit_code is None:
            return None
        if exit_code == 0:
            logger.info(f"Successfully built {project.name}")
        return exit_code == 0

    def publish(self, project: ProjectInfo, cancel_token: Optional[CancellationToken] = None) -> Optional[int]:
        """Publish the project into its publish folder

        Waits for the process while watching the cancellation token; on
        cancellation the process is terminated.

        Args:
            project: Project to publish
            cancel_token: Token checked while waiting

        Returns:
            Process exit code, or None if cancelled

        Raises:
            LocalProcessError: If dotnet cannot be started
        """
        cmd = [self.dotnet_cmd, "publish", project.path, "-c", project.configuration]
        cmd += self._framework_args(project)
        cmd += ["-o", project.publish_dir]
        return self._run(cmd, "Publish", cancel_token)

    @staticmethod
    def _terminate(process: subprocess.Popen) -> None:
        process.terminate()
        try:
            process.wait(timeout=10)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
