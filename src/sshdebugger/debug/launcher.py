"""Debugger launchers"""

import logging
import shlex
import subprocess
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)

LAUNCH_JSON_PLACEHOLDER = "{launch_json}"


class DebugLauncher(ABC):
    """Starts a debugger from a launch.json file"""

    @abstractmethod
    def launch(self, launch_json: str) -> bool:
        """Start debugging

        Args:
            launch_json: Path to the launch document

        Returns:
            True if the debugger was started
        """
        pass


class CommandLauncher(DebugLauncher):
    """Runs an external command to start the debugger

    ``{launch_json}`` in the command is replaced by the launch file path; the
    path is appended when the placeholder is missing. The launch file is
    deleted as soon as this returns, so the command must consume it before
    exiting.
    """

    def __init__(self, command: str, timeout: Optional[float] = None):
        self.command = command
        self.timeout = timeout

    def build_args(self, launch_json: str) -> list:
        args = shlex.split(self.command)
        if any(LAUNCH_JSON_PLACEHOLDER in arg for arg in args):
            return [arg.replace(LAUNCH_JSON_PLACEHOLDER, launch_json) for arg in args]
        return args + [launch_json]

    def launch(self, launch_json: str) -> bool:
        args = self.build_args(launch_json)
        logger.info(f"Launching debugger: {' '.join(args)}")
        try:
            result = subprocess.run(args, check=False, timeout=self.timeout)
        except FileNotFoundError as e:
            logger.error(f"Debugger launcher not found: {e}")
            return False
        except subprocess.TimeoutExpired:
            logger.error("Debugger launcher timeout")
            return False

        if result.returncode != 0:
            logger.error(f"Debugger launcher exited with code {result.returncode}")
            return False
        return True


class LogLauncher(DebugLauncher):
    """Logs the launch document instead of starting a debugger"""

    def launch(self, launch_json: str) -> bool:
        with open(launch_json, "r", encoding="utf-8") as f:
            logger.info(f"launch.json:\n{f.read()}")
        return True
