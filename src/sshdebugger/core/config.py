"""Configuration management"""

import logging
import os
from typing import Any, Dict, List, Optional

import yaml

from sshdebugger.core.env import expand, load_env_files
from sshdebugger.transport.base import RemotePaths, RemoteTarget

logger = logging.getLogger(__name__)

DEFAULT_PRIVATE_KEY = "~/.ssh/id_ecdsa"


class Config:
    """Configuration for ssh-debugger, read once per run"""

    def __init__(self, config_file: str, env_files: Optional[List[str]] = None):
        """Load configuration from YAML file

        Args:
            config_file: Path to configuration YAML file
            env_files: Environment files whose variables are available for expansion
        """
        self.config_file = config_file
        self.env_files = env_files or []
        self.data: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Read the file and expand environment variables"""
        try:
            with open(self.config_file, "r") as f:
                raw = yaml.safe_load(f) or {}
            logger.info(f"Loaded configuration from {self.config_file}")
        except FileNotFoundError:
            logger.error(f"Configuration file not found: {self.config_file}")
            raise
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse configuration file: {e}")
            raise

        if not isinstance(raw, dict):
            raise ValueError(f"Configuration root must be a mapping: {self.config_file}")

        # Precedence: direct env mapping > env files > process environment
        variables = dict(os.environ)
        variables.update(load_env_files(self.env_files))
        env_direct = raw.pop("env", None) or {}
        if isinstance(env_direct, dict):
            variables.update({str(k): str(v) for k, v in env_direct.items()})
            logger.debug(f"Loaded {len(env_direct)} direct environment variables")

        try:
            self.data = expand(raw, variables)
        except ValueError as e:
            logger.error(f"Environment variable expansion failed: {e}")
            raise

    def _section(self, name: str) -> Dict[str, Any]:
        section = self.data.get(name) or {}
        return section if isinstance(section, dict) else {}

    @property
    def target(self) -> RemoteTarget:
        """SSH connection settings"""
        ssh = self._section("ssh")
        return RemoteTarget(
            host=str(ssh.get("host", "localhost")),
            user=str(ssh.get("user", "pi")),
            port=int(ssh.get("port", 22)),
            private_key=str(ssh.get("private_key", DEFAULT_PRIVATE_KEY)),
            private_key_password=ssh.get("private_key_password") or None,
        )

    @property
    def remote_paths(self) -> RemotePaths:
        remote = self._section("remote")
        defaults = RemotePaths()
        return RemotePaths(
            dotnet_dir=remote.get("dotnet_dir", defaults.dotnet_dir),
            vsdbg_dir=remote.get("vsdbg_dir", defaults.vsdbg_dir),
            deployment_dir=remote.get("deployment_dir", defaults.deployment_dir),
        )

    @property
    def dotnet_channel(self) -> str:
        return str(self._section("dotnet").get("channel", "Current"))

    @property
    def vsdbg_version(self) -> str:
        return str(self._section("dotnet").get("vsdbg_version", "latest"))

    @property
    def project_path(self) -> Optional[str]:
        return self._section("project").get("path")

    @property
    def project_configuration(self) -> str:
        return str(self._section("project").get("configuration", "Debug"))

    @property
    def project_target_framework(self) -> Optional[str]:
        return self._section("project").get("target_framework")

    @property
    def adapter(self) -> str:
        """Local SSH client the debugger spawns vsdbg through"""
        return str(self._section("launcher").get("adapter", "ssh"))

    @property
    def launcher_command(self) -> Optional[str]:
        return self._section("launcher").get("command")

    def validate(self) -> bool:
        """Validate configuration

        Returns:
            True if configuration is valid
        """
        ssh = self._section("ssh")
        if not ssh.get("host"):
            logger.error("No SSH host specified")
            return False

        try:
            port = int(ssh.get("port", 22))
        except (TypeError, ValueError):
            logger.error(f"Invalid SSH port: {ssh.get('port')}")
            return False
        if not 0 < port < 65536:
            logger.error(f"SSH port out of range: {port}")
            return False

        key_file = os.path.expanduser(self.target.private_key)
        if not os.path.exists(key_file):
            logger.error(f"SSH private key not found: {key_file}")
            return False

        for name, value in vars(self.remote_paths).items():
            if not value:
                logger.error(f"Remote path '{name}' is empty")
                return False

        return True
