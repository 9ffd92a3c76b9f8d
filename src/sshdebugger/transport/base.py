"""Remote target and remote path definitions"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RemoteTarget:
    """Connection settings for the remote Linux host

    Args:
        host: Hostname or IP address
        user: Username for authentication
        private_key: Path to the SSH private key file
        port: SSH port (default: 22)
        private_key_password: Passphrase for the private key, if it has one
    """

    host: str
    user: str
    private_key: str
    port: int = 22
    private_key_password: Optional[str] = None

    @property
    def address(self) -> str:
        return f"{self.user}@{self.host}"


@dataclass(frozen=True)
class RemotePaths:
    """Install and deployment directories on the remote host

    Values may start with ``~``; remote shells expand it but SFTP does not,
    see :func:`expand_home`.
    """

    dotnet_dir: str = "~/.dotnet"
    vsdbg_dir: str = "~/.vsdbg"
    deployment_dir: str = "~/apps"

    def project_dir(self, project_name: str) -> str:
        return f"{self.deployment_dir.rstrip('/')}/{project_name}"


def home_directory(user: str) -> str:
    """Conventional home directory of a user on a Linux host"""
    return "/root" if user == "root" else f"/home/{user}"


def expand_home(path: str, user: str) -> str:
    """Replace a leading ``~`` with the remote user's home directory

    Args:
        path: Remote path, possibly starting with ``~`` or ``~/``
        user: Remote username

    Returns:
        Absolute path usable by SFTP
    """
    if path == "~":
        return home_directory(user)
    if path.startswith("~/"):
        return home_directory(user) + path[1:]
    return path
