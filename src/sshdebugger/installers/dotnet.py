"""Remote .NET runtime installer"""

from .base import BaseInstaller

DOTNET_INSTALL_URL = "https://dot.net/v1/dotnet-install.sh"


class DotnetInstaller(BaseInstaller):
    """Installs the .NET runtime with the official dotnet-install.sh script"""

    label = "NET"
    success_suffixes = (
        "dotnet-install: Installation finished successfully.",
        "is already installed.",
    )

    def __init__(self, install_dir: str, web: bool = False, channel: str = "Current"):
        """Initialize .NET installer

        Args:
            install_dir: Remote install directory (e.g. ~/.dotnet)
            web: Install the ASP.NET Core runtime instead of the base runtime
            channel: dotnet-install channel (Current, LTS, STS or a version like 8.0)
        """
        self.install_dir = install_dir
        self.web = web
        self.channel = channel

    @property
    def runtime(self) -> str:
        return "aspnetcore" if self.web else "dotnet"

    def install_command(self) -> str:
        return (
            f"curl -sSL {DOTNET_INSTALL_URL} | bash /dev/stdin "
            f"--channel {self.channel} --runtime {self.runtime} --install-dir {self.install_dir}"
        )

    def info_command(self) -> str:
        """Command printing `dotnet --info` for the installed runtime"""
        return (
            f"export DOTNET_ROOT={self.install_dir}; "
            f"export PATH=$PATH:{self.install_dir}; "
            f"dotnet --info"
        )
