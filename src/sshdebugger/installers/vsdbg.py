"""Remote vsdbg debugger installer"""

from .base import BaseInstaller

VSDBG_INSTALL_URL = "https://aka.ms/getvsdbgsh"


class VsdbgInstaller(BaseInstaller):
    """Installs the vsdbg debug adapter with the GetVsDbg.sh script"""

    label = "VSDBG"
    success_markers = ("Info: Successfully installed vsdbg",)
    success_suffixes = ("Info: Skipping downloads",)

    def __init__(self, install_dir: str, version: str = "latest"):
        self.install_dir = install_dir
        self.version = version

    def install_command(self) -> str:
        return f"curl -sSL {VSDBG_INSTALL_URL} | bash /dev/stdin -v {self.version} -l {self.install_dir}"
