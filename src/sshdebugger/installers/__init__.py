"""Remote component installers"""

from .dotnet import DotnetInstaller
from .vsdbg import VsdbgInstaller

__all__ = ["DotnetInstaller", "VsdbgInstaller"]
