"""Local build collaborators"""

from .project import ProjectInfo
from .dotnet import DotnetBuilder

__all__ = ["ProjectInfo", "DotnetBuilder"]
