"""Build, deploy and debug .NET applications on remote Linux hosts over SSH"""

__version__ = "0.1.0"
