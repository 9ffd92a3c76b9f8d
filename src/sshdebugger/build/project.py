"""Project metadata read from MSBuild project files"""

import logging
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional

from sshdebugger.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DOTNET_PROJECT_EXTENSIONS = (".csproj", ".fsproj", ".vbproj")
WEB_SDKS = ("Microsoft.NET.Sdk.Web",)


@dataclass(frozen=True)
class ProjectInfo:
    """Attributes of the project being deployed"""

    name: str
    path: str
    configuration: str = "Debug"
    target_framework: str = ""
    assembly_name: str = ""
    is_web: bool = False
    is_dotnet: bool = True

    @property
    def directory(self) -> str:
        return os.path.dirname(self.path)

    @property
    def output_dir(self) -> str:
        return os.path.join(self.directory, "bin", self.configuration, self.target_framework)

    @property
    def publish_dir(self) -> str:
        return os.path.join(self.output_dir, "publish")

    @property
    def output_assembly(self) -> str:
        return os.path.join(self.output_dir, f"{self.assembly_name}.dll")

    @classmethod
    def from_file(cls, project_file: str, configuration: str = "Debug",
                  target_framework: Optional[str] = None) -> "ProjectInfo":
        """Load project metadata

        Non-.NET files are accepted and flagged with ``is_dotnet=False``; the
        pipeline refuses to run them.

        Args:
            project_file: Path to a .csproj, .fsproj or .vbproj file
            configuration: Build configuration (Debug, Release, ...)
            target_framework: Overrides the framework declared in the project

        Raises:
            ConfigurationError: If the file is missing or unreadable
        """
        path = os.path.abspath(os.path.expanduser(project_file))
        if not os.path.isfile(path):
            raise ConfigurationError(f"Project file not found: {path}")

        name, extension = os.path.splitext(os.path.basename(path))
        if extension.lower() not in DOTNET_PROJECT_EXTENSIONS:
            return cls(name=name, path=path, configuration=configuration, is_dotnet=False)

        try:
            root = ET.parse(path).getroot()
        except ET.ParseError as e:
            raise ConfigurationError(f"Failed to parse project file {path}: {e}") from e

        properties = _read_properties(root)
        framework = target_framework or properties.get("TargetFramework")
        if not framework and properties.get("TargetFrameworks"):
            framework = properties["TargetFrameworks"].split(";")[0].strip()
            logger.info(f"Project {name} targets several frameworks, using {framework}")
        if not framework:
            raise ConfigurationError(f"Project {name} does not declare a TargetFramework")

        sdk = _read_sdk(root)
        logger.debug(f"Project {name}: sdk={sdk}, framework={framework}")

        return cls(
            name=name,
            path=path,
            configuration=configuration,
            target_framework=framework,
            assembly_name=properties.get("AssemblyName") or name,
            is_web=sdk in WEB_SDKS,
            is_dotnet=True,
        )


def _local_name(tag: str) -> str:
    # Legacy projects put every element in the MSBuild 2003 namespace
    return tag.rsplit("}", 1)[-1]


def _read_properties(root: ET.Element) -> dict:
    properties = {}
    for group in root:
        if _local_name(group.tag) != "PropertyGroup" or group.get("Condition"):
            continue
        for prop in group:
            if prop.text and prop.text.strip():
                properties.setdefault(_local_name(prop.tag), prop.text.strip())
    return properties


def _read_sdk(root: ET.Element) -> Optional[str]:
    if root.get("Sdk"):
        return root.get("Sdk").split("/")[0]
    for element in root:
        if _local_name(element.tag) == "Sdk" and element.get("Name"):
            return element.get("Name")
    return None
