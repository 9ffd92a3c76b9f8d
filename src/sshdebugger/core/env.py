"""Environment files and ${VAR} expansion for configuration values"""

import logging
import os
import re
from typing import Any, Dict, List, Mapping

logger = logging.getLogger(__name__)

_BRACED = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?:(:-|:\?)([^}]*))?\}")
_BARE = re.compile(r"\$([A-Za-z_][A-Za-z0-9_]*)")


def load_env_file(file_path: str) -> Dict[str, str]:
    """Read KEY=VALUE lines from a dotenv-style file

    Blank lines and ``#`` comments are ignored, matching quotes around a
    value are stripped. A missing file yields no variables.

    Args:
        file_path: Path to the file (``~`` is expanded)

    Returns:
        Variables defined in the file
    """
    file_path = os.path.expanduser(file_path)
    variables: Dict[str, str] = {}

    if not os.path.exists(file_path):
        logger.warning(f"Environment file not found: {file_path}")
        return variables

    with open(file_path, "r") as f:
        for line_num, raw in enumerate(f, 1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("export "):
                line = line[len("export "):]
            if "=" not in line:
                logger.warning(f"Invalid line in {file_path}:{line_num}: {line}")
                continue

            key, value = (part.strip() for part in line.split("=", 1))
            if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
                value = value[1:-1]
            variables[key] = value

    logger.info(f"Loaded {len(variables)} variables from {file_path}")
    return variables


def load_env_files(file_paths: List[str]) -> Dict[str, str]:
    """Load several env files, later files overriding earlier ones"""
    merged: Dict[str, str] = {}
    for file_path in file_paths:
        merged.update(load_env_file(file_path))
    return merged


def expand_value(value: str, variables: Mapping[str, str]) -> str:
    """Expand $VAR, ${VAR}, ${VAR:-default} and ${VAR:?message}

    Unknown variables without a default are left untouched.

    Raises:
        ValueError: For ${VAR:?message} when VAR is not set
    """

    def braced(match):
        name, operator, argument = match.group(1), match.group(2), match.group(3)
        if name in variables:
            return variables[name]
        if operator == ":-":
            return argument
        if operator == ":?":
            raise ValueError(f"Required variable not set: {name} ({argument})")
        return match.group(0)

    result = _BRACED.sub(braced, value)
    return _BARE.sub(lambda m: variables.get(m.group(1), m.group(0)), result)


def expand(data: Any, variables: Mapping[str, str]) -> Any:
    """Recursively expand every string inside dicts and lists"""
    if isinstance(data, str):
        return expand_value(data, variables)
    if isinstance(data, dict):
        return {key: expand(value, variables) for key, value in data.items()}
    if isinstance(data, list):
        return [expand(item, variables) for item in data]
    return data
