"""Tests for env file loading and variable expansion"""

import os
import pytest

from sshdebugger.core.env import expand, expand_value, load_env_file, load_env_files


class TestLoadEnvFile:
    """Test dotenv-style files"""

    def test_load(self, temp_dir):
        env_file = os.path.join(temp_dir, ".env")
        with open(env_file, "w") as f:
            f.write(
                "# target settings\n"
                "\n"
                "PI_HOST=10.0.0.7\n"
                "export PI_USER=dev\n"
                'KEY_PASSWORD="with spaces"\n'
                "QUOTED='single'\n"
                "not a variable\n"
                "EQUALS=a=b\n"
            )

        variables = load_env_file(env_file)

        assert variables == {
            "PI_HOST": "10.0.0.7",
            "PI_USER": "dev",
            "KEY_PASSWORD": "with spaces",
            "QUOTED": "single",
            "EQUALS": "a=b",
        }

    def test_missing_file(self, temp_dir):
        assert load_env_file(os.path.join(temp_dir, "missing.env")) == {}

    def test_later_files_override(self, temp_dir):
        first = os.path.join(temp_dir, "a.env")
        second = os.path.join(temp_dir, "b.env")
        with open(first, "w") as f:
            f.write("A=1\nB=1\n")
        with open(second, "w") as f:
            f.write("B=2\n")

        assert load_env_files([first, second]) == {"A": "1", "B": "2"}


class TestExpand:
    """Test ${VAR} expansion"""

    VARIABLES = {"HOST": "pi.local", "PORT": "2222", "EMPTY": ""}

    @pytest.mark.parametrize("value,expected", [
        ("$HOST", "pi.local"),
        ("${HOST}:${PORT}", "pi.local:2222"),
        ("${USER_NAME:-pi}", "pi"),
        ("${HOST:-other}", "pi.local"),
        ("${EMPTY:-fallback}", ""),
        ("$UNKNOWN", "$UNKNOWN"),
        ("${UNKNOWN}", "${UNKNOWN}"),
        ("no variables", "no variables"),
    ])
    def test_expand_value(self, value, expected):
        assert expand_value(value, self.VARIABLES) == expected

    def test_required_missing(self):
        with pytest.raises(ValueError, match="HOSTNAME"):
            expand_value("${HOSTNAME:?target host}", self.VARIABLES)

    def test_expand_nested(self):
        data = {"ssh": {"host": "$HOST", "port": 22}, "list": ["${PORT}", None]}

        assert expand(data, self.VARIABLES) == {"ssh": {"host": "pi.local", "port": 22}, "list": ["2222", None]}
