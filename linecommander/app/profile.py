# linecommander/app/profile.py
"""
YAML profiles: named sets of command-line defaults for one device.

    session:
      terminator: crlf
      expect_lines: -1
      wait: 500
      bye: "Bye!"
      escape: "!"
    transport:
      ip: 192.168.1.20
      port: 4998
    readline:
      appname: projector

Keys are the long option names of the command line (with "-" written as
"_"). Values given on the command line win over the profile.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from linecommander.app.config import TERMINATORS
from linecommander.core.errors import ConfigError


PROFILE_SCHEMA: Mapping[str, Mapping[str, str]] = {
    "session": {
        "bye": "str",
        "comment": "str",
        "escape": "str",
        "expect_lines": "int",
        "wait": "int",
        "uppercase": "bool",
        "prompt": "str",
        "terminator": "str",
        "encoding": "str",
    },
    "transport": {
        "ip": "str",
        "port": "int",
        "device": "str",
        "baud": "int",
        "timeout": "int",
    },
    "readline": {
        "appname": "str",
        "config": "str",
        "history": "str",
    },
}


def load_profile(path: str | Path) -> Dict[str, Any]:
    """
    Load a profile and return a flat {option_dest: value} mapping.
    """
    full_path = Path(path)
    if not full_path.exists():
        raise ConfigError(f"Profile not found: {full_path}", hint="Check the --profile path.")

    try:
        with open(full_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Profile {full_path} is not valid YAML.", hint=str(e)) from None

    if not isinstance(data, dict):
        raise ConfigError(f"Profile {full_path} must be a mapping of sections.")

    resolved: Dict[str, Any] = {}
    for section, values in data.items():
        schema = PROFILE_SCHEMA.get(str(section))
        if schema is None:
            raise ConfigError(
                f"Unknown profile section '{section}'.",
                hint=f"Valid sections: {sorted(PROFILE_SCHEMA)}",
                details={"profile": str(full_path)},
            )
        if values is None:
            continue
        if not isinstance(values, dict):
            raise ConfigError(f"Profile section '{section}' must be a mapping.")

        for key, value in values.items():
            if key not in schema:
                raise ConfigError(
                    f"Unknown profile key '{section}.{key}'.",
                    hint=f"Valid keys: {sorted(schema)}",
                    details={"profile": str(full_path), "section": section, "key": key},
                )
            try:
                resolved[key] = cast_value(value, schema[key])
            except (TypeError, ValueError) as e:
                raise ConfigError(
                    f"Invalid value for profile key '{section}.{key}'.",
                    hint=str(e),
                    details={"value": value, "expected_type": schema[key]},
                ) from None

    terminator = resolved.get("terminator")
    if terminator is not None and terminator.lower() not in TERMINATORS:
        raise ConfigError(
            f"Unknown terminator '{terminator}'.",
            hint=f"Use one of: {', '.join(TERMINATORS)}",
        )

    return resolved


def cast_value(value: Any, type_name: str) -> Any:
    if value is None:
        return None

    if type_name == "str":
        # YAML turns unquoted numbers into ints; device strings like "1" are fine
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise TypeError(f"Expected str, got {type(value).__name__}")
        return str(value)

    if type_name == "int":
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Expected int, got {type(value).__name__}")
        return value

    if type_name == "float":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"Expected float, got {type(value).__name__}")
        return float(value)

    if type_name == "bool":
        if isinstance(value, bool):
            return value
        # accept 0/1 int
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        raise TypeError(f"Expected bool (or 0/1), got {type(value).__name__}")

    raise TypeError(f"Unknown schema type '{type_name}'")
