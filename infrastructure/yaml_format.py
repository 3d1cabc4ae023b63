"""YAML reading and writing in the content tree's house style.

Content files follow YAML 1.2 core-schema habits: dates are plain strings
and only true/false are booleans. Written files indent sequences under their
key, never fold long lines, keep the caller's key order, and put a blank line
between the top-level items of selected arrays (spreads, shots).
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
import re
from typing import Any

import yaml

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"
_BOOL_TAG = "tag:yaml.org,2002:bool"
_CORE_BOOL = re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$")


def _core_schema_resolvers(resolvers: dict[Any, list]) -> dict[Any, list]:
    """Copy of `resolvers` without timestamp and YAML 1.1 bool resolution."""
    return {
        first: [(tag, rx) for tag, rx in entries if tag not in (_TIMESTAMP_TAG, _BOOL_TAG)]
        for first, entries in resolvers.items()
    }


class ContentYamlLoader(yaml.SafeLoader):
    """SafeLoader that keeps dates as written and reads yes/no/on/off as text."""


class ContentYamlDumper(yaml.SafeDumper):
    """SafeDumper that indents block sequences under their parent key."""

    def increase_indent(self, flow: bool = False, indentless: bool = False) -> None:
        return super().increase_indent(flow, False)


for _cls in (ContentYamlLoader, ContentYamlDumper):
    _cls.yaml_implicit_resolvers = _core_schema_resolvers(yaml.SafeLoader.yaml_implicit_resolvers)
    _cls.add_implicit_resolver(_BOOL_TAG, _CORE_BOOL, list("tTfF"))


def read_yaml(path: Path) -> Any:
    """Parse one content file. Raises yaml.YAMLError on syntax errors."""
    with path.open("r", encoding="utf-8") as f:
        return yaml.load(f, Loader=ContentYamlLoader)  # noqa: S506 - safe loader subclass


def add_blank_lines_between_items(text: str, array_names: Iterable[str]) -> str:
    """Insert an empty line between the top-level items of the named arrays.

    Only arrays declared at column 0 (`spreads:`) are considered; their items
    are the lines starting with exactly two spaces and a dash.
    """
    headers = {f"{name}:" for name in array_names}
    result: list[str] = []
    in_array = False
    first_item = True

    for line in text.split("\n"):
        entered = line in headers
        if entered:
            in_array = True
            first_item = True
        elif in_array and line and not line.startswith(" "):
            in_array = False

        if in_array and line.startswith("  - "):
            if not first_item:
                result.append("")
            first_item = False

        result.append(line)

    return "\n".join(result)


def format_yaml(data: dict[str, Any], spaced_arrays: Iterable[str] = ()) -> str:
    """Serialize `data` in house style, spacing out the named arrays."""
    text = yaml.dump(
        data,
        Dumper=ContentYamlDumper,
        indent=2,
        width=float("inf"),
        allow_unicode=True,
        sort_keys=False,
        default_flow_style=False,
    )
    return add_blank_lines_between_items(text, spaced_arrays)


def write_yaml(path: Path, data: dict[str, Any], spaced_arrays: Iterable[str] = ()) -> None:
    path.write_text(format_yaml(data, spaced_arrays), encoding="utf-8")
