"""
VMF (Valve Map Format) parser.

Turns the bracketed key/value text of a Hammer map into a tree of
branches and leaves:

    world
    {
        "id" "1"
        solid
        {
            ...
        }
    }

A branch maps each field name to an ordered list of children, since most
keys (``solid``, ``side``, ``v``...) repeat. Parsing is iterative with an
explicit stack of (parent, pending key) frames, so deeply nested input
never touches the Python call stack.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

Vec3 = Tuple[float, float, float]

_LEAF_RE = re.compile(r'^"(.*)" "(.*)"$')


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class VMFError(Exception):
    pass


class VMFParseError(VMFError):
    """Structural error in the VMF text. No partial tree is returned."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class UnbalancedBracesError(VMFParseError):
    pass


class MalformedSyntaxError(VMFParseError):
    pass


class VMFSchemaError(VMFError):
    """A lookup or conversion did not match the expected shape."""
    pass


# ---------------------------------------------------------------------------
# Tree nodes
# ---------------------------------------------------------------------------

class VMFNode:
    """Common interface of branches and leaves.

    Every accessor is defined here so callers can chain lookups without
    type checks; the wrong node kind raises VMFSchemaError.
    """

    is_leaf = False

    def get_one(self, key: str) -> "VMFNode":
        raise VMFSchemaError(f"can't look up '{key}' on a VMF leaf")

    def get_all(self, key: str) -> List["VMFNode"]:
        raise VMFSchemaError(f"can't look up '{key}' on a VMF leaf")

    def to_str(self) -> str:
        raise VMFSchemaError("can't convert a VMF branch into a string")

    def to_vector(self) -> Vec3:
        raise VMFSchemaError("can't convert a VMF branch into a vertex")


class VMFLeaf(VMFNode):
    """A raw string value."""

    is_leaf = True
    __slots__ = ("value",)

    def __init__(self, value: str):
        self.value = value

    def to_str(self) -> str:
        return self.value

    def to_vector(self) -> Vec3:
        parts = self.value.split()
        if len(parts) != 3:
            raise VMFSchemaError(
                f"VMF vertex '{self.value}' doesn't contain 3 entries"
            )
        try:
            x, y, z = (float(p) for p in parts)
        except ValueError:
            raise VMFSchemaError(
                f"VMF vertex '{self.value}' contains a non-numeric entry"
            ) from None
        return (x, y, z)

    def __eq__(self, other) -> bool:
        return isinstance(other, VMFLeaf) and other.value == self.value

    def __repr__(self) -> str:
        return f"VMFLeaf({self.value!r})"


class VMFBranch(VMFNode):
    """Named, repeatable child lists in insertion order."""

    __slots__ = ("children",)

    def __init__(self, children: Optional[Dict[str, List[VMFNode]]] = None):
        self.children: Dict[str, List[VMFNode]] = children if children is not None else {}

    def insert(self, key: str, node: VMFNode) -> None:
        """Append node under key, creating the list if absent."""
        self.children.setdefault(key, []).append(node)

    def get_one(self, key: str) -> VMFNode:
        values = self.children.get(key)
        if values is None:
            raise VMFSchemaError(f"VMF branch doesn't contain key '{key}'")
        if len(values) != 1:
            raise VMFSchemaError(
                f"VMF branch contains {len(values)} values for key '{key}', expected 1"
            )
        return values[0]

    def get_all(self, key: str) -> List[VMFNode]:
        # Absent keys are simply zero occurrences.
        return self.children.get(key, [])

    def get_value(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Leaf string under key, or default when missing or not a single leaf."""
        try:
            return self.get_one(key).to_str()
        except VMFSchemaError:
            return default

    def keys(self) -> List[str]:
        return list(self.children.keys())

    def items(self) -> Iterator[Tuple[str, List[VMFNode]]]:
        return iter(self.children.items())

    def __eq__(self, other) -> bool:
        return isinstance(other, VMFBranch) and other.children == self.children

    def __repr__(self) -> str:
        return f"VMFBranch({list(self.children.keys())!r})"


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def parse_vmf(text: str) -> VMFBranch:
    """Parse VMF text into its root branch.

    Raises:
        UnbalancedBracesError: a '}' with nothing open, or branches left
            open at end of input.
        MalformedSyntaxError: a branch name not followed by '{'.
    """
    current = VMFBranch()
    # Ancestors of the branch being built, innermost last.
    stack: List[Tuple[VMFBranch, str]] = []

    lines = iter(enumerate(text.splitlines(), start=1))
    for line_number, raw in lines:
        line = raw.strip()

        if line == "}":
            if not stack:
                raise UnbalancedBracesError(
                    "closing brace without an open branch", line_number
                )
            parent, key = stack.pop()
            parent.insert(key, current)
            current = parent
            continue

        match = _LEAF_RE.match(line)
        if match:
            current.insert(match.group(1), VMFLeaf(match.group(2)))
            continue

        if not line:
            continue

        # New branch: its opening brace must be on the next line.
        next_number, next_raw = next(lines, (line_number + 1, ""))
        if next_raw.strip() != "{":
            raise MalformedSyntaxError(
                f"expected '{{' after branch name '{line}'", next_number
            )
        stack.append((current, line))
        current = VMFBranch()

    if stack:
        open_keys = "/".join(key for _, key in stack)
        raise UnbalancedBracesError(f"file ended with unclosed branches: {open_keys}")

    return current


def load_vmf(path) -> VMFBranch:
    """Read and parse a VMF file."""
    text = Path(path).read_text(encoding="utf-8", errors="replace")
    return parse_vmf(text)
