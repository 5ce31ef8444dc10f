"""Tag registry for the Ledge compiler.

Each tag is described by a `TagSpec`:

- `block`: the tag takes a body closed by ``@end`` (``@!tag`` self-closes it)
- `seekable`: the tag requires a parenthesised argument
- `compile`: called with the `Compiler` and the tag token to emit code

Built-in tags:
    | Tag        | Block | Seekable |
    |------------|-------|----------|
    | if         | yes   | yes      |
    | elseif     | no    | yes      |
    | else       | no    | no       |
    | unless     | yes   | yes      |
    | each       | yes   | yes      |
    | set        | no    | yes      |
    | section    | yes   | yes      |
    | super      | no    | no       |
    | layout     | no    | yes      |
    | include    | no    | yes      |
    | component  | yes   | yes      |
    | slot       | yes   | yes      |
    | debugger   | no    | no       |

"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from ledge.compiler.core import Compiler

if TYPE_CHECKING:
    from ledge._types import Token


@dataclass(frozen=True, slots=True)
class TagSpec:
    """How the lexer scans a tag and how the compiler emits it."""

    block: bool
    seekable: bool
    compile: Callable[[Compiler, Token], None]


def builtin_tags() -> dict[str, TagSpec]:
    """Return a fresh, mutable mapping of the built-in tags."""
    return {
        "if": TagSpec(block=True, seekable=True, compile=Compiler._compile_if),
        "elseif": TagSpec(block=False, seekable=True, compile=Compiler._compile_branch_outside_block),
        "else": TagSpec(block=False, seekable=False, compile=Compiler._compile_branch_outside_block),
        "unless": TagSpec(block=True, seekable=True, compile=Compiler._compile_unless),
        "each": TagSpec(block=True, seekable=True, compile=Compiler._compile_each),
        "set": TagSpec(block=False, seekable=True, compile=Compiler._compile_set),
        "section": TagSpec(block=True, seekable=True, compile=Compiler._compile_section),
        "super": TagSpec(block=False, seekable=False, compile=Compiler._compile_super),
        "layout": TagSpec(block=False, seekable=True, compile=Compiler._compile_layout),
        "include": TagSpec(block=False, seekable=True, compile=Compiler._compile_include),
        "component": TagSpec(block=True, seekable=True, compile=Compiler._compile_component),
        "slot": TagSpec(block=True, seekable=True, compile=Compiler._compile_slot),
        "debugger": TagSpec(block=False, seekable=False, compile=Compiler._compile_debugger),
    }


TAGS = MappingProxyType(builtin_tags())
