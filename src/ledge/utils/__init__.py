"""Compile-time helpers shared by tag compilers.

```python
from ledge.utils import allow_expressions, parse_as_key_value_pair
```
"""

from ledge.utils.expressions import (
    PropsLiteral,
    allow_expressions,
    disallow_expressions,
    parse_as_key_value_pair,
    parse_sequence_expression,
)
from ledge.utils.html import Markup, html_escape
from ledge.utils.paths import DEFAULT_DISK, DEFAULT_EXTENSION, extract_disk_and_template_name
from ledge.utils.sections import (
    find_duplicate_sections,
    has_child_super,
    is_block,
    merge_sections,
    section_name,
)

__all__ = [
    "DEFAULT_DISK",
    "DEFAULT_EXTENSION",
    "Markup",
    "PropsLiteral",
    "allow_expressions",
    "disallow_expressions",
    "extract_disk_and_template_name",
    "find_duplicate_sections",
    "has_child_super",
    "html_escape",
    "is_block",
    "merge_sections",
    "parse_as_key_value_pair",
    "parse_sequence_expression",
    "section_name",
]
