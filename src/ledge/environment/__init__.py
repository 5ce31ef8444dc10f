"""Ledge environment — configuration, loaders and errors.

```python
from ledge.environment import DictLoader, DiskLoader, Environment
```
"""

from ledge.environment.exceptions import (
    ErrorCode,
    SourceSnippet,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    build_source_snippet,
)
from ledge.environment.loaders import DictLoader, DiskLoader, Loader
from ledge.environment.core import Environment

__all__ = [
    "DictLoader",
    "DiskLoader",
    "Environment",
    "ErrorCode",
    "Loader",
    "SourceSnippet",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "build_source_snippet",
]
