"""Ledge compiler — token tree to Python render function source.

```python
from ledge.compiler import Compiler, TagSpec, builtin_tags

code = Compiler(builtin_tags()).compile(tokens, name="page")
```
"""

from ledge.compiler.core import Compiler
from ledge.compiler.expressions import ExpressionCompiler
from ledge.compiler.tags import TAGS, TagSpec, builtin_tags

__all__ = ["TAGS", "Compiler", "ExpressionCompiler", "TagSpec", "builtin_tags"]
