"""Ledge runtime — compiled templates and the per-render context.

```python
from ledge.template import Context, Template, UNDEFINED
```
"""

from ledge.template.context import Context
from ledge.template.core import Template
from ledge.template.helpers import UNDEFINED, Undefined
from ledge.template.loop_context import LoopMeta

__all__ = ["UNDEFINED", "Context", "LoopMeta", "Template", "Undefined"]
