"""Tag compilation for Ledge compiler.

Provides mixins for compiling the built-in tags to Python source lines.

The statements package is organized into logical modules:
- control_flow: Conditionals and loops (if, elseif, else, unless, each)
- template_structure: Template structure (section, super, layout, include, set, debugger)
- components: Components and their slots (component, slot)

Uses inline TYPE_CHECKING declarations for host attributes.

"""

from __future__ import annotations

from ledge.compiler.statements.components import ComponentMixin
from ledge.compiler.statements.control_flow import ControlFlowMixin
from ledge.compiler.statements.template_structure import TemplateStructureMixin


class StatementCompilationMixin(
    ControlFlowMixin,
    TemplateStructureMixin,
    ComponentMixin,
):
    """Combined mixin for compiling all built-in tags.

    This class combines all tag compilation mixins into a single
    interface that can be inherited by the Compiler class.

    """
