"""Flow control nodes."""

from .delay import DelayNode
from .if_else import IfElseNode
from .switch import SwitchNode

__all__ = ["DelayNode", "IfElseNode", "SwitchNode"]
