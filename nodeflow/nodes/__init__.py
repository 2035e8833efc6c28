"""Workflow node handlers."""

from .ai import AINode
from .base import BaseNode
from .data_transform import DataTransformNode
from .flow import DelayNode, IfElseNode, SwitchNode
from .http_request import HttpRequestNode
from .send_email import SendEmailNode
from .triggers import TriggerNode

# Registration order is palette order
BUILTIN_NODES: list[type[BaseNode]] = [
    TriggerNode,
    AINode,
    HttpRequestNode,
    DataTransformNode,
    SendEmailNode,
    IfElseNode,
    SwitchNode,
    DelayNode,
]

__all__ = [
    "BUILTIN_NODES",
    "AINode",
    "BaseNode",
    "DataTransformNode",
    "DelayNode",
    "HttpRequestNode",
    "IfElseNode",
    "SendEmailNode",
    "SwitchNode",
    "TriggerNode",
]
