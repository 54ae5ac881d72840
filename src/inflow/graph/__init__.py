"""
Workflow Graph Module.

Graph data model and the topological scheduler.
"""

from .node import Connection, Node, NodeType, Workflow
from .scheduler import order

__all__ = [
    "Connection",
    "Node",
    "NodeType",
    "Workflow",
    "order",
]
