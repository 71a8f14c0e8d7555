"""
Control-flow graph construction for function units.
"""

from .cfg_builder import BasicBlock, CFGBuilder, ControlFlowGraph, Edge, ENTRY, EXIT

__all__ = [
    'BasicBlock',
    'CFGBuilder',
    'ControlFlowGraph',
    'Edge',
    'ENTRY',
    'EXIT',
]
