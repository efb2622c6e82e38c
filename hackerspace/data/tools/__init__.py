"""
Tool models package
"""

from .tool_description import ToolDescription
from .tool_checkout import ToolCheckout

__all__ = [
    'ToolDescription',
    'ToolCheckout',
]
