"""
Tool Service
Presentation service for the tool board.

Handles:
- Combining tools with their current holder for display
- Tool form options (circles)
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from hackerspace.buisness.tools.gateway import ToolGateway
from hackerspace.buisness.tools.records import CheckoutRecord, ToolRecord
from hackerspace.data.core.circle import Circle


@dataclass(frozen=True)
class ToolCard:
    tool: ToolRecord
    checkout: Optional[CheckoutRecord] = None

    @property
    def is_available(self) -> bool:
        return self.checkout is None

    def to_dict(self) -> dict:
        data = self.tool.to_dict()
        data['available'] = self.is_available
        data['checkout'] = self.checkout.to_dict() if self.checkout else None
        return data


class ToolService:

    @staticmethod
    def get_tool_cards(gateway: ToolGateway) -> List[ToolCard]:
        """
        Every tool with the open checkout that currently holds it, if any.

        Args:
            gateway: Persistence gateway to read from

        Returns:
            list[ToolCard]: Ordered by tool name
        """
        open_by_tool: Dict[int, CheckoutRecord] = {
            checkout.tool_id: CheckoutRecord.from_model(checkout)
            for checkout in gateway.list_open_checkouts()
        }
        return [
            ToolCard(tool=ToolRecord.from_model(tool), checkout=open_by_tool.get(tool.id))
            for tool in gateway.list_tools()
        ]

    @staticmethod
    def get_form_options():
        return {
            'circles': Circle.query.order_by(Circle.name).all()
        }
