from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from hackerspace.buisness.tools.state_machine import CheckoutStateMachine


@dataclass(frozen=True)
class ToolRecord:
    id: int
    name: str
    description: Optional[str]
    circle_id: Optional[int]
    circle_name: Optional[str] = None

    @classmethod
    def from_model(cls, tool) -> "ToolRecord":
        return cls(
            id=tool.id,
            name=tool.name,
            description=tool.description,
            circle_id=tool.circle_id,
            circle_name=tool.circle.name if tool.circle else None,
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'circle_id': self.circle_id,
            'circle_name': self.circle_name,
        }


@dataclass(frozen=True)
class CheckoutRecord:
    """Checkout joined with the tool name and the holder's username"""
    id: int
    tool_id: int
    account_id: int
    checkout_at: datetime
    checkin_at: Optional[datetime]
    tool_name: Optional[str] = None
    account_name: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.checkin_at is None

    @property
    def state(self) -> str:
        return CheckoutStateMachine.state_of(self.checkin_at)

    @classmethod
    def from_model(cls, checkout) -> "CheckoutRecord":
        return cls(
            id=checkout.id,
            tool_id=checkout.tool_id,
            account_id=checkout.account_id,
            checkout_at=checkout.checkout_at,
            checkin_at=checkout.checkin_at,
            tool_name=checkout.tool.name if checkout.tool else None,
            account_name=checkout.account.username if checkout.account else None,
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'tool_id': self.tool_id,
            'tool_name': self.tool_name,
            'account_id': self.account_id,
            'account_name': self.account_name,
            'checkout_at': self.checkout_at.isoformat(),
            'checkin_at': self.checkin_at.isoformat() if self.checkin_at else None,
        }
