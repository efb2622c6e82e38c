"""
ToolLifecycleManager - checkout/checkin rules for hackerspace tools

Enforces that a tool has at most one open checkout and that only the
holder (or an administrator) checks a tool back in. Storage is delegated
to ToolGateway; audit events go to an optional recorder.
"""

from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional

from hackerspace.buisness.tools.errors import (
    ToolConflictError,
    CheckoutStateError,
    CheckoutForbiddenError,
)
from hackerspace.buisness.tools.gateway import ToolGateway, OpenCheckoutExists
from hackerspace.buisness.tools.records import CheckoutRecord
from hackerspace.buisness.tools.state_machine import CheckoutStateMachine
from hackerspace.logger import get_logger

logger = get_logger("hackerspace.tools.lifecycle")


class ToolLifecycleManager:
    """
    Args:
        gateway: Persistence gateway for tools and checkouts
        audit: Optional recorder with ``record(domain, key, account_id, **payload)``
        clock: Callable returning the current naive UTC datetime
    """

    def __init__(self, gateway: ToolGateway, audit=None, clock: Optional[Callable[[], datetime]] = None):
        self.gateway = gateway
        self.audit = audit
        self.clock = clock or datetime.utcnow

    def check_out(self, tool_id: int, account_id: int) -> CheckoutRecord:
        """
        Check a tool out to an account.

        Raises:
            ToolNotFoundError: The tool does not exist
            ToolConflictError: The tool already has an open checkout
            ToolPersistenceError: The store failed
        """
        try:
            with self.gateway.transaction():
                tool = self.gateway.lock_tool(tool_id)

                holder = self._open_checkout_for(tool.id)
                if holder is not None:
                    logger.info(f"Checkout of tool {tool.id} refused, held by account {holder.account_id}")
                    raise ToolConflictError(tool.id, tool.name, holder.account_id,
                                            holder.account.username if holder.account else None)

                checkout = self.gateway.insert_checkout(tool.id, account_id, self.clock())
                record = CheckoutRecord.from_model(checkout)
        except OpenCheckoutExists as exc:
            # Lost a race to a concurrent checkout of the same tool
            raise self._conflict_after_race(tool_id) from exc

        logger.info(f"Tool {record.tool_id} checked out to account {account_id} (checkout {record.id})")
        self._record("checkout", account_id, record)
        return record

    def check_in(self, checkout_id: int, account_id: int, is_admin: bool = False) -> CheckoutRecord:
        """
        Close an open checkout.

        Raises:
            CheckoutNotFoundError: The checkout does not exist
            CheckoutStateError: The checkout is already closed
            CheckoutForbiddenError: The actor is neither holder nor admin
            ToolPersistenceError: The store failed
        """
        with self.gateway.transaction():
            checkout = self.gateway.find_checkout(checkout_id)

            current_state = CheckoutStateMachine.state_of(checkout.checkin_at)
            if not CheckoutStateMachine.can_transition(current_state, CheckoutStateMachine.CLOSED):
                tool_name = checkout.tool.name if checkout.tool else checkout.tool_id
                raise CheckoutStateError.already_checked_in(checkout.id, tool_name)

            if checkout.account_id != account_id and not is_admin:
                logger.warning(f"Account {account_id} tried to check in checkout {checkout.id} "
                               f"held by account {checkout.account_id}")
                raise CheckoutForbiddenError(checkout.id, account_id)

            # Never close before the checkout opened, even with a skewed clock
            now = max(self.clock(), checkout.checkout_at)
            record = CheckoutRecord.from_model(checkout)
            self.gateway.mark_checked_in(checkout.id, now, actor_id=account_id)
            record = replace(record, checkin_at=now)

        if account_id != record.account_id:
            logger.info(f"Admin account {account_id} checked in checkout {record.id} for account {record.account_id}")
        else:
            logger.info(f"Checkout {record.id} of tool {record.tool_id} checked in by account {account_id}")
        self._record("checkin", account_id, record)
        return record

    def list_open_checkouts(self) -> List[CheckoutRecord]:
        """Open checkouts, most recent first"""
        return [CheckoutRecord.from_model(c) for c in self.gateway.list_open_checkouts()]

    def _open_checkout_for(self, tool_id: int):
        for checkout in self.gateway.list_open_checkouts():
            if checkout.tool_id == tool_id:
                return checkout
        return None

    def _conflict_after_race(self, tool_id: int) -> ToolConflictError:
        tool = self.gateway.find_tool(tool_id)
        holder = self._open_checkout_for(tool_id)
        if holder is None:
            logger.warning(f"Checkout of tool {tool_id} lost a race but no open checkout remains")
            return ToolConflictError(tool.id, tool.name, None, None)
        logger.info(f"Checkout of tool {tool_id} lost a race to account {holder.account_id}")
        return ToolConflictError(tool.id, tool.name, holder.account_id,
                                 holder.account.username if holder.account else None)

    def _record(self, key: str, account_id: int, record: CheckoutRecord) -> None:
        if self.audit is None:
            return
        self.audit.record("tool", key, account_id,
                          text1=record.tool_name, int1=record.tool_id, int2=record.id)
