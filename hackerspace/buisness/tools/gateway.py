"""
ToolGateway - persistence gateway for tools and checkouts

Owns every query the tool lifecycle needs and translates storage errors
into domain errors. Business rules live in ToolLifecycleManager.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload

from hackerspace.buisness.tools.errors import (
    ToolDomainError,
    ToolNotFoundError,
    CheckoutNotFoundError,
    CheckoutStateError,
    ToolPersistenceError,
)
from hackerspace.data.tools.tool_checkout import ToolCheckout
from hackerspace.data.tools.tool_description import ToolDescription
from hackerspace.logger import get_logger

logger = get_logger("hackerspace.tools.gateway")

OPEN_CHECKOUT_INDEX = 'uq_tool_checkout_open_tool'


class OpenCheckoutExists(Exception):
    """The open-checkout unique index rejected an insert"""

    def __init__(self, tool_id: Optional[int] = None):
        super().__init__(f"Tool {tool_id} already has an open checkout")
        self.tool_id = tool_id


def _is_open_checkout_violation(exc: IntegrityError) -> bool:
    # PostgreSQL names the index, SQLite names the column
    message = str(exc.orig)
    return OPEN_CHECKOUT_INDEX in message or 'tool_checkout.tool_id' in message


class ToolGateway:
    """
    Persistence gateway over a SQLAlchemy session.

    Args:
        session: SQLAlchemy session or scoped session (usually ``db.session``)
    """

    def __init__(self, session):
        self.session = session

    @contextmanager
    def transaction(self):
        """
        Run the enclosed reads and writes as one unit of work.

        Commits on success, rolls back on any error. Storage errors leave
        as ToolPersistenceError, open-checkout index violations as
        OpenCheckoutExists, domain errors unchanged.
        """
        try:
            yield self.session
            self.session.commit()
        except (ToolDomainError, OpenCheckoutExists):
            self.session.rollback()
            raise
        except IntegrityError as exc:
            self.session.rollback()
            if _is_open_checkout_violation(exc):
                raise OpenCheckoutExists() from exc
            logger.error(f"Integrity error in tool transaction: {exc}", exc_info=True)
            raise ToolPersistenceError("Tool checkout transaction failed") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error(f"Database error in tool transaction: {exc}", exc_info=True)
            raise ToolPersistenceError("Tool checkout transaction failed") from exc

    @contextmanager
    def _reading(self, action: str):
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error(f"Database error while {action}: {exc}", exc_info=True)
            raise ToolPersistenceError(f"Failed while {action}") from exc

    # ========== Tools ==========

    def find_tool(self, tool_id: int) -> ToolDescription:
        with self._reading("loading tool"):
            tool = self.session.get(ToolDescription, tool_id)
        if tool is None:
            raise ToolNotFoundError(tool_id)
        return tool

    def lock_tool(self, tool_id: int) -> ToolDescription:
        """
        Load a tool and take a row lock on it for the rest of the transaction.

        Concurrent checkouts of the same tool queue up behind the lock on
        backends that support SELECT ... FOR UPDATE; elsewhere the partial
        unique index on open checkouts still rejects the second insert.
        """
        with self._reading("locking tool"):
            tool = self.session.execute(
                select(ToolDescription)
                .where(ToolDescription.id == tool_id)
                .with_for_update()
            ).scalar_one_or_none()
        if tool is None:
            raise ToolNotFoundError(tool_id)
        return tool

    def list_tools(self) -> List[ToolDescription]:
        with self._reading("listing tools"):
            return list(self.session.execute(
                select(ToolDescription)
                .options(joinedload(ToolDescription.circle))
                .order_by(ToolDescription.name, ToolDescription.id)
            ).scalars())

    # ========== Checkouts ==========

    def list_open_checkouts(self) -> List[ToolCheckout]:
        """Open checkouts with tool and account loaded, most recent first"""
        with self._reading("listing open checkouts"):
            return list(self.session.execute(
                select(ToolCheckout)
                .options(joinedload(ToolCheckout.tool), joinedload(ToolCheckout.account))
                .where(ToolCheckout.checkin_at.is_(None))
                .order_by(ToolCheckout.checkout_at.desc(), ToolCheckout.id.desc())
            ).scalars())

    def find_checkout(self, checkout_id: int) -> ToolCheckout:
        with self._reading("loading checkout"):
            checkout = self.session.get(ToolCheckout, checkout_id)
        if checkout is None:
            raise CheckoutNotFoundError(checkout_id)
        return checkout

    def insert_checkout(self, tool_id: int, account_id: int, now: datetime) -> ToolCheckout:
        checkout = ToolCheckout(
            tool_id=tool_id,
            account_id=account_id,
            checkout_at=now,
            checkin_at=None,
            created_at=now,
            updated_at=now,
            created_by_id=account_id,
            updated_by_id=account_id,
        )
        self.session.add(checkout)
        try:
            self.session.flush()
        except IntegrityError as exc:
            if _is_open_checkout_violation(exc):
                raise OpenCheckoutExists(tool_id) from exc
            raise
        return checkout

    def mark_checked_in(self, checkout_id: int, now: datetime, actor_id: Optional[int] = None) -> None:
        """
        Close an open checkout.

        The update only matches rows that are still open, so a checkin
        racing another checkin fails instead of overwriting checkin_at.

        Raises:
            CheckoutNotFoundError: No such checkout
            CheckoutStateError: The checkout is already closed
        """
        result = self.session.execute(
            update(ToolCheckout)
            .where(ToolCheckout.id == checkout_id, ToolCheckout.checkin_at.is_(None))
            .values(checkin_at=now, updated_at=now, updated_by_id=actor_id)
        )
        if result.rowcount == 1:
            return
        checkout = self.session.get(ToolCheckout, checkout_id)
        if checkout is None:
            raise CheckoutNotFoundError(checkout_id)
        tool_name = checkout.tool.name if checkout.tool else checkout.tool_id
        raise CheckoutStateError.already_checked_in(checkout_id, tool_name)
