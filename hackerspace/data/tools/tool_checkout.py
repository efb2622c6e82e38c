from hackerspace import db
from hackerspace.data.core.user_created_base import UserCreatedBase
from datetime import datetime


class ToolCheckout(UserCreatedBase):
    """
    One occupancy interval of a tool by an account.

    Rows are append-only: created open (checkin_at is NULL) and closed
    exactly once by setting checkin_at. The partial unique index keeps at
    most one open row per tool.
    """
    __tablename__ = 'tool_checkout'
    __table_args__ = (
        db.Index(
            'uq_tool_checkout_open_tool',
            'tool_id',
            unique=True,
            sqlite_where=db.text('checkin_at IS NULL'),
            postgresql_where=db.text('checkin_at IS NULL'),
        ),
    )

    tool_id = db.Column(db.Integer, db.ForeignKey('tool_description.id'), nullable=False)
    account_id = db.Column(db.Integer, db.ForeignKey('account.id'), nullable=False)
    checkout_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    checkin_at = db.Column(db.DateTime, nullable=True)

    tool = db.relationship('ToolDescription', back_populates='checkouts')
    account = db.relationship('Account', foreign_keys=[account_id])

    @property
    def is_open(self):
        return self.checkin_at is None

    def __repr__(self):
        state = 'open' if self.is_open else 'closed'
        return f'<ToolCheckout tool={self.tool_id} account={self.account_id} {state}>'
