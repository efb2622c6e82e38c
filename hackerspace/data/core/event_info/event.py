from hackerspace import db
from hackerspace.data.core.user_created_base import UserCreatedBase


class Event(UserCreatedBase):
    """
    Audit event.

    Events are addressed by (domain, key), e.g. ("tool", "checkout"), and
    carry up to three free-text and three integer payload slots.
    """
    __tablename__ = 'event'

    domain = db.Column(db.String(50), nullable=False, index=True)
    key = db.Column(db.String(50), nullable=False)
    text1 = db.Column(db.Text, nullable=True)
    text2 = db.Column(db.Text, nullable=True)
    text3 = db.Column(db.Text, nullable=True)
    int1 = db.Column(db.BigInteger, nullable=True)
    int2 = db.Column(db.BigInteger, nullable=True)
    int3 = db.Column(db.BigInteger, nullable=True)

    def __repr__(self):
        return f'<Event {self.domain}/{self.key}>'

    @classmethod
    def add_event(cls, domain, key, account_id=None, text1=None, text2=None, text3=None,
                  int1=None, int2=None, int3=None):
        """
        Create and flush a new event (the caller owns the commit)

        Args:
            domain (str): Event domain ("tool", "auth", "admin")
            key (str): Event key within the domain ("checkout", "login")
            account_id (int, optional): Account that triggered the event

        Returns:
            Event: The created event
        """
        event = cls(
            domain=domain,
            key=key,
            text1=text1,
            text2=text2,
            text3=text3,
            int1=int1,
            int2=int2,
            int3=int3,
            created_by_id=account_id,
            updated_by_id=account_id
        )
        db.session.add(event)
        db.session.flush()
        return event
