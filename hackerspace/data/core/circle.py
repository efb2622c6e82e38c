from hackerspace import db
from hackerspace.data.core.user_created_base import UserCreatedBase


class Circle(UserCreatedBase):
    """Access-control group; tools may be owned by a circle"""
    __tablename__ = 'circle'

    name = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=False, default='')

    members = db.relationship('CircleMember', back_populates='circle', cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Circle {self.name}>'

    def has_member(self, account_id):
        return any(member.account_id == account_id for member in self.members)


class CircleMember(UserCreatedBase):
    __tablename__ = 'circle_member'
    __table_args__ = (
        db.UniqueConstraint('circle_id', 'account_id', name='uq_circle_member'),
    )

    circle_id = db.Column(db.Integer, db.ForeignKey('circle.id'), nullable=False)
    account_id = db.Column(db.Integer, db.ForeignKey('account.id'), nullable=False)
    issuer_id = db.Column(db.Integer, db.ForeignKey('account.id'), nullable=False)
    comment = db.Column(db.Text, nullable=True)

    circle = db.relationship('Circle', back_populates='members')
    account = db.relationship('Account', foreign_keys=[account_id])
    issuer = db.relationship('Account', foreign_keys=[issuer_id])

    def __repr__(self):
        return f'<CircleMember circle={self.circle_id} account={self.account_id}>'
