from hackerspace import db
from datetime import datetime
from sqlalchemy.orm import declared_attr


class UserCreatedBase(db.Model):
    """Abstract base class for all user-created entities with audit trail"""

    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    created_by_id = db.Column(db.Integer, db.ForeignKey('account.id'), nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    updated_by_id = db.Column(db.Integer, db.ForeignKey('account.id'), nullable=True)

    @declared_attr
    def created_by(cls):
        return db.relationship('Account', foreign_keys=[cls.created_by_id])

    @declared_attr
    def updated_by(cls):
        return db.relationship('Account', foreign_keys=[cls.updated_by_id])
