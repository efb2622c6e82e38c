from hackerspace import db
from hackerspace.data.core.user_created_base import UserCreatedBase


class ToolDescription(UserCreatedBase):
    """A physical tool in the hackerspace that members can check out"""
    __tablename__ = 'tool_description'

    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    circle_id = db.Column(db.Integer, db.ForeignKey('circle.id'), nullable=True)

    circle = db.relationship('Circle')
    checkouts = db.relationship('ToolCheckout', back_populates='tool', lazy='dynamic')

    def __repr__(self):
        return f'<ToolDescription {self.name}>'
