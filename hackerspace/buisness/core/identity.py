"""
Identity context

Turns the Flask-Login session user into an explicit Principal that is
passed to business operations.
"""

from dataclasses import dataclass

from flask_login import current_user


class Unauthenticated(Exception):
    """Raised when an operation needs a principal and nobody is logged in"""
    status_code = 401


@dataclass(frozen=True)
class Principal:
    account_id: int
    username: str
    is_admin: bool = False

    @classmethod
    def from_account(cls, account) -> "Principal":
        return cls(account_id=account.id, username=account.username, is_admin=bool(account.is_admin))


def current_principal() -> Principal:
    """
    Resolve the logged-in account for the current request.

    Raises:
        Unauthenticated: Nobody is logged in
    """
    if not current_user or not current_user.is_authenticated:
        raise Unauthenticated("Authentication required")
    return Principal.from_account(current_user)
