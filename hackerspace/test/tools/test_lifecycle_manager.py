"""
ToolLifecycleManager behaviour against a real (in-memory) database
"""
from datetime import datetime

import pytest
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from hackerspace import db
from hackerspace.buisness.tools.errors import (
    ToolNotFoundError,
    CheckoutNotFoundError,
    ToolConflictError,
    CheckoutStateError,
    CheckoutForbiddenError,
)
from hackerspace.buisness.tools.gateway import ToolGateway
from hackerspace.buisness.tools.lifecycle_manager import ToolLifecycleManager
from hackerspace.buisness.tools.state_machine import CheckoutStateMachine
from hackerspace.data.core.event_info.event import Event
from hackerspace.data.core.user_info.account import Account
from hackerspace.data.tools.tool_checkout import ToolCheckout
from hackerspace.data.tools.tool_description import ToolDescription


def _open_rows(tool_id):
    return ToolCheckout.query.filter(ToolCheckout.tool_id == tool_id,
                                     ToolCheckout.checkin_at.is_(None)).count()


def test_check_out_creates_open_checkout(manager, seed, clock):
    start = clock.now
    record = manager.check_out(seed['printer'], seed['alice'])

    assert record.tool_id == seed['printer']
    assert record.account_id == seed['alice']
    assert record.checkout_at == start
    assert record.checkin_at is None
    assert record.is_open
    assert record.state == CheckoutStateMachine.OPEN
    assert record.tool_name == '3D Printer'
    assert record.account_name == 'alice'
    assert _open_rows(seed['printer']) == 1


def test_second_check_out_conflicts_and_names_holder(manager, seed):
    manager.check_out(seed['printer'], seed['alice'])

    with pytest.raises(ToolConflictError) as exc_info:
        manager.check_out(seed['printer'], seed['bob'])

    assert exc_info.value.held_by == seed['alice']
    assert exc_info.value.held_by_name == 'alice'
    assert exc_info.value.tool_name == '3D Printer'
    assert exc_info.value.status_code == 409
    assert _open_rows(seed['printer']) == 1


def test_same_account_cannot_check_out_twice(manager, seed):
    manager.check_out(seed['printer'], seed['alice'])

    with pytest.raises(ToolConflictError):
        manager.check_out(seed['printer'], seed['alice'])

    assert _open_rows(seed['printer']) == 1


def test_different_tools_can_be_held_at_once(manager, seed):
    manager.check_out(seed['printer'], seed['alice'])
    manager.check_out(seed['laser'], seed['alice'])

    assert len(manager.list_open_checkouts()) == 2


def test_check_out_missing_tool_persists_nothing(manager, seed):
    with pytest.raises(ToolNotFoundError) as exc_info:
        manager.check_out(9999, seed['alice'])

    assert exc_info.value.tool_id == 9999
    assert ToolCheckout.query.count() == 0


def test_check_in_by_holder_closes_checkout(manager, seed):
    opened = manager.check_out(seed['printer'], seed['alice'])

    closed = manager.check_in(opened.id, seed['alice'])

    assert closed.id == opened.id
    assert closed.checkin_at is not None
    assert closed.checkin_at >= closed.checkout_at
    assert closed.state == CheckoutStateMachine.CLOSED
    assert db.session.get(ToolCheckout, opened.id).checkin_at == closed.checkin_at
    assert _open_rows(seed['printer']) == 0


def test_check_in_by_other_member_is_forbidden(manager, seed):
    opened = manager.check_out(seed['printer'], seed['alice'])

    with pytest.raises(CheckoutForbiddenError) as exc_info:
        manager.check_in(opened.id, seed['bob'], is_admin=False)

    assert exc_info.value.status_code == 403
    assert db.session.get(ToolCheckout, opened.id).checkin_at is None


def test_admin_may_check_in_for_someone_else(manager, seed):
    opened = manager.check_out(seed['printer'], seed['alice'])

    closed = manager.check_in(opened.id, seed['admin'], is_admin=True)

    assert closed.account_id == seed['alice']
    assert closed.checkin_at is not None
    assert db.session.get(ToolCheckout, opened.id).updated_by_id == seed['admin']


def test_second_check_in_is_invalid_state(manager, seed):
    opened = manager.check_out(seed['printer'], seed['alice'])
    first = manager.check_in(opened.id, seed['alice'])

    with pytest.raises(CheckoutStateError) as exc_info:
        manager.check_in(opened.id, seed['alice'])

    assert str(exc_info.value) == "Tool '3D Printer' is already checked in"
    assert db.session.get(ToolCheckout, opened.id).checkin_at == first.checkin_at


def test_check_in_losing_race_names_the_tool(manager, seed, monkeypatch):
    opened = manager.check_out(seed['printer'], seed['alice'])

    # Another request closes the row between the read and the update
    real_mark = manager.gateway.mark_checked_in

    def closed_meanwhile(checkout_id, now, actor_id=None):
        db.session.execute(
            update(ToolCheckout)
            .where(ToolCheckout.id == checkout_id)
            .values(checkin_at=datetime(2024, 3, 1, 18, 30))
            .execution_options(synchronize_session=False)
        )
        real_mark(checkout_id, now, actor_id=actor_id)

    monkeypatch.setattr(manager.gateway, 'mark_checked_in', closed_meanwhile)

    with pytest.raises(CheckoutStateError) as exc_info:
        manager.check_in(opened.id, seed['alice'])

    assert str(exc_info.value) == "Tool '3D Printer' is already checked in"
    assert exc_info.value.checkout_id == opened.id


def test_closed_checkout_reports_state_before_ownership(manager, seed):
    opened = manager.check_out(seed['printer'], seed['alice'])
    manager.check_in(opened.id, seed['alice'])

    with pytest.raises(CheckoutStateError):
        manager.check_in(opened.id, seed['bob'])


def test_check_in_missing_checkout(manager, seed):
    with pytest.raises(CheckoutNotFoundError) as exc_info:
        manager.check_in(12345, seed['alice'])

    assert exc_info.value.checkout_id == 12345


def test_tool_is_free_again_after_check_in(manager, seed):
    opened = manager.check_out(seed['printer'], seed['alice'])
    manager.check_in(opened.id, seed['alice'])

    again = manager.check_out(seed['printer'], seed['bob'])

    assert again.id != opened.id
    assert again.account_id == seed['bob']
    assert ToolCheckout.query.filter_by(tool_id=seed['printer']).count() == 2


def test_check_in_never_precedes_check_out(app, seed):
    times = iter([datetime(2024, 3, 1, 18, 0), datetime(2024, 3, 1, 17, 0)])
    with app.app_context():
        manager = ToolLifecycleManager(ToolGateway(db.session), clock=lambda: next(times))
        opened = manager.check_out(seed['printer'], seed['alice'])

        closed = manager.check_in(opened.id, seed['alice'])

        assert closed.checkin_at == opened.checkout_at


def test_list_open_checkouts_most_recent_first(manager, seed):
    first = manager.check_out(seed['printer'], seed['alice'])
    second = manager.check_out(seed['laser'], seed['bob'])

    assert [c.id for c in manager.list_open_checkouts()] == [second.id, first.id]

    manager.check_in(second.id, seed['bob'])

    assert [c.id for c in manager.list_open_checkouts()] == [first.id]


def test_list_open_checkouts_empty(manager, seed):
    assert manager.list_open_checkouts() == []


def test_lost_race_is_reported_as_conflict(manager, seed, monkeypatch):
    manager.check_out(seed['printer'], seed['alice'])

    # The loser's first read misses the winner's row, so only the unique index stops it
    real_list = manager.gateway.list_open_checkouts
    calls = []

    def stale_first_read():
        calls.append(1)
        return [] if len(calls) == 1 else real_list()

    monkeypatch.setattr(manager.gateway, 'list_open_checkouts', stale_first_read)

    with pytest.raises(ToolConflictError) as exc_info:
        manager.check_out(seed['printer'], seed['bob'])

    assert exc_info.value.held_by == seed['alice']
    assert _open_rows(seed['printer']) == 1


def test_open_checkout_index_rejects_second_open_row(manager, seed):
    manager.check_out(seed['printer'], seed['alice'])

    with pytest.raises(IntegrityError):
        db.session.add(ToolCheckout(tool_id=seed['printer'], account_id=seed['bob'],
                                    checkout_at=datetime(2024, 3, 1, 19, 0)))
        db.session.flush()
    db.session.rollback()

    assert _open_rows(seed['printer']) == 1


def test_audit_events_recorded(manager, seed):
    opened = manager.check_out(seed['printer'], seed['alice'])
    manager.check_in(opened.id, seed['alice'])

    events = Event.query.filter_by(domain='tool').order_by(Event.id).all()
    assert [e.key for e in events] == ['checkout', 'checkin']
    assert events[0].created_by_id == seed['alice']
    assert events[0].text1 == '3D Printer'
    assert events[0].int1 == seed['printer']
    assert events[0].int2 == opened.id


def test_refused_checkout_records_no_event(manager, seed):
    manager.check_out(seed['printer'], seed['alice'])
    with pytest.raises(ToolConflictError):
        manager.check_out(seed['printer'], seed['bob'])

    assert Event.query.filter_by(domain='tool').count() == 1


def test_example_scenario(bare_app, clock):
    with bare_app.app_context():
        for account_id, username in ((7, 'member7'), (9, 'member9')):
            account = Account(id=account_id, username=username, email=f'{username}@example.org')
            account.set_password('password123456')
            db.session.add(account)
        db.session.add(ToolDescription(id=41, name='Bandsaw'))
        db.session.add(ToolDescription(id=42, name='3D Printer'))
        db.session.flush()
        # Existing history so the next checkout id is 501
        db.session.add(ToolCheckout(id=500, tool_id=41, account_id=9,
                                    checkout_at=datetime(2024, 1, 1, 10, 0),
                                    checkin_at=datetime(2024, 1, 1, 11, 0)))
        db.session.commit()

        manager = ToolLifecycleManager(ToolGateway(db.session), clock=clock)

        checkout = manager.check_out(42, 7)
        assert (checkout.id, checkout.tool_id, checkout.account_id, checkout.checkin_at) == (501, 42, 7, None)

        with pytest.raises(ToolConflictError) as conflict:
            manager.check_out(42, 9)
        assert conflict.value.held_by == 7

        with pytest.raises(CheckoutForbiddenError):
            manager.check_in(501, 9, False)

        closed = manager.check_in(501, 7, False)
        assert closed.checkin_at is not None
        assert db.session.get(ToolCheckout, 501).checkin_at is not None

        again = manager.check_out(42, 9)
        assert again.account_id == 9
        assert again.tool_id == 42
