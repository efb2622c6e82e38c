"""
Admin account management
"""
from hackerspace import db
from hackerspace.data.core.event_info.event import Event
from hackerspace.data.core.user_info.account import Account
from hackerspace.test.conftest import login


def _account_form(**overrides):
    data = {
        'username': 'carol',
        'email': 'carol@example.org',
        'name': 'Carol Shaw',
        'phone': '555-0101',
        'password': 'carol-password',
        'confirm_password': 'carol-password',
    }
    data.update(overrides)
    return data


def test_account_pages_require_admin(alice_client, seed):
    assert alice_client.get('/admin/accounts').status_code == 403
    assert alice_client.post('/admin/accounts/create', data=_account_form()).status_code == 403
    assert alice_client.post(f"/admin/accounts/{seed['bob']}/toggle-active").status_code == 403


def test_list_shows_member_accounts(admin_client):
    response = admin_client.get('/admin/accounts')

    assert response.status_code == 200
    assert b'alice@example.org' in response.data
    assert b'bob@example.org' in response.data


def test_list_hides_system_account(admin_client, app):
    with app.app_context():
        system = Account(username='system', email='system@hackerspace.local', is_system=True, is_active=False)
        system.set_password('system-password')
        db.session.add(system)
        db.session.commit()

    response = admin_client.get('/admin/accounts')

    assert b'system@hackerspace.local' not in response.data


def test_create_account(admin_client, app, seed):
    response = admin_client.post('/admin/accounts/create', data=_account_form())

    assert response.status_code == 302
    with app.app_context():
        carol = Account.query.filter_by(username='carol').one()
        assert carol.is_active
        assert not carol.is_admin
        assert carol.phone == '555-0101'
        event = Event.query.filter_by(domain='admin', key='account_create').one()
        assert event.created_by_id == seed['admin']
        assert event.int1 == carol.id

    client = app.test_client()
    assert login(client, 'carol', 'carol-password').status_code == 302


def test_create_admin_account(admin_client, app):
    admin_client.post('/admin/accounts/create', data=_account_form(is_admin='on'))

    with app.app_context():
        assert Account.query.filter_by(username='carol').one().is_admin


def test_create_refuses_duplicate_username(admin_client, app):
    response = admin_client.post('/admin/accounts/create', data=_account_form(username='alice'))

    assert response.status_code == 400
    assert b'Username already exists' in response.data
    with app.app_context():
        assert Account.query.count() == 3


def test_create_refuses_duplicate_email(admin_client):
    response = admin_client.post('/admin/accounts/create', data=_account_form(email='bob@example.org'))

    assert response.status_code == 400
    assert b'Email already exists' in response.data


def test_create_refuses_mismatched_passwords(admin_client, app):
    response = admin_client.post('/admin/accounts/create',
                                 data=_account_form(confirm_password='something-else'))

    assert response.status_code == 400
    assert b'do not match' in response.data
    with app.app_context():
        assert Account.query.filter_by(username='carol').count() == 0


def test_create_refuses_short_password(admin_client):
    response = admin_client.post('/admin/accounts/create',
                                 data=_account_form(password='short', confirm_password='short'))

    assert response.status_code == 400
    assert b'at least 8 characters' in response.data


def test_edit_updates_details_and_resets_password(admin_client, app, seed):
    response = admin_client.post(f"/admin/accounts/{seed['alice']}/edit", data=_account_form(
        username='alice', email='alice@example.org', name='Alice Liddell', phone='555-0199',
        password='new-alice-password', confirm_password='new-alice-password'))

    assert response.status_code == 302
    with app.app_context():
        alice = db.session.get(Account, seed['alice'])
        assert alice.name == 'Alice Liddell'
        assert alice.phone == '555-0199'
        assert alice.check_password('new-alice-password')
        event = Event.query.filter_by(domain='admin', key='account_update').one()
        assert event.int1 == seed['alice']
        assert event.int2 == 1


def test_edit_without_password_keeps_it(admin_client, app, seed):
    response = admin_client.post(f"/admin/accounts/{seed['bob']}/edit", data=_account_form(
        username='bob', email='bob@example.org', password='', confirm_password=''))

    assert response.status_code == 302
    with app.app_context():
        bob = db.session.get(Account, seed['bob'])
        assert bob.name == 'Carol Shaw'

    assert login(app.test_client(), 'bob').status_code == 302


def test_admin_cannot_remove_own_admin_rights(admin_client, app, seed):
    response = admin_client.post(f"/admin/accounts/{seed['admin']}/edit", data=_account_form(
        username='admin', email='admin@example.org', password='', confirm_password=''))

    assert response.status_code == 400
    assert b'You cannot remove your own admin rights' in response.data
    with app.app_context():
        assert db.session.get(Account, seed['admin']).is_admin


def test_deactivated_account_cannot_log_in(admin_client, app, seed):
    response = admin_client.post(f"/admin/accounts/{seed['bob']}/toggle-active")

    assert response.status_code == 302
    with app.app_context():
        assert not db.session.get(Account, seed['bob']).is_active
        assert Event.query.filter_by(domain='admin', key='account_deactivate').count() == 1

    assert login(app.test_client(), 'bob').status_code == 403

    admin_client.post(f"/admin/accounts/{seed['bob']}/toggle-active")
    with app.app_context():
        assert db.session.get(Account, seed['bob']).is_active
        assert Event.query.filter_by(domain='admin', key='account_activate').count() == 1


def test_admin_cannot_deactivate_self(admin_client, app, seed):
    response = admin_client.post(f"/admin/accounts/{seed['admin']}/toggle-active")

    assert response.status_code == 302
    with app.app_context():
        assert db.session.get(Account, seed['admin']).is_active
