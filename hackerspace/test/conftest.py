"""
Pytest configuration and fixtures

Every test gets a fresh application on an in-memory SQLite database with
CSRF and rate limiting switched off, seeded with three accounts and two
tools.
"""
import os
import tempfile
from datetime import datetime, timedelta

import pytest

os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "hackerspace-test-logs"))

from hackerspace import create_app
from hackerspace import db as _db
from hackerspace.buisness.core.audit import EventAuditRecorder
from hackerspace.buisness.tools.gateway import ToolGateway
from hackerspace.buisness.tools.lifecycle_manager import ToolLifecycleManager
from hackerspace.data.core.user_info.account import Account
from hackerspace.data.tools.tool_description import ToolDescription

PASSWORD = 'password123456'

TEST_CONFIG = {
    'SECRET_KEY': 'test-secret-key',
    'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    'TESTING': True,
    'WTF_CSRF_ENABLED': False,
    'RATELIMIT_ENABLED': False,
}


class FakeClock:
    """Clock returning a controllable time; each call advances one minute"""

    def __init__(self, start=datetime(2024, 3, 1, 18, 0, 0)):
        self.now = start

    def __call__(self):
        current = self.now
        self.now = self.now + timedelta(minutes=1)
        return current


def _add_account(username, is_admin=False, is_active=True):
    account = Account(username=username, email=f'{username}@example.org',
                      is_admin=is_admin, is_active=is_active)
    account.set_password(PASSWORD)
    _db.session.add(account)
    return account


@pytest.fixture(scope='function')
def bare_app():
    """Application with empty tables"""
    app = create_app(TEST_CONFIG)
    with app.app_context():
        _db.create_all()

    yield app

    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope='function')
def app(bare_app):
    """Application seeded with admin, alice, bob, a 3D Printer and a Laser Cutter"""
    with bare_app.app_context():
        _add_account('admin', is_admin=True)
        _add_account('alice')
        _add_account('bob')
        _db.session.flush()
        _db.session.add(ToolDescription(name='3D Printer', description='Prusa MK3S'))
        _db.session.add(ToolDescription(name='Laser Cutter', description='40W CO2'))
        _db.session.commit()
    return bare_app


@pytest.fixture(scope='function')
def seed(app):
    """Ids of the seeded rows"""
    with app.app_context():
        accounts = {a.username: a.id for a in Account.query.all()}
        tools = {t.name: t.id for t in ToolDescription.query.all()}
    return {
        'admin': accounts['admin'],
        'alice': accounts['alice'],
        'bob': accounts['bob'],
        'printer': tools['3D Printer'],
        'laser': tools['Laser Cutter'],
    }


@pytest.fixture(scope='function')
def clock():
    return FakeClock()


@pytest.fixture(scope='function')
def manager(app, clock):
    """Lifecycle manager with a fake clock, inside an application context"""
    with app.app_context():
        yield ToolLifecycleManager(ToolGateway(_db.session), audit=EventAuditRecorder(), clock=clock)


@pytest.fixture(scope='function')
def client(app):
    """Create Flask test client"""
    return app.test_client()


def login(client, username='alice', password=PASSWORD):
    """Helper function to log an account in"""
    return client.post('/login', data={
        'username': username,
        'password': password
    })


@pytest.fixture(scope='function')
def alice_client(app):
    client = app.test_client()
    login(client, 'alice')
    return client


@pytest.fixture(scope='function')
def bob_client(app):
    client = app.test_client()
    login(client, 'bob')
    return client


@pytest.fixture(scope='function')
def admin_client(app):
    client = app.test_client()
    login(client, 'admin')
    return client
