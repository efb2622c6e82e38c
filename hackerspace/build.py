#!/usr/bin/env python3
"""
Database build for the hackerspace tool manager
Creates tables, the essential accounts and optional demo data
"""

import json
import os
import secrets
from pathlib import Path

from hackerspace import create_app, db
from hackerspace.logger import get_logger

logger = get_logger("hackerspace.build")

DEMO_DATA_FILE = Path(__file__).parent / 'data' / 'debug' / 'build_data_demo.json'


def insert_essential_accounts():
    """
    Make sure the system and admin accounts exist.

    The admin password comes from ADMIN_PASSWORD and is required the first
    time the admin account is created. The system account never logs in;
    without SYSTEM_PASSWORD it gets a random one.

    Returns:
        Account: The system account
    """
    from hackerspace.data.core.user_info.account import Account

    system = Account.query.filter_by(username='system').first()
    if system is None:
        system = Account(username='system', email='system@hackerspace.local',
                         name='System', is_admin=True, is_system=True)
        system.set_password(os.environ.get('SYSTEM_PASSWORD') or secrets.token_urlsafe(32))
        db.session.add(system)
        db.session.flush()
        logger.info("Inserted system account")

    admin = Account.query.filter_by(username='admin').first()
    if admin is None:
        password = os.environ.get('ADMIN_PASSWORD')
        if not password:
            db.session.rollback()
            logger.critical("ADMIN_PASSWORD not set; cannot create the admin account")
            raise RuntimeError("ADMIN_PASSWORD environment variable is required to create the admin account")
        admin = Account(username='admin', email='admin@hackerspace.local',
                        name='Administrator', is_admin=True)
        admin.set_password(password)
        db.session.add(admin)
        logger.info("Inserted admin account")

    db.session.commit()
    return system


def insert_demo_data(system_account_id, data_file=DEMO_DATA_FILE):
    """
    Insert demo member accounts, circles and tools; rows that already exist are skipped.

    Args:
        system_account_id (int): Account recorded as creator
        data_file (Path): JSON file with "Accounts", "Circles" and "Tools" lists
    """
    from hackerspace.data.core.circle import Circle, CircleMember
    from hackerspace.data.core.user_info.account import Account
    from hackerspace.data.tools.tool_description import ToolDescription

    with open(data_file, 'r') as f:
        demo = json.load(f)

    accounts = {}
    for account_data in demo.get('Accounts', []):
        account = Account.query.filter_by(username=account_data['username']).first()
        if account is None:
            account = Account(username=account_data['username'],
                              email=account_data['email'],
                              name=account_data.get('name'))
            account.set_password(account_data['password'])
            db.session.add(account)
            db.session.flush()
            logger.info(f"Inserted demo account: {account.username}")
        accounts[account.username] = account

    circles = {}
    for circle_data in demo.get('Circles', []):
        circle = Circle.query.filter_by(name=circle_data['name']).first()
        if circle is None:
            circle = Circle(name=circle_data['name'],
                            description=circle_data.get('description', ''),
                            created_by_id=system_account_id,
                            updated_by_id=system_account_id)
            db.session.add(circle)
            db.session.flush()
            logger.info(f"Inserted demo circle: {circle.name}")
        circles[circle.name] = circle

        for username in circle_data.get('members', []):
            account = accounts.get(username)
            if account is None or circle.has_member(account.id):
                continue
            circle.members.append(CircleMember(account_id=account.id,
                                               issuer_id=system_account_id,
                                               created_by_id=system_account_id,
                                               updated_by_id=system_account_id))

    for tool_data in demo.get('Tools', []):
        if ToolDescription.query.filter_by(name=tool_data['name']).first():
            continue
        circle = circles.get(tool_data.get('circle'))
        db.session.add(ToolDescription(name=tool_data['name'],
                                       description=tool_data.get('description'),
                                       circle_id=circle.id if circle else None,
                                       created_by_id=system_account_id,
                                       updated_by_id=system_account_id))
        logger.info(f"Inserted demo tool: {tool_data['name']}")

    db.session.commit()


def build_database(app=None, enable_debug_data=True):
    """
    Create all tables and insert essential data.

    Args:
        app (Flask, optional): Application to build for; a new one is created when omitted
        enable_debug_data (bool): Also insert demo members, circles and tools
    """
    app = app or create_app()

    with app.app_context():
        logger.info(f"Starting database build (debug data: {enable_debug_data})")
        db.create_all()

        system = insert_essential_accounts()

        if enable_debug_data:
            logger.info("Inserting demo data...")
            insert_demo_data(system.id)

        logger.info("Database build completed successfully")
