"""
Test configuration: in-memory SQLite app, test client and a signed-in owner.

DATABASE_URL must be set before ``app`` is imported because the app reads
its config at import time.
"""
import os

os.environ['DATABASE_URL'] = 'sqlite://'
os.environ.setdefault('SECRET_KEY', 'test-secret')

import pytest

from app import app as flask_app
from models import db, Owner


@pytest.fixture
def app():
    flask_app.config.update(TESTING=True)
    with flask_app.app_context():
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def owner(app):
    o = Owner(email='Bobby@Example.com ')
    o.set_password('hunter2')
    db.session.add(o)
    db.session.commit()
    return o


@pytest.fixture
def signed_in(client, owner):
    client.post('/bobby/login', data={'email': 'bobby@example.com', 'password': 'hunter2'})
    return client


@pytest.fixture
def broken_store(app):
    """Simulate an unreachable store: every table is gone."""
    db.drop_all()
    return app
