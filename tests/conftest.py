"""Pytest fixtures for stampqr tests."""

import pytest

from stampqr import create_app
from stampqr.auth import issue_business_token
from stampqr.models import db, Business, Customer

from .helpers import SECRET, FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def app(tmp_path, clock):
    """App bound to a file-backed SQLite database so threads share one store."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'stamps.db'}",
        'SQLALCHEMY_ENGINE_OPTIONS': {'connect_args': {'timeout': 30}},
        'JWT_SECRET': SECRET,
        'USE_REDIS': False,
        'ADMIN_API_KEY': 'admin-key',
        'BASE_URL': 'http://test.local',
        'RATE_LIMIT_MAX_REQUESTS': 100,
    }, clock=clock)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def services(app):
    return app.extensions['stampqr']


@pytest.fixture
def business(app):
    biz = Business(id='biz_1', name='Corner Coffee', email='corner@example.com')
    db.session.add(biz)
    db.session.commit()
    return biz


@pytest.fixture
def other_business(app):
    biz = Business(id='biz_2', name='Other Bakery', email='bakery@example.com')
    db.session.add(biz)
    db.session.commit()
    return biz


@pytest.fixture
def customer(business):
    cust = Customer(id='cust_9', business_id=business.id, first_name='Ana', last_name='Silva')
    db.session.add(cust)
    db.session.commit()
    return cust


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def business_headers(business):
    return {'Authorization': f"Bearer {issue_business_token(business.id)}"}
