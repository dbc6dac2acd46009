"""Shared fixtures."""
from decimal import Decimal

import pytest
from quotebook import create_app, db
from quotebook.models import Client, User
from quotebook.services import QuoteService

PASSWORD = 'correct-horse'


@pytest.fixture
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield


@pytest.fixture
def db_ctx(app, app_ctx):
    db.create_all()
    yield
    db.session.remove()


def _user(email='sales@example.com', role='user'):
    u = User(email=email, name=email.split('@')[0].title(), role=role)
    u.set_password(PASSWORD)
    db.session.add(u)
    db.session.commit()
    return u


def _client(name='Acme Industries'):
    c = Client(name=name, email='billing@acme.example.com', gstin='29ABCDE1234F1Z5')
    db.session.add(c)
    db.session.commit()
    return c


SCENARIO_ITEMS = [{'description': 'Widget', 'quantity': 2, 'unit_price': Decimal('500')}]
SCENARIO_PRICING = {
    'discount_percent': '10',
    'cgst_percent': '9',
    'sgst_percent': '9',
    'igst_percent': '0',
    'shipping_charges': '50',
}


@pytest.fixture
def make_user(db_ctx):
    return _user


@pytest.fixture
def make_client(db_ctx):
    return _client


@pytest.fixture
def make_quote(db_ctx):
    """Create a quote priced like the 1112.00 reference example, optionally advanced to ``status``."""
    def factory(status='draft', items=None, pricing=None, client=None):
        client = client or _client()
        quote = QuoteService.create_quote(
            client.id, items or SCENARIO_ITEMS, pricing or SCENARIO_PRICING,
        )
        path = {'draft': [], 'sent': ['sent'], 'approved': ['sent', 'approved'],
                'rejected': ['sent', 'rejected']}[status]
        for step in path:
            QuoteService.change_status(quote.id, step)
        return quote
    return factory


@pytest.fixture
def api(app, client):
    """Test client logged in as an editor, with the seeded client's id on ``api.client_id``."""
    with app.app_context():
        _user()
        client.client_id = _client().id
    resp = client.post('/api/auth/login', json={'email': 'sales@example.com', 'password': PASSWORD})
    assert resp.status_code == 200
    return client


@pytest.fixture
def login_as(app):
    """Return a fresh test client logged in as a new user with ``role``."""
    def factory(role, email=None):
        email = email or f'{role}@example.com'
        with app.app_context():
            _user(email=email, role=role)
        c = app.test_client()
        resp = c.post('/api/auth/login', json={'email': email, 'password': PASSWORD})
        assert resp.status_code == 200
        return c
    return factory
