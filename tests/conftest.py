"""
Pytest fixtures for the depreciation API.

Every test gets its own application bound to an in-memory SQLite database.
"""

import pytest

from app import create_app
from models import db


@pytest.fixture
def app():
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'API_KEY': '',
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def asset_payload():
    return {
        'companyId': 'acme',
        'assetId': 'laptop-1',
        'cost': 1000,
        'periodCount': 4,
        'purchaseDate': '2024-03-01',
    }
