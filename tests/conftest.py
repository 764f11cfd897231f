import mongomock
import pytest
from fastapi.testclient import TestClient

import database
from main import app

TOKEN_SECRET = "test-secret"


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("TOKEN_SECRET", TOKEN_SECRET)
    monkeypatch.setenv("DB_URI", "mongodb://localhost:27017/meddonate_test")
    monkeypatch.setattr(database, "MongoClient", mongomock.MongoClient)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(client):
    return client.app.state.db


@pytest.fixture
def mongo():
    db = mongomock.MongoClient().get_database("meddonate_test")
    database.ensure_indexes(db)
    return db


@pytest.fixture
def listing():
    def make(**overrides):
        data = {
            "medicinename": "Paracetamol",
            "exp_date": "2027-05-01",
            "address": "12 Nile St",
            "phone": "0100000000",
            "photo": "https://img.example/paracetamol.jpg",
            "description": "Two sealed boxes, 500mg",
        }
        data.update(overrides)
        return data
    return make
