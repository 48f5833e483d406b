import pytest

from app import create_app
from config import Settings


@pytest.fixture
def settings(tmp_path):
    return Settings(
        content_dir=tmp_path / "data",
        credentials_path=tmp_path / "users.json",
        history_path=tmp_path / "history.json",
        secret_key="test-secret",
        admin_username="admin",
        admin_password="secret",
    )


@pytest.fixture
def app(settings):
    app = create_app(settings)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def stores(app):
    return app.extensions["cms"]


@pytest.fixture
def create_document(stores):
    def _create(name, content=""):
        (stores.documents.root / name).write_text(content, encoding="utf-8")
    return _create


def sign_in(client, username="admin"):
    with client.session_transaction() as sess:
        sess["username"] = username


def session_value(client, key):
    with client.session_transaction() as sess:
        return sess.get(key)


def flashed(client):
    with client.session_transaction() as sess:
        return [message for _, message in sess.get("_flashes", [])]
