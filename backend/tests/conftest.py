import pytest
from flask_jwt_extended import create_access_token
from exam_builder import create_app
from exam_builder.extensions import db


class FakeTimer:
    """Stands in for threading.Timer; fires only when the test says so."""

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function()


@pytest.fixture
def timers():
    """A timer factory that records every timer it hands out."""
    created = []

    def factory(interval, function):
        timer = FakeTimer(interval, function)
        created.append(timer)
        return timer

    factory.created = created
    return factory


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _headers(app, role):
    token = create_access_token(identity="user-1", additional_claims={"role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(app):
    return _headers(app, "admin")


@pytest.fixture
def student_headers(app):
    return _headers(app, "student")
