import itertools
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from aplyease import create_app
from aplyease.config import TestConfig
from aplyease.extensions import db
from aplyease.models import User, ClientProfile, JobApplication

PASSWORD = "Passw0rd1"


@pytest.fixture
def app(tmp_path):
    class _Config(TestConfig):
        LOG_DIR = str(tmp_path / "logs")

    app = create_app(_Config)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def utc_today():
    return datetime.utcnow().date()


@pytest.fixture
def make_user(app):
    seq = itertools.count(1)

    def _make(role="client", *, name=None, email=None, password=PASSWORD, remaining=0,
              is_active=True, paid=0, due=0, company=None):
        n = next(seq)
        with app.app_context():
            u = User(
                name=name or f"{role.title()} {n}",
                email=email or f"{role}{n}@aplyease.com",
                role=role,
                is_active=is_active,
                applications_remaining=remaining,
            )
            u.set_password(password)
            if role == "client":
                u.client_profile = ClientProfile(company=company, amount_paid_cents=paid, amount_due_cents=due)
            db.session.add(u)
            db.session.commit()
            return SimpleNamespace(id=u.id, email=u.email, name=u.name, role=role)

    return _make


@pytest.fixture
def make_application(app, utc_today):
    def _make(client, employee, *, status="Applied", days_ago=0, job_title="Engineer", company="Acme"):
        with app.app_context():
            a = JobApplication(
                client_id=client.id,
                employee_id=employee.id,
                applied_by_name=employee.name,
                date_applied=utc_today - timedelta(days=days_ago),
                job_title=job_title,
                company_name=company,
                status=status,
            )
            db.session.add(a)
            db.session.commit()
            return a.id

    return _make


@pytest.fixture
def login(client):
    def _login(user, password=PASSWORD):
        resp = client.post("/auth/login", json={"email": user.email, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return resp

    return _login
