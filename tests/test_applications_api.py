import csv
import io

import pytest

from aplyease.extensions import db
from aplyease.models import User, JobApplication


def _payload(client, **kw):
    data = {"clientId": client.id, "jobTitle": "Backend Engineer", "companyName": "Globex",
            "jobLink": "https://jobs.example.com/123"}
    data.update(kw)
    return data


def test_anonymous_is_rejected(client):
    resp = client.get("/applications")
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Authentication required"


def test_employee_creates_application_and_quota_drops(app, client, make_user, login):
    c = make_user("client", remaining=10)
    e = make_user("employee")
    login(e)
    resp = client.post("/applications", json=_payload(c))
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["status"] == "Applied"
    assert body["employeeId"] == e.id
    assert body["appliedByName"] == e.name
    assert body["client"] == {"id": c.id, "name": c.name}
    with app.app_context():
        assert db.session.get(User, c.id).applications_remaining == 9


def test_admin_must_name_the_employee(client, make_user, login):
    c = make_user("client", remaining=5)
    e = make_user("employee")
    login(make_user("admin"))
    assert client.post("/applications", json=_payload(c)).status_code == 400
    resp = client.post("/applications", json=_payload(c, employeeId=e.id, status="Interview"))
    assert resp.status_code == 201
    assert resp.get_json()["status"] == "Interview"


def test_create_validates_input(client, make_user, login):
    c = make_user("client")
    login(make_user("employee"))
    resp = client.post("/applications", json=_payload(c, status="Ghosted"))
    assert resp.status_code == 400
    assert "status" in resp.get_json()["errors"]
    resp = client.post("/applications", json={"clientId": c.id})
    assert set(resp.get_json()["errors"]) >= {"jobTitle", "companyName"}
    disabled = make_user("client", is_active=False)
    assert client.post("/applications", json=_payload(disabled)).status_code == 400


def test_clients_cannot_create(client, make_user, login):
    c = make_user("client", remaining=5)
    login(c)
    assert client.post("/applications", json=_payload(c)).status_code == 403


def test_quota_low_email_sent_once_at_threshold(client, make_user, login, monkeypatch):
    sent = []
    monkeypatch.setattr("aplyease.services.notifications.send_email", lambda **kw: sent.append(kw) or True)
    c = make_user("client", remaining=4)
    login(make_user("employee"))
    client.post("/applications", json=_payload(c))
    assert sent == []
    client.post("/applications", json=_payload(c))
    assert len(sent) == 1
    assert sent[0]["to"] == c.email
    assert sent[0]["remaining"] == 2
    client.post("/applications", json=_payload(c))
    assert len(sent) == 1


def test_client_only_sees_own_applications(client, make_user, make_application, login):
    mine, other = make_user("client"), make_user("client")
    e = make_user("employee")
    make_application(mine, e)
    make_application(other, e)
    make_application(other, e)
    login(mine)
    body = client.get(f"/applications?clientId={other.id}").get_json()
    assert body["total"] == 1
    assert {a["clientId"] for a in body["applications"]} == {mine.id}


def test_list_filters_and_pagination(client, make_user, make_application, login):
    c, e = make_user("client"), make_user("employee")
    for i in range(12):
        make_application(c, e, status="Hired" if i % 3 == 0 else "Applied", days_ago=i,
                         job_title=f"Role {i}")
    login(make_user("admin"))
    body = client.get("/applications?limit=5&page=2").get_json()
    assert body["total"] == 12
    assert body["pages"] == 3
    assert [a["jobTitle"] for a in body["applications"]] == [f"Role {i}" for i in range(5, 10)]
    assert client.get("/applications?status=Hired").get_json()["total"] == 4
    assert client.get("/applications", query_string={"search": "role 1"}).get_json()["total"] == 3
    assert client.get("/applications?status=Nope").status_code == 400


def test_client_may_only_change_status(app, client, make_user, make_application, login):
    c, e = make_user("client"), make_user("employee")
    app_id = make_application(c, e)
    login(c)
    assert client.patch(f"/applications/{app_id}", json={"jobTitle": "CTO"}).status_code == 400
    resp = client.patch(f"/applications/{app_id}", json={"status": "Rejected", "jobTitle": "CTO"})
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "Rejected"
    assert resp.get_json()["jobTitle"] == "Engineer"


def test_employee_edits_only_own(client, make_user, make_application, login):
    c = make_user("client")
    e1, e2 = make_user("employee"), make_user("employee")
    own, foreign = make_application(c, e1), make_application(c, e2)
    login(e1)
    assert client.patch(f"/applications/{foreign}", json={"status": "Hired"}).status_code == 403
    resp = client.patch(f"/applications/{own}", json={"notes": "Referred by Jo", "mailSent": True})
    assert resp.status_code == 200
    assert resp.get_json()["notes"] == "Referred by Jo"
    assert resp.get_json()["mailSent"] is True
    assert client.patch("/applications/99999", json={"status": "Hired"}).status_code == 404


def test_delete_rules(client, make_user, make_application, login):
    c, e = make_user("client"), make_user("employee")
    app_id = make_application(c, e)
    login(e)
    assert client.delete(f"/applications/{app_id}").status_code == 403
    login(c)
    assert client.delete(f"/applications/{app_id}").status_code == 200
    assert client.delete(f"/applications/{app_id}").status_code == 404


def test_bulk_status_counts_failures(app, client, make_user, make_application, login):
    c, e = make_user("client"), make_user("employee")
    ids = [make_application(c, e) for _ in range(3)]
    login(make_user("admin"))
    resp = client.post("/applications/bulk-status", json={"ids": ids + [424242], "status": "Screening"})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["succeeded"] == 3
    assert body["failed"] == 1
    with app.app_context():
        assert {a.status for a in JobApplication.query.all()} == {"Screening"}


def test_bulk_status_rejects_unknown_status_before_writing(app, client, make_user, make_application, login):
    c, e = make_user("client"), make_user("employee")
    ids = [make_application(c, e) for _ in range(2)]
    login(make_user("admin"))
    resp = client.post("/applications/bulk-status", json={"ids": ids, "status": "Maybe"})
    assert resp.status_code == 400
    with app.app_context():
        assert {a.status for a in JobApplication.query.all()} == {"Applied"}


def test_bulk_status_respects_ownership(client, make_user, make_application, login):
    c = make_user("client")
    e1, e2 = make_user("employee"), make_user("employee")
    ids = [make_application(c, e1), make_application(c, e2)]
    login(e1)
    body = client.post("/applications/bulk-status", json={"ids": ids, "status": "Offer"}).get_json()
    assert (body["succeeded"], body["failed"]) == (1, 1)


def test_bulk_delete(app, client, make_user, make_application, login):
    c, e = make_user("client"), make_user("employee")
    ids = [make_application(c, e) for _ in range(3)]
    login(make_user("admin"))
    assert client.post("/applications/bulk-delete", json={"ids": []}).status_code == 400
    body = client.post("/applications/bulk-delete", json={"ids": ids[:2] + [ids[0]]}).get_json()
    assert (body["succeeded"], body["failed"]) == (2, 0)
    with app.app_context():
        assert JobApplication.query.count() == 1


def test_export_csv(client, make_user, make_application, login):
    c, e = make_user("client"), make_user("employee")
    make_application(c, e, job_title='Data "Wizard"', company="Hooli")
    login(make_user("admin"))
    resp = client.get("/applications/export")
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "attachment" in resp.headers["Content-Disposition"]
    rows = list(csv.reader(io.StringIO(resp.get_data(as_text=True))))
    assert rows[0][0] == "Date Applied"
    assert rows[1][2] == c.name
    assert rows[1][3] == 'Data "Wizard"'
    assert rows[1][11] == "No"


@pytest.mark.parametrize("role,status", [("admin", 200), ("employee", 200), ("client", 403)])
def test_client_dropdown(client, make_user, login, role, status):
    make_user("client", name="Active")
    make_user("client", name="Gone", is_active=False)
    login(make_user(role))
    resp = client.get("/clients")
    assert resp.status_code == status
    if status == 200:
        names = [c["name"] for c in resp.get_json()["clients"]]
        assert "Active" in names
        assert "Gone" not in names


@pytest.mark.parametrize("limit,expected", [("-5", 1), ("0", 10), ("500", 12)])
def test_list_limit_is_clamped(client, make_user, make_application, login, limit, expected):
    c, e = make_user("client"), make_user("employee")
    for i in range(12):
        make_application(c, e, days_ago=i)
    login(make_user("admin"))
    body = client.get("/applications", query_string={"limit": limit, "page": "-2"}).get_json()
    assert len(body["applications"]) == expected
    assert body["page"] == 1
