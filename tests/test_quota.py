from aplyease.extensions import db
from aplyease.models import User, JobApplication
from aplyease.services.applications import decrement_quota, record_application


def test_decrement_stops_at_zero(app, make_user):
    client = make_user("client", remaining=1)
    with app.app_context():
        assert decrement_quota(client.id) is True
        db.session.commit()
        assert decrement_quota(client.id) is False
        db.session.commit()
        assert db.session.get(User, client.id).applications_remaining == 0


def test_only_clients_have_quota(app, make_user):
    employee = make_user("employee", remaining=5)
    with app.app_context():
        assert decrement_quota(employee.id) is False


def test_record_application_takes_one_from_quota(app, make_user, utc_today):
    client = make_user("client", remaining=3)
    employee = make_user("employee")
    with app.app_context():
        app_row = JobApplication(client_id=client.id, employee_id=employee.id, applied_by_name=employee.name,
                                 date_applied=utc_today, job_title="Analyst", company_name="Initech")
        record_application(app_row)
        assert app_row.id is not None
        db.session.expire_all()
        assert db.session.get(User, client.id).applications_remaining == 2


def test_application_is_kept_when_quota_is_exhausted(app, make_user, utc_today):
    client = make_user("client", remaining=0)
    employee = make_user("employee")
    with app.app_context():
        record_application(JobApplication(client_id=client.id, employee_id=employee.id,
                                          applied_by_name=employee.name, date_applied=utc_today,
                                          job_title="Analyst", company_name="Initech"))
        db.session.expire_all()
        assert db.session.get(User, client.id).applications_remaining == 0
        assert JobApplication.query.filter_by(client_id=client.id).count() == 1
