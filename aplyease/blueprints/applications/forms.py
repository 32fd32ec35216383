# aplyease/blueprints/applications/forms.py
from __future__ import annotations

from flask_wtf import FlaskForm
from wtforms import StringField, IntegerField, BooleanField, DateField, SelectField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional as Opt, URL, NumberRange

from ...models.application import ApplicationStatus

STATUS_CHOICES = [(s, s) for s in ApplicationStatus.values()]

# Form field name -> model attribute
FIELD_MAP = {
    "clientId": "client_id",
    "employeeId": "employee_id",
    "dateApplied": "date_applied",
    "jobTitle": "job_title",
    "companyName": "company_name",
    "location": "location",
    "portalName": "portal_name",
    "jobLink": "job_link",
    "jobPage": "job_page",
    "resumeUrl": "resume_url",
    "additionalLink": "additional_link",
    "status": "status",
    "mailSent": "mail_sent",
    "notes": "notes",
}

# Columns that cannot be cleared by an update
REQUIRED_ATTRS = {"client_id", "employee_id", "date_applied", "job_title", "company_name", "status"}


def _link(label):
    return StringField(label, validators=[Opt(), URL(), Length(max=1024)])


class ApplicationForm(FlaskForm):
    clientId = IntegerField("Client", validators=[DataRequired(), NumberRange(min=1)])
    # Required for admin submissions; employees always submit as themselves
    employeeId = IntegerField("Employee", validators=[Opt(), NumberRange(min=1)])
    dateApplied = DateField("Date applied", validators=[Opt()])
    jobTitle = StringField("Job title", validators=[DataRequired(), Length(max=255)])
    companyName = StringField("Company", validators=[DataRequired(), Length(max=255)])
    location = StringField("Location", validators=[Opt(), Length(max=255)])
    portalName = StringField("Portal", validators=[Opt(), Length(max=120)])
    jobLink = _link("Job link")
    jobPage = _link("Job page")
    resumeUrl = _link("Resume")
    additionalLink = _link("Additional link")
    status = SelectField("Status", choices=STATUS_CHOICES, default=ApplicationStatus.APPLIED.value)
    mailSent = BooleanField("Mail sent")
    notes = TextAreaField("Notes", validators=[Opt(), Length(max=5000)])


class ApplicationUpdateForm(FlaskForm):
    """Every field optional; only keys present in the request body are applied."""
    clientId = IntegerField("Client", validators=[Opt(), NumberRange(min=1)])
    employeeId = IntegerField("Employee", validators=[Opt(), NumberRange(min=1)])
    dateApplied = DateField("Date applied", validators=[Opt()])
    jobTitle = StringField("Job title", validators=[Opt(), Length(min=1, max=255)])
    companyName = StringField("Company", validators=[Opt(), Length(min=1, max=255)])
    location = StringField("Location", validators=[Opt(), Length(max=255)])
    portalName = StringField("Portal", validators=[Opt(), Length(max=120)])
    jobLink = _link("Job link")
    jobPage = _link("Job page")
    resumeUrl = _link("Resume")
    additionalLink = _link("Additional link")
    status = SelectField("Status", choices=STATUS_CHOICES, validators=[Opt()], validate_choice=False)
    mailSent = BooleanField("Mail sent")
    notes = TextAreaField("Notes", validators=[Opt(), Length(max=5000)])

    def validate_status(self, field):
        if field.raw_data and field.data not in ApplicationStatus.values():
            raise ValueError("Not a valid choice.")

    def present_fields(self, payload: dict) -> dict:
        """Model attribute -> cleaned value, for keys the caller actually sent."""
        out = {}
        for name, attr in FIELD_MAP.items():
            if name in payload:
                value = getattr(self, name).data
                if isinstance(value, str):
                    value = value.strip() or None
                if value is None and attr in REQUIRED_ATTRS:
                    continue
                out[attr] = value
        return out
