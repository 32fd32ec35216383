# aplyease/models/application.py
from datetime import datetime, date
from enum import Enum
from sqlalchemy.orm import validates
from ..exceptions import InvalidStatusError
from ..extensions import db


class ApplicationStatus(str, Enum):
    """Flat label for a job application; any value may follow any other."""
    APPLIED = "Applied"
    SCREENING = "Screening"
    INTERVIEW = "Interview"
    OFFER = "Offer"
    HIRED = "Hired"
    REJECTED = "Rejected"
    ON_HOLD = "On Hold"

    @classmethod
    def values(cls) -> list[str]:
        return [s.value for s in cls]

    @classmethod
    def parse(cls, raw) -> "ApplicationStatus":
        try:
            return cls(raw)
        except ValueError:
            raise InvalidStatusError(raw) from None


class JobApplication(db.Model):
    __tablename__ = "job_application"

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)

    date_applied = db.Column(db.Date, nullable=False, default=date.today, index=True)
    applied_by_name = db.Column(db.String(120), nullable=False)

    job_title = db.Column(db.String(255), nullable=False)
    company_name = db.Column(db.String(255), nullable=False)
    location = db.Column(db.String(255))
    portal_name = db.Column(db.String(120))
    job_link = db.Column(db.String(1024))
    job_page = db.Column(db.String(1024))
    resume_url = db.Column(db.String(1024))
    additional_link = db.Column(db.String(1024))

    status = db.Column(
        db.Enum(*ApplicationStatus.values(), name="application_status", native_enum=False,
                create_constraint=True, length=20),
        nullable=False,
        default=ApplicationStatus.APPLIED.value,
        index=True,
    )
    mail_sent = db.Column(db.Boolean, nullable=False, default=False)
    notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = db.relationship("User", foreign_keys=[client_id], back_populates="client_applications")
    employee = db.relationship("User", foreign_keys=[employee_id], back_populates="employee_applications")

    @validates("status")
    def _validate_status(self, key, value):
        return ApplicationStatus.parse(value).value

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "clientId": self.client_id,
            "employeeId": self.employee_id,
            "dateApplied": self.date_applied.isoformat() if self.date_applied else None,
            "appliedByName": self.applied_by_name,
            "jobTitle": self.job_title,
            "companyName": self.company_name,
            "location": self.location,
            "portalName": self.portal_name,
            "jobLink": self.job_link,
            "jobPage": self.job_page,
            "resumeUrl": self.resume_url,
            "additionalLink": self.additional_link,
            "status": self.status,
            "mailSent": bool(self.mail_sent),
            "notes": self.notes,
            "client": {"id": self.client.id, "name": self.client.name} if self.client else None,
            "employee": {"id": self.employee.id, "name": self.employee.name} if self.employee else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<JobApplication {self.id} - {self.job_title} at {self.company_name} [{self.status}]>"
