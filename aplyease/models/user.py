# aplyease/models/user.py
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin
from ..extensions import db

ROLES = ("admin", "client", "employee")


# ------- Core Models -------

class User(UserMixin, db.Model):
    __tablename__ = "user"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)

    password_hash = db.Column(db.String(255), nullable=False)

    # admin|client|employee
    role = db.Column(db.String(20), nullable=False, default="client", index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    # Quota of paid applications left (clients only)
    applications_remaining = db.Column(db.Integer, nullable=False, default=0)

    last_login_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client_profile = db.relationship(
        "ClientProfile",
        backref="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    # Deleting a user removes every application they own on either side
    client_applications = db.relationship(
        "JobApplication",
        foreign_keys="JobApplication.client_id",
        back_populates="client",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )
    employee_applications = db.relationship(
        "JobApplication",
        foreign_keys="JobApplication.employee_id",
        back_populates="employee",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.Index("ix_user_role_active", "role", "is_active"),
    )

    # --- Auth helpers ---
    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def mark_login(self):
        self.last_login_at = datetime.utcnow()

    # --- Convenience flags ---
    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_client(self) -> bool:
        return self.role == "client"

    @property
    def is_employee(self) -> bool:
        return self.role == "employee"

    @property
    def company(self):
        prof = self.client_profile
        return prof.company if prof else None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "company": self.company,
            "applicationsRemaining": self.applications_remaining or 0,
            "isActive": bool(self.is_active),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<User {self.id} {self.email} ({self.role})>"


class ClientProfile(db.Model):
    __tablename__ = "client_profile"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), unique=True, index=True, nullable=False)

    full_name = db.Column(db.String(160))
    phone = db.Column(db.String(50))
    company = db.Column(db.String(255))
    desired_titles = db.Column(db.Text)
    target_companies = db.Column(db.Text)
    linkedin_url = db.Column(db.String(255))
    work_authorization = db.Column(db.String(120))
    notes = db.Column(db.Text)

    # Billing, integer minor units (cents)
    amount_paid_cents = db.Column(db.Integer, nullable=False, default=0)
    amount_due_cents = db.Column(db.Integer, nullable=False, default=0)
    default_currency = db.Column(db.String(10), default="USD")

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "fullName": self.full_name,
            "phone": self.phone,
            "company": self.company,
            "desiredTitles": self.desired_titles,
            "targetCompanies": self.target_companies,
            "linkedinUrl": self.linkedin_url,
            "workAuthorization": self.work_authorization,
            "notes": self.notes,
            "amountPaid": self.amount_paid_cents or 0,
            "amountDue": self.amount_due_cents or 0,
            "currency": self.default_currency or "USD",
        }
