# aplyease/blueprints/admin/forms.py
from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, SelectField, IntegerField, BooleanField, TextAreaField
from wtforms.validators import DataRequired, Email, Length, Optional as Opt, NumberRange, URL

from ...models.user import ROLES
from ..auth.forms import PASSWORD_VALIDATORS

ROLE_CHOICES = [(r, r.title()) for r in ROLES]


class _ProfileFields(FlaskForm):
    company = StringField("Company", validators=[Opt(), Length(max=255)])
    fullName = StringField("Full name", validators=[Opt(), Length(max=160)])
    phone = StringField("Phone", validators=[Opt(), Length(max=50)])
    desiredTitles = TextAreaField("Desired titles", validators=[Opt(), Length(max=2000)])
    targetCompanies = TextAreaField("Target companies", validators=[Opt(), Length(max=2000)])
    linkedinUrl = StringField("LinkedIn", validators=[Opt(), URL(), Length(max=255)])
    workAuthorization = StringField("Work authorization", validators=[Opt(), Length(max=120)])
    notes = TextAreaField("Notes", validators=[Opt(), Length(max=5000)])


class UserCreateForm(_ProfileFields):
    name = StringField("Name", validators=[DataRequired(), Length(max=120)])
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=255)])
    password = PasswordField("Password", validators=PASSWORD_VALIDATORS)
    role = SelectField("Role", choices=ROLE_CHOICES, default="client")
    applicationsRemaining = IntegerField("Applications remaining", validators=[Opt(), NumberRange(min=0)])


class UserUpdateForm(_ProfileFields):
    name = StringField("Name", validators=[Opt(), Length(min=1, max=120)])
    email = StringField("Email", validators=[Opt(), Email(), Length(max=255)])
    password = PasswordField("Password", validators=[Opt()] + PASSWORD_VALIDATORS[1:])
    role = SelectField("Role", choices=ROLE_CHOICES, validators=[Opt()], validate_choice=False)
    isActive = BooleanField("Active")

    def validate_role(self, field):
        if field.raw_data and field.data not in ROLES:
            raise ValueError("Not a valid choice.")


class BillingForm(FlaskForm):
    applicationsRemaining = IntegerField("Applications remaining", validators=[Opt(), NumberRange(min=0)])
    amountPaid = IntegerField("Amount paid (cents)", validators=[Opt(), NumberRange(min=0)])
    amountDue = IntegerField("Amount due (cents)", validators=[Opt(), NumberRange(min=0)])
