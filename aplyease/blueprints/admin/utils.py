# aplyease/blueprints/admin/utils.py
from ...models.user import ClientProfile

# Form field name -> ClientProfile attribute
PROFILE_FIELDS = {
    "company": "company",
    "fullName": "full_name",
    "phone": "phone",
    "desiredTitles": "desired_titles",
    "targetCompanies": "target_companies",
    "linkedinUrl": "linkedin_url",
    "workAuthorization": "work_authorization",
    "notes": "notes",
}


def ensure_profile(user) -> ClientProfile:
    if user.client_profile is None:
        user.client_profile = ClientProfile()
    return user.client_profile


def apply_profile(user, form, payload: dict) -> None:
    """Copy profile fields that were sent in ``payload`` onto the client's profile."""
    sent = [k for k in PROFILE_FIELDS if k in payload]
    if not sent:
        return
    prof = ensure_profile(user)
    for key in sent:
        value = getattr(form, key).data
        setattr(prof, PROFILE_FIELDS[key], (value or "").strip() or None)


def user_payload(user) -> dict:
    data = user.to_dict()
    if user.client_profile is not None:
        data["profile"] = user.client_profile.to_dict()
    return data
