from .user import User, ClientProfile
from .application import JobApplication, ApplicationStatus
