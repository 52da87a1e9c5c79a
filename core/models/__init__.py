from .profile import Role, UserProfile
