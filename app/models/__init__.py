from .history import AnalysisHistory
from .profile import Profile
from .user import User

__all__ = [
    "AnalysisHistory",
    "Profile",
    "User",
]
