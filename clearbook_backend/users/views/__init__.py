from .auth import LoginView
from .me import MeView
from .users import UserListCreateView

__all__ = [
    "LoginView",
    "MeView",
    "UserListCreateView",
]
