# users/urls.py

from django.urls import path

from .views import LoginView, MeView, UserListCreateView

app_name = "users"

urlpatterns = [
    # ---------------- PUBLIC AUTH ----------------
    path("login/", LoginView.as_view(), name="login"),
    # ---------------- AUTHENTICATED ----------------
    path("me/", MeView.as_view(), name="me"),
    path("users/", UserListCreateView.as_view(), name="users"),
]
