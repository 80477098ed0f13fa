from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import LoginView, registerUser, userProfile

urlpatterns = [
    path("register/", registerUser, name="register"),
    path("login/", LoginView.as_view(), name="login"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("me/", userProfile, name="me"),
]
