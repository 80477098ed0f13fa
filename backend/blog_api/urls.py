from django.urls import include, path

from .views import health

urlpatterns = [
    # Admin accounts: register, login (JWT), current admin
    path("api/auth/", include("users.urls")),
    # Blog posts: public reader + author dashboard
    path("api/posts/", include("posts.urls")),
    path("api/health/", health, name="health"),
]
