from django.urls import path
from .views import post_list_create, post_detail, my_posts

urlpatterns = [
    # ----------------------------------------------------------------------
    # Endpoint: /api/posts/
    # Methods: GET (List published posts, paged), POST (Create post - Admin only)
    path("", post_list_create, name="post-list-create"),
    # ----------------------------------------------------------------------
    # Endpoint: /api/posts/mine/
    # Methods: GET (All of the caller's posts, drafts included - Admin only)
    path("mine/", my_posts, name="post-mine"),
    # ----------------------------------------------------------------------
    # Endpoint: /api/posts/<int:pk>/
    # Methods: GET (Retrieve if visible), PUT/PATCH (Update - Author only), DELETE (Delete - Author only)
    path("<int:pk>/", post_detail, name="post-detail"),
    # ----------------------------------------------------------------------
]
