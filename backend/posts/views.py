import logging

from django.conf import settings
from django.shortcuts import get_object_or_404
from rest_framework.exceptions import NotFound
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from blog_api.authentication import caller_identity
from .models import Post
from .permissions import IsAdminOrReadOnly, enforce_write
from .publication import is_visible_to, paginate
from .serializers import (
    PostListSerializer,
    PostDetailSerializer,
    PostWriteSerializer,
)

logger = logging.getLogger(__name__)


def _positive_int(raw, default):
    """Parses a query parameter, falling back to ``default`` for junk."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


# ---  Post Views ---


@api_view(["GET", "POST"])
@permission_classes([IsAdminOrReadOnly])
def post_list_create(request):
    """
    GET: List published posts, one page at a time (public).
    POST: Create a new post authored by the caller (admin only).
    """
    if request.method == "GET":
        page = _positive_int(request.query_params.get("page"), 1)
        page_size = min(
            _positive_int(request.query_params.get("limit"), settings.BLOG_PAGE_SIZE),
            settings.BLOG_MAX_PAGE_SIZE,
        )

        queryset = Post.objects.published().select_related("author")
        result = paginate(queryset, page, page_size)

        serializer = PostListSerializer(result.posts, many=True)
        return Response(
            {
                "count": len(result.posts),
                "total": result.total_count,
                "pages": result.total_pages,
                "current_page": result.page,
                "results": serializer.data,
            }
        )

    elif request.method == "POST":
        serializer = PostWriteSerializer(data=request.data)

        if serializer.is_valid():
            post = serializer.save(author=request.user)
            logger.info(
                "Post %s created by admin %s (published=%s)",
                post.pk,
                request.user.pk,
                post.is_published,
            )
            return Response(
                {
                    "message": "Post created successfully.",
                    "post": PostDetailSerializer(post).data,
                },
                status=status.HTTP_201_CREATED,
            )

        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def my_posts(request):
    """
    GET: Every post written by the caller, drafts included (author dashboard).
    """
    queryset = Post.objects.authored_by(request.user).select_related("author")
    serializer = PostDetailSerializer(queryset, many=True)
    return Response({"count": len(serializer.data), "results": serializer.data})


@api_view(["GET", "PUT", "PATCH", "DELETE"])
@permission_classes([IsAdminOrReadOnly])  # Anonymous callers stop here for writes
def post_detail(request, pk):
    """
    GET: Retrieve a post (published, or the caller's own).
    PUT/PATCH/DELETE: Update/Delete a post (its author only).
    """
    caller_id = caller_identity(request)

    # --- GET (Retrieve) ---
    if request.method == "GET":
        post = Post.objects.select_related("author").filter(pk=pk).first()

        # Hidden posts get the very same 404 as ids that do not exist.
        if post is None or not is_visible_to(post, caller_id):
            raise NotFound()

        serializer = PostDetailSerializer(post)
        return Response(serializer.data)

    # --- PUT/PATCH/DELETE (Author Only) ---
    # Ownership is checked against the post as loaded for this request.
    post = get_object_or_404(Post, pk=pk)
    enforce_write(post, caller_id)

    if request.method in ["PUT", "PATCH"]:
        partial = request.method == "PATCH"
        write_serializer = PostWriteSerializer(post, data=request.data, partial=partial)

        if write_serializer.is_valid():
            post = write_serializer.save()
            logger.info(
                "Post %s updated by admin %s (published=%s)",
                post.pk,
                caller_id,
                post.is_published,
            )
            return Response(
                {
                    "message": "Post updated successfully.",
                    "post": PostDetailSerializer(post).data,
                },
                status=status.HTTP_200_OK,
            )

        return Response(write_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    elif request.method == "DELETE":
        post.delete()
        logger.info("Post %s deleted by admin %s", pk, caller_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
