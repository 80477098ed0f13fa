from django.db import models
from django.conf import settings

from .publication import apply_publication_transition

User = settings.AUTH_USER_MODEL


class PostQuerySet(models.QuerySet):
    def published(self):
        """Public listing order: most recently first published, then newest id."""
        return self.filter(is_published=True).order_by("-published_at", "-id")

    def authored_by(self, user):
        return self.filter(author=user).order_by("-created_at", "-id")


class Post(models.Model):
    # PROTECT: an admin who still owns posts cannot be deleted, so the
    # author reference never changes after creation.
    author = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name="posts",
        editable=False,
    )

    title = models.CharField(max_length=200)
    introduction = models.CharField(max_length=2000)
    # Ordered list of {"heading", "content", "examples"}; written as one value.
    sections = models.JSONField(default=list, blank=True)

    # Publication state
    is_published = models.BooleanField(default=False)
    published_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PostQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Post"
        verbose_name_plural = "Posts"
        indexes = [
            models.Index(fields=["is_published", "-published_at"], name="posts_published_idx"),
        ]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        # A post saved as published always carries its first-publish time.
        apply_publication_transition(self, self.is_published)
        super().save(*args, **kwargs)
