from django.db import models
from django.contrib.auth.models import (
    AbstractBaseUser,
    PermissionsMixin,
    BaseUserManager,
)


class UserManager(BaseUserManager):
    """Admin accounts are keyed by email; there is no username."""

    def create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("An admin needs an email address")

        admin = self.model(email=self.normalize_email(email), **extra_fields)
        admin.set_password(password)
        admin.save(using=self._db)
        return admin


class User(AbstractBaseUser, PermissionsMixin):
    """
    A blog admin. Every account may write posts; the id of the account is
    the caller identity compared against a post's author.
    """

    email = models.EmailField(unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    is_active = models.BooleanField(default=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = "admin"
        verbose_name_plural = "admins"

    def __str__(self):
        return self.email
