from django.urls import reverse
from django.contrib.auth import get_user_model
from django.db.models import ProtectedError
from django.test import TestCase

from rest_framework.test import APIClient
from rest_framework import status

from posts.models import Post

User = get_user_model()

REGISTER_URL = reverse("register")
LOGIN_URL = reverse("login")
ME_URL = reverse("me")

PASSWORD = "correct-Horse-42"


class RegisterAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_register_admin_success(self):
        """Test POST /api/auth/register/ creates an admin and returns a token."""
        res = self.client.post(
            REGISTER_URL, {"email": "new@test.com", "password": PASSWORD}
        )

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertIn("token", res.data)
        self.assertNotIn("password", res.data)
        user = User.objects.get(email="new@test.com")
        self.assertTrue(user.check_password(PASSWORD))

    def test_register_duplicate_email_rejected(self):
        User.objects.create_user(email="dup@test.com", password=PASSWORD)

        res = self.client.post(REGISTER_URL, {"email": "dup@test.com", "password": PASSWORD})

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", res.data)

    def test_register_weak_password_rejected(self):
        res = self.client.post(REGISTER_URL, {"email": "weak@test.com", "password": "123"})

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password", res.data)
        self.assertFalse(User.objects.filter(email="weak@test.com").exists())

    def test_registration_token_authenticates(self):
        res = self.client.post(
            REGISTER_URL, {"email": "token@test.com", "password": PASSWORD}
        )

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {res.data['token']}")
        me = self.client.get(ME_URL)

        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data["email"], "token@test.com")


class LoginAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@test.com", password=PASSWORD)

    def test_login_success(self):
        """Test POST /api/auth/login/ returns a token pair and the admin."""
        res = self.client.post(LOGIN_URL, {"email": "admin@test.com", "password": PASSWORD})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertIn("access", res.data)
        self.assertIn("refresh", res.data)
        self.assertEqual(res.data["admin"], {"id": self.admin.id, "email": "admin@test.com"})

    def test_login_wrong_password(self):
        res = self.client.post(LOGIN_URL, {"email": "admin@test.com", "password": "nope"})
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_login_unknown_email(self):
        res = self.client.post(LOGIN_URL, {"email": "ghost@test.com", "password": PASSWORD})
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_access_token_identifies_admin(self):
        login = self.client.post(LOGIN_URL, {"email": "admin@test.com", "password": PASSWORD})
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")

        res = self.client.get(ME_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["id"], self.admin.id)


class ProfileAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_me_requires_authentication(self):
        res = self.client.get(ME_URL)
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_with_invalid_token(self):
        """Test an invalid token is treated the same as no token."""
        self.client.credentials(HTTP_AUTHORIZATION="Bearer not-a-real-token")
        res = self.client.get(ME_URL)
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_with_inactive_admin_token(self):
        admin = User.objects.create_user(email="gone@test.com", password=PASSWORD)
        login = self.client.post(LOGIN_URL, {"email": "gone@test.com", "password": PASSWORD})
        admin.is_active = False
        admin.save()

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")
        res = self.client.get(ME_URL)

        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)


class AdminModelTests(TestCase):
    def test_create_user_requires_email(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email="", password=PASSWORD)

    def test_email_is_normalized(self):
        user = User.objects.create_user(email="Someone@EXAMPLE.com", password=PASSWORD)
        self.assertEqual(user.email, "Someone@example.com")

    def test_admin_with_posts_cannot_be_deleted(self):
        """Test the author reference of a post can never be cleared."""
        user = User.objects.create_user(email="author@test.com", password=PASSWORD)
        Post.objects.create(author=user, title="Kept", introduction="Intro.")

        with self.assertRaises(ProtectedError):
            user.delete()
