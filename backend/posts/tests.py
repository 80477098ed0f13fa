from datetime import timedelta

from django.urls import reverse
from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings

# We use the APIClient for making requests to DRF views
from rest_framework.test import APIClient
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken

from .models import Post

# Get the custom user model dynamically
User = get_user_model()

# --- URL Name Definitions ---
POST_LIST_CREATE_URL = reverse("post-list-create")
POST_MINE_URL = reverse("post-mine")

# An id that no test ever creates
MISSING_POST_ID = 987654


# Helper function to generate URL for detail views (e.g., /api/posts/1/)
def post_detail_url(post_id):
    return reverse("post-detail", kwargs={"pk": post_id})


# --- Helper Functions for Test Setup ---


def create_admin(**params):
    """Create and return a new admin account."""
    return User.objects.create_user(**params)


def create_post(user, **params):
    """Create and return a new post, setting required fields if missing."""
    defaults = {
        "title": "Default Test Post Title",
        "introduction": "Default introduction.",
        "sections": [
            {
                "heading": "First",
                "content": "First section.",
                "examples": ["one", "two"],
            },
        ],
        "is_published": True,
    }
    defaults.update(params)
    return Post.objects.create(author=user, **defaults)


def bearer(user):
    return f"Bearer {RefreshToken.for_user(user).access_token}"


# ----------------------------------------------------------------------
# A. Public Post API Tests (anonymous readers)
# ----------------------------------------------------------------------


class PublicPostAPITests(TestCase):
    """Test anonymous access to post endpoints."""

    def setUp(self):
        self.client = APIClient()
        self.author = create_admin(email="author@test.com", password="pa55-Word-123")
        self.published_post = create_post(
            self.author, title="Published Post", is_published=True
        )
        self.unpublished_post = create_post(
            self.author, title="Unpublished Post", is_published=False
        )

    # --- LIST VIEW (/api/posts/) ---

    def test_list_returns_only_published_posts(self):
        """Test GET /api/posts/ lists published posts only."""
        res = self.client.get(POST_LIST_CREATE_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total"], 1)
        self.assertEqual(len(res.data["results"]), 1)
        self.assertEqual(res.data["results"][0]["title"], self.published_post.title)

    def test_list_omits_sections(self):
        """Test list entries leave out the sections body."""
        res = self.client.get(POST_LIST_CREATE_URL)

        self.assertNotIn("sections", res.data["results"][0])
        self.assertEqual(res.data["results"][0]["author"]["email"], "author@test.com")

    # --- DETAIL VIEW (/api/posts/<pk>/) ---

    def test_retrieve_published_post_detail_success(self):
        """Test GET /api/posts/<pk>/ returns a published post with its sections."""
        res = self.client.get(post_detail_url(self.published_post.id))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["sections"][0]["examples"], ["one", "two"])

    def test_retrieve_unpublished_post_detail_404(self):
        """Test GET /api/posts/<pk>/ returns 404 for unpublished posts."""
        res = self.client.get(post_detail_url(self.unpublished_post.id))

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_unpublished_post_indistinguishable_from_missing(self):
        """Test a hidden post answers exactly like an id that does not exist."""
        hidden = self.client.get(post_detail_url(self.unpublished_post.id))
        missing = self.client.get(post_detail_url(MISSING_POST_ID))

        self.assertEqual(hidden.status_code, missing.status_code)
        self.assertEqual(hidden.content, missing.content)

    # --- WRITE OPERATIONS (UNAUTHENTICATED) ---

    def test_create_requires_authentication(self):
        """Test POST /api/posts/ answers 401 to anonymous callers."""
        res = self.client.post(POST_LIST_CREATE_URL, {"title": "Attempt"})
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_update_requires_authentication(self):
        """Test PATCH by an anonymous caller is rejected and changes nothing."""
        res = self.client.patch(
            post_detail_url(self.unpublished_post.id), {"is_published": True}
        )

        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)
        self.unpublished_post.refresh_from_db()
        self.assertFalse(self.unpublished_post.is_published)

    def test_delete_requires_authentication(self):
        res = self.client.delete(post_detail_url(self.published_post.id))

        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertTrue(Post.objects.filter(pk=self.published_post.id).exists())

    def test_my_posts_requires_authentication(self):
        res = self.client.get(POST_MINE_URL)
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    # --- BEARER TOKENS ---

    def test_invalid_token_reads_as_anonymous(self):
        """Test a garbage bearer token does not break public reads."""
        self.client.credentials(HTTP_AUTHORIZATION="Bearer not-a-real-token")

        res = self.client.get(POST_LIST_CREATE_URL)
        self.assertEqual(res.status_code, status.HTTP_200_OK)

        res = self.client.get(post_detail_url(self.unpublished_post.id))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_invalid_token_cannot_write(self):
        """Test a garbage bearer token counts as unauthenticated for writes."""
        self.client.credentials(HTTP_AUTHORIZATION="Bearer not-a-real-token")
        res = self.client.delete(post_detail_url(self.published_post.id))

        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_valid_token_lets_author_see_draft(self):
        """Test the author's real access token unlocks their unpublished post."""
        self.client.credentials(HTTP_AUTHORIZATION=bearer(self.author))
        res = self.client.get(post_detail_url(self.unpublished_post.id))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["title"], "Unpublished Post")


# ----------------------------------------------------------------------
# B. Author Post API Tests (write access by the owner)
# ----------------------------------------------------------------------


class AuthorPostAPITests(TestCase):
    """Test create/update/publish/delete by the post's author."""

    def setUp(self):
        self.client = APIClient()
        self.author = create_admin(email="author@test.com", password="pa55-Word-123")
        self.client.force_authenticate(user=self.author)

        self.post = create_post(self.author, title="Author Draft", is_published=False)
        self.payload = {
            "title": "New Post Title",
            "introduction": "A short introduction.",
            "sections": [
                {"heading": "Setup", "content": "Install it.", "examples": ["pip"]},
                {"heading": "Usage", "content": "", "examples": []},
            ],
            "is_published": False,
        }

    # --- READ ACCESS (GET) ---

    def test_author_retrieves_own_unpublished_post(self):
        res = self.client.get(post_detail_url(self.post.id))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertFalse(res.data["is_published"])
        self.assertIsNone(res.data["published_at"])

    def test_my_posts_includes_drafts(self):
        published = create_post(self.author, title="Live One", is_published=True)

        res = self.client.get(POST_MINE_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        ids = [item["id"] for item in res.data["results"]]
        self.assertCountEqual(ids, [self.post.id, published.id])

    # --- CREATE (POST) ---

    def test_create_draft_post(self):
        """Test POST /api/posts/ creates a draft owned by the caller."""
        res = self.client.post(POST_LIST_CREATE_URL, self.payload)

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        post = Post.objects.get(title=self.payload["title"])
        self.assertEqual(post.author, self.author)
        self.assertFalse(post.is_published)
        self.assertIsNone(post.published_at)
        self.assertEqual([s["heading"] for s in post.sections], ["Setup", "Usage"])

    def test_create_published_post_sets_published_at(self):
        payload = dict(self.payload, is_published=True)
        res = self.client.post(POST_LIST_CREATE_URL, payload)

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        post = Post.objects.get(title=payload["title"])
        self.assertTrue(post.is_published)
        self.assertIsNotNone(post.published_at)
        self.assertIsNotNone(res.data["post"]["published_at"])

    def test_create_ignores_author_and_published_at_in_payload(self):
        other = create_admin(email="other@test.com", password="pa55-Word-123")
        payload = dict(
            self.payload,
            author=other.id,
            published_at="2001-01-01T00:00:00Z",
        )
        res = self.client.post(POST_LIST_CREATE_URL, payload)

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        post = Post.objects.get(title=payload["title"])
        self.assertEqual(post.author, self.author)
        self.assertIsNone(post.published_at)

    def test_create_rejects_missing_title(self):
        payload = dict(self.payload)
        del payload["title"]

        res = self.client.post(POST_LIST_CREATE_URL, payload)

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("title", res.data)

    def test_create_rejects_blank_section_heading(self):
        payload = dict(
            self.payload,
            sections=[{"heading": "", "content": "x", "examples": []}],
        )
        res = self.client.post(POST_LIST_CREATE_URL, payload)

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("sections", res.data)

    def test_create_rejects_overlong_title(self):
        payload = dict(self.payload, title="x" * 201)
        res = self.client.post(POST_LIST_CREATE_URL, payload)

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_keeps_blank_examples_in_order(self):
        """Test an empty example string is accepted, as the dashboard form sends one."""
        payload = dict(
            self.payload,
            sections=[{"heading": "H", "content": "c", "examples": ["", "x"]}],
        )
        res = self.client.post(POST_LIST_CREATE_URL, payload)

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["post"]["sections"][0]["examples"], ["", "x"])
        post = Post.objects.get(title=payload["title"])
        self.assertEqual(post.sections[0]["examples"], ["", "x"])

    def test_create_accepts_long_section_heading(self):
        payload = dict(
            self.payload,
            sections=[{"heading": "h" * 500, "content": "c", "examples": []}],
        )
        res = self.client.post(POST_LIST_CREATE_URL, payload)

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)

    # --- UPDATE (PUT/PATCH) ---

    def test_full_update_post_PUT_success(self):
        """Test PUT /api/posts/<pk>/ replaces title, introduction and sections."""
        res = self.client.put(post_detail_url(self.post.id), self.payload)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.post.refresh_from_db()
        self.assertEqual(self.post.title, self.payload["title"])
        self.assertEqual(len(self.post.sections), 2)
        self.assertEqual(self.post.sections[1]["heading"], "Usage")

    def test_sections_are_replaced_not_merged(self):
        """Test PATCH with a shorter sections list drops the old entries."""
        self.client.put(post_detail_url(self.post.id), self.payload)
        res = self.client.patch(
            post_detail_url(self.post.id),
            {"sections": [{"heading": "Only", "content": "Left."}]},
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.post.refresh_from_db()
        self.assertEqual(
            self.post.sections,
            [{"heading": "Only", "content": "Left.", "examples": []}],
        )

    def test_publish_unpublish_republish_keeps_first_published_at(self):
        """Test published_at is set on the first publish and then never moves."""
        url = post_detail_url(self.post.id)

        self.client.patch(url, {"is_published": True})
        self.post.refresh_from_db()
        first_published_at = self.post.published_at
        self.assertTrue(self.post.is_published)
        self.assertIsNotNone(first_published_at)

        self.client.patch(url, {"is_published": False})
        self.post.refresh_from_db()
        self.assertFalse(self.post.is_published)
        self.assertEqual(self.post.published_at, first_published_at)

        self.client.patch(url, {"is_published": True})
        self.post.refresh_from_db()
        self.assertTrue(self.post.is_published)
        self.assertEqual(self.post.published_at, first_published_at)

    def test_unpublished_post_leaves_public_listing(self):
        live = create_post(self.author, title="Live", is_published=True)
        self.client.patch(post_detail_url(live.id), {"is_published": False})

        self.client.force_authenticate(user=None)
        res = self.client.get(POST_LIST_CREATE_URL)
        self.assertEqual(res.data["total"], 0)

        res = self.client.get(post_detail_url(live.id))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_ignores_author_in_payload(self):
        """Test neither PATCH nor PUT can hand the post to another admin."""
        other = create_admin(email="other@test.com", password="pa55-Word-123")
        url = post_detail_url(self.post.id)

        res = self.client.patch(url, {"author": other.id, "title": "Patched"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.post.refresh_from_db()
        self.assertEqual(self.post.author_id, self.author.id)
        self.assertEqual(self.post.title, "Patched")

        res = self.client.put(url, dict(self.payload, author=other.id))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.post.refresh_from_db()
        self.assertEqual(self.post.author_id, self.author.id)
        self.assertEqual(res.data["post"]["author"]["id"], self.author.id)

    def test_put_requires_sections(self):
        """Test PUT without sections is rejected and leaves the stored list alone."""
        payload = dict(self.payload)
        del payload["sections"]

        res = self.client.put(post_detail_url(self.post.id), payload)

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("sections", res.data)
        self.post.refresh_from_db()
        self.assertEqual(self.post.title, "Author Draft")
        self.assertEqual(self.post.sections[0]["heading"], "First")

    def test_put_with_empty_sections_clears_them(self):
        res = self.client.put(post_detail_url(self.post.id), dict(self.payload, sections=[]))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.post.refresh_from_db()
        self.assertEqual(self.post.sections, [])

    def test_update_missing_post_404(self):
        res = self.client.patch(post_detail_url(MISSING_POST_ID), {"title": "Nope"})
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    # --- DELETE ---

    def test_delete_post_success(self):
        """Test DELETE /api/posts/<pk>/ removes the post for good."""
        res = self.client.delete(post_detail_url(self.post.id))

        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Post.objects.filter(pk=self.post.id).exists())

    def test_delete_published_post_success(self):
        live = create_post(self.author, title="Live", is_published=True)
        res = self.client.delete(post_detail_url(live.id))

        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Post.objects.filter(pk=live.id).exists())


# ----------------------------------------------------------------------
# C. Non-owner Tests (admin B against admin A's posts)
# ----------------------------------------------------------------------


class NonOwnerPostAPITests(TestCase):
    """Test that another admin can neither see drafts nor write."""

    def setUp(self):
        self.client = APIClient()
        self.admin_a = create_admin(email="a@test.com", password="pa55-Word-123")
        self.admin_b = create_admin(email="b@test.com", password="pa55-Word-123")
        self.draft = create_post(self.admin_a, title="A Draft", is_published=False)
        self.live = create_post(self.admin_a, title="A Live", is_published=True)
        self.client.force_authenticate(user=self.admin_b)

    def test_non_owner_cannot_see_draft(self):
        """Test a foreign draft looks missing, not forbidden."""
        hidden = self.client.get(post_detail_url(self.draft.id))
        missing = self.client.get(post_detail_url(MISSING_POST_ID))

        self.assertEqual(hidden.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(hidden.content, missing.content)

    def test_non_owner_sees_published_post(self):
        res = self.client.get(post_detail_url(self.live.id))
        self.assertEqual(res.status_code, status.HTTP_200_OK)

    def test_non_owner_update_forbidden_for_draft_and_published(self):
        for post in (self.draft, self.live):
            res = self.client.patch(post_detail_url(post.id), {"title": "Hijacked"})

            self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
            self.assertEqual(res.data["detail"].code, "not_owner")
            post.refresh_from_db()
            self.assertNotEqual(post.title, "Hijacked")

    def test_non_owner_cannot_toggle_publication(self):
        res = self.client.patch(post_detail_url(self.draft.id), {"is_published": True})

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.draft.refresh_from_db()
        self.assertFalse(self.draft.is_published)
        self.assertIsNone(self.draft.published_at)

    def test_non_owner_delete_forbidden(self):
        res = self.client.delete(post_detail_url(self.live.id))

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Post.objects.filter(pk=self.live.id).exists())

    def test_my_posts_only_lists_own_posts(self):
        own = create_post(self.admin_b, title="B Draft", is_published=False)

        res = self.client.get(POST_MINE_URL)

        self.assertEqual([item["id"] for item in res.data["results"]], [own.id])


# ----------------------------------------------------------------------
# D. Pagination Tests (/api/posts/?page=&limit=)
# ----------------------------------------------------------------------


class PostPaginationAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.author = create_admin(email="author@test.com", password="pa55-Word-123")

    def create_published(self, count):
        posts = [
            create_post(self.author, title=f"Post {index}", is_published=True)
            for index in range(count)
        ]
        # Spread first-publish times out: Post 0 is the oldest.
        base = posts[0].published_at
        for index, post in enumerate(posts):
            Post.objects.filter(pk=post.pk).update(
                published_at=base + timedelta(minutes=index)
            )
        return posts

    def test_thirteen_posts_six_per_page(self):
        self.create_published(13)
        create_post(self.author, title="Hidden", is_published=False)

        res = self.client.get(POST_LIST_CREATE_URL, {"page": 1, "limit": 6})
        self.assertEqual(res.data["total"], 13)
        self.assertEqual(res.data["pages"], 3)
        self.assertEqual(res.data["count"], 6)
        self.assertEqual(res.data["results"][0]["title"], "Post 12")

        res = self.client.get(POST_LIST_CREATE_URL, {"page": 3, "limit": 6})
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["title"], "Post 0")

        res = self.client.get(POST_LIST_CREATE_URL, {"page": 4, "limit": 6})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 0)
        self.assertEqual(res.data["results"], [])
        self.assertEqual(res.data["current_page"], 4)

    def test_empty_listing_reports_one_page(self):
        res = self.client.get(POST_LIST_CREATE_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total"], 0)
        self.assertEqual(res.data["pages"], 1)

    def test_republish_keeps_original_position(self):
        """Test a republished post is ordered by its first publish time."""
        posts = self.create_published(3)
        oldest = posts[0]
        self.client.force_authenticate(user=self.author)
        self.client.patch(post_detail_url(oldest.id), {"is_published": False})
        self.client.patch(post_detail_url(oldest.id), {"is_published": True})

        res = self.client.get(POST_LIST_CREATE_URL)
        self.assertEqual(res.data["results"][-1]["id"], oldest.id)

    def test_junk_query_params_fall_back_to_defaults(self):
        self.create_published(2)

        res = self.client.get(POST_LIST_CREATE_URL, {"page": "abc", "limit": "-3"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["current_page"], 1)
        self.assertEqual(res.data["count"], 2)

    @override_settings(BLOG_MAX_PAGE_SIZE=5)
    def test_limit_is_capped(self):
        self.create_published(7)

        res = self.client.get(POST_LIST_CREATE_URL, {"limit": 50})

        self.assertEqual(res.data["count"], 5)
        self.assertEqual(res.data["pages"], 2)
