from datetime import datetime, timedelta, timezone as dt_timezone

from django.test import SimpleTestCase

from .models import Post
from .permissions import ALLOWED, DenialReason, authorize_write
from .publication import (
    apply_publication_transition,
    is_visible_to,
    list_visible,
    paginate,
)

AUTHOR_ID = 1
OTHER_ID = 2

T1 = datetime(2024, 1, 1, 12, 0, tzinfo=dt_timezone.utc)
T2 = T1 + timedelta(days=3)


def make_post(pk=1, author_id=AUTHOR_ID, is_published=False, published_at=None):
    """An unsaved Post; nothing here touches the database."""
    return Post(
        id=pk,
        author_id=author_id,
        title=f"Post {pk}",
        introduction="Intro.",
        is_published=is_published,
        published_at=published_at,
    )


class VisibilityTests(SimpleTestCase):
    def test_author_sees_own_draft(self):
        self.assertTrue(is_visible_to(make_post(), AUTHOR_ID))

    def test_anonymous_does_not_see_draft(self):
        self.assertFalse(is_visible_to(make_post(), None))

    def test_other_admin_does_not_see_draft(self):
        self.assertFalse(is_visible_to(make_post(), OTHER_ID))

    def test_everyone_sees_published_post(self):
        post = make_post(is_published=True, published_at=T1)
        for caller_id in (None, AUTHOR_ID, OTHER_ID):
            self.assertTrue(is_visible_to(post, caller_id))

    def test_visible_iff_owner_or_published(self):
        for is_published in (False, True):
            post = make_post(is_published=is_published)
            for caller_id in (None, AUTHOR_ID, OTHER_ID):
                expected = caller_id == AUTHOR_ID or is_published
                self.assertEqual(is_visible_to(post, caller_id), expected)


class PublicationTransitionTests(SimpleTestCase):
    def test_first_publish_sets_published_at(self):
        post = apply_publication_transition(make_post(), True, now=T1)

        self.assertTrue(post.is_published)
        self.assertEqual(post.published_at, T1)

    def test_publish_defaults_to_current_time(self):
        post = apply_publication_transition(make_post(), True)
        self.assertIsNotNone(post.published_at)

    def test_unpublishing_a_draft_leaves_published_at_unset(self):
        post = apply_publication_transition(make_post(), False, now=T1)

        self.assertFalse(post.is_published)
        self.assertIsNone(post.published_at)

    def test_draft_publish_unpublish_republish(self):
        """Draft -> PublishedFirstTime -> Unpublished -> Republished."""
        post = make_post()

        apply_publication_transition(post, True, now=T1)
        self.assertEqual((post.is_published, post.published_at), (True, T1))

        apply_publication_transition(post, False, now=T2)
        self.assertEqual((post.is_published, post.published_at), (False, T1))

        apply_publication_transition(post, True, now=T2)
        self.assertEqual((post.is_published, post.published_at), (True, T1))

        apply_publication_transition(post, False, now=T2)
        self.assertEqual((post.is_published, post.published_at), (False, T1))

    def test_transition_is_idempotent(self):
        for requested in (False, True):
            once = apply_publication_transition(make_post(), requested, now=T1)
            twice = apply_publication_transition(
                apply_publication_transition(make_post(), requested, now=T1),
                requested,
                now=T2,
            )
            self.assertEqual(once.is_published, twice.is_published)
            self.assertEqual(once.published_at, twice.published_at)

    def test_returns_the_same_post(self):
        post = make_post()
        self.assertIs(apply_publication_transition(post, True, now=T1), post)


class ListVisibleTests(SimpleTestCase):
    def published_posts(self, count):
        return [
            make_post(pk=pk, is_published=True, published_at=T1 + timedelta(hours=pk))
            for pk in range(1, count + 1)
        ]

    def test_thirteen_posts_six_per_page(self):
        posts = self.published_posts(13)

        first = list_visible(posts, 1, 6)
        self.assertEqual(first.total_count, 13)
        self.assertEqual(first.total_pages, 3)
        self.assertEqual([post.pk for post in first.posts], [13, 12, 11, 10, 9, 8])

        self.assertEqual(len(list_visible(posts, 3, 6).posts), 1)

        beyond = list_visible(posts, 4, 6)
        self.assertEqual(beyond.posts, [])
        self.assertEqual(beyond.total_pages, 3)

    def test_drafts_are_filtered_out(self):
        posts = self.published_posts(2) + [make_post(pk=99)]

        result = list_visible(posts, 1, 10)

        self.assertEqual(result.total_count, 2)
        self.assertNotIn(99, [post.pk for post in result.posts])

    def test_unpublished_after_publishing_is_filtered_out(self):
        post = apply_publication_transition(make_post(pk=5), True, now=T1)
        apply_publication_transition(post, False)

        self.assertEqual(list_visible([post], 1, 10).total_count, 0)

    def test_equal_published_at_is_ordered_by_id(self):
        posts = [
            make_post(pk=pk, is_published=True, published_at=T1) for pk in (3, 7, 5)
        ]

        result = list_visible(posts, 1, 10)

        self.assertEqual([post.pk for post in result.posts], [7, 5, 3])

    def test_empty_listing_reports_one_page(self):
        result = list_visible([], 1, 6)

        self.assertEqual(result.total_count, 0)
        self.assertEqual(result.total_pages, 1)
        self.assertEqual(result.posts, [])

    def test_page_below_one_is_empty(self):
        self.assertEqual(list_visible(self.published_posts(3), 0, 2).posts, [])

    def test_paginate_keeps_given_order(self):
        result = paginate(["c", "a", "b"], 1, 2)

        self.assertEqual(result.posts, ["c", "a"])
        self.assertEqual(result.total_pages, 2)
        self.assertEqual(result.page, 1)


class AuthorizeWriteTests(SimpleTestCase):
    def test_anonymous_is_unauthenticated(self):
        for is_published in (False, True):
            decision = authorize_write(make_post(is_published=is_published), None)

            self.assertFalse(decision.allowed)
            self.assertIs(decision.reason, DenialReason.UNAUTHENTICATED)

    def test_other_admin_is_not_owner(self):
        for is_published in (False, True):
            decision = authorize_write(make_post(is_published=is_published), OTHER_ID)

            self.assertFalse(decision.allowed)
            self.assertIs(decision.reason, DenialReason.NOT_OWNER)

    def test_author_is_allowed(self):
        self.assertEqual(authorize_write(make_post(), AUTHOR_ID), ALLOWED)

    def test_allowed_iff_owner(self):
        post = make_post()
        for caller_id in (AUTHOR_ID, OTHER_ID, 3):
            self.assertEqual(
                authorize_write(post, caller_id).allowed, caller_id == AUTHOR_ID
            )
