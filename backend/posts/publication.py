"""
Publication state of a blog post and who may see it.

These helpers work on Post instances that are already in memory: they never
query or save anything themselves. Views load the posts, call in here, and
persist the result.

A post moves through these states over its lifetime::

    Draft --publish--> PublishedFirstTime --unpublish--> Unpublished
    Unpublished --publish--> Republished --unpublish--> Unpublished

``published_at`` is written on the first publish only and is kept through
every later unpublish/republish. It answers "first published at", not
"currently published since".
"""

from collections import namedtuple

from django.core.paginator import EmptyPage, Paginator
from django.utils import timezone

VisiblePage = namedtuple("VisiblePage", ["posts", "total_count", "total_pages", "page"])


def is_visible_to(post, caller_id):
    """
    True if the caller may receive this post in a read response.

    Authors always see their own posts. Everyone else, anonymous or not,
    only sees published posts. Views must answer a False here exactly like
    a missing id so unpublished drafts are never revealed.
    """
    if caller_id is not None and caller_id == post.author_id:
        return True
    return bool(post.is_published)


def apply_publication_transition(post, requested_is_published, now=None):
    """
    Sets ``post.is_published`` and stamps ``published_at`` on first publish.

    Unpublishing leaves ``published_at`` alone. Applying the same value twice
    changes nothing the second time. Returns the same (mutated) post.
    """
    post.is_published = bool(requested_is_published)
    if post.is_published and post.published_at is None:
        post.published_at = now or timezone.now()
    return post


def _recency_key(post):
    # Newest first publish first; equal timestamps fall back to the id.
    return (post.published_at is not None, post.published_at, post.pk)


def paginate(items, page, page_size):
    """
    Returns one 1-indexed page of an already filtered and ordered sequence.

    ``items`` may be a list or an ordered QuerySet. ``page_size`` must be a
    positive integer. Pages outside ``1..total_pages`` come back empty.
    ``total_pages`` is at least 1, even when there is nothing to show.
    """
    # allow_empty_first_page keeps num_pages at 1 for an empty listing
    paginator = Paginator(items, page_size, allow_empty_first_page=True)
    try:
        posts = list(paginator.page(page).object_list)
    except EmptyPage:
        posts = []
    return VisiblePage(posts, paginator.count, paginator.num_pages, page)


def list_visible(posts, page, page_size):
    """
    Public listing over in-memory posts: published only, most recently
    first published first, then paged.

    ``Post.objects.published()`` applies the same filter and ordering in the
    database; pass its result straight to ``paginate``.
    """
    visible = sorted(
        (post for post in posts if post.is_published),
        key=_recency_key,
        reverse=True,
    )
    return paginate(visible, page, page_size)
