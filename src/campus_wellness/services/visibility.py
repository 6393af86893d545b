"""Visibility filter deciding which posts an AccessContext may see."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TypeVar

from campus_wellness.models.post import POST_TYPE_ACTIVITY, VISIBILITY_MODERATORS
from campus_wellness.services.access import AccessContext

PostT = TypeVar("PostT")


def _department_of(post: object, departments: Mapping[str, int] | None) -> int | None:
    if departments is None:
        return getattr(post, "department_id", None)
    category = getattr(post, "category", None)
    if not isinstance(category, str):
        return None
    return departments.get(category.strip().lower())


def is_visible(
    post: object,
    ctx: AccessContext,
    departments: Mapping[str, int] | None = None,
) -> bool:
    """Return whether ``ctx`` may see ``post``.

    Rules are evaluated in order and the first match decides:

    1. Moderator-only posts are hidden from anyone who is neither admin nor
       moderator.
    2. Activity posts whose category names a department are hidden from heads
       of a different department, unless they are also admin.
    3. Everything else is visible.

    ``departments`` maps the lower-cased codes and names of active departments
    to their ids (see ``DepartmentRepository.category_index``); when given, the
    department is looked up from the post's category at call time. Without it
    the post's stored ``department_id`` is used.

    Attributes missing from ``post`` or ``ctx`` count as unset, so any object
    yields a boolean.
    """
    is_admin = bool(getattr(ctx, "is_admin", False))
    is_moderator = bool(getattr(ctx, "is_moderator", False))

    if getattr(post, "visibility", None) == VISIBILITY_MODERATORS and not (
        is_admin or is_moderator
    ):
        return False

    head_of = getattr(ctx, "department_head_of", None)
    if (
        getattr(post, "post_type", None) == POST_TYPE_ACTIVITY
        and head_of is not None
        and not is_admin
    ):
        post_department = _department_of(post, departments)
        if post_department is not None and getattr(head_of, "id", None) != post_department:
            return False

    return True


def filter_visible(
    posts: Iterable[PostT],
    ctx: AccessContext,
    departments: Mapping[str, int] | None = None,
) -> list[PostT]:
    """Return the posts from ``posts`` that ``ctx`` may see, order preserved."""
    return [post for post in posts if is_visible(post, ctx, departments)]
