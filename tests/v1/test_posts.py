# tests/v1/test_posts.py
"""Tests for post, comment and activity endpoints."""

from datetime import timedelta

from fastapi import status

from campus_wellness.db.time import utcnow

from ..conftest import OTHER_ID, STUDENT_ID


def test_create_concern(client, student_headers) -> None:
    response = client.post(
        "/api/v1/posts/",
        json={"content": "Dorm wifi drops every night", "category": "facilities"},
        headers=student_headers,
    )

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["author_id"] == STUDENT_ID
    assert body["author_name"] == "Sam Student"
    assert body["post_type"] == "concern"
    assert body["upvotes"] == 0 and body["downvotes"] == 0
    assert body["my_vote"] is None


def test_create_post_requires_auth(client) -> None:
    response = client.post("/api/v1/posts/", json={"content": "x", "category": "y"})
    assert response.status_code in {status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN}


def test_activity_fields_on_a_concern_are_rejected(client, student_headers) -> None:
    response = client.post(
        "/api/v1/posts/",
        json={"content": "Run club", "category": "sports", "location": "Track"},
        headers=student_headers,
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_activity_without_date_is_rejected(client, student_headers) -> None:
    response = client.post(
        "/api/v1/posts/",
        json={"content": "Run club", "category": "sports", "post_type": "activity"},
        headers=student_headers,
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert "activity_date" in response.json()["errors"]


def test_member_cannot_post_to_moderators(client, student_headers) -> None:
    response = client.post(
        "/api/v1/posts/",
        json={"content": "psst", "category": "general", "visibility": "moderators"},
        headers=student_headers,
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_listing_hides_moderator_posts_from_members(
    client, student_headers, moderator_headers, make_post
) -> None:
    public = make_post()
    hidden = make_post(visibility="moderators")

    member_ids = [p["id"] for p in client.get("/api/v1/posts/", headers=student_headers).json()]
    mod_ids = [p["id"] for p in client.get("/api/v1/posts/", headers=moderator_headers).json()]

    assert member_ids == [public.id]
    assert mod_ids == [hidden.id, public.id]
    response = client.get(f"/api/v1/posts/{hidden.id}", headers=student_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_department_activity_hidden_from_other_heads(
    client, auth_headers, department, other_department, make_post
) -> None:
    activity = make_post(post_type="activity", category="CSE", department_id=department.id)
    me_head = auth_headers("head-2", "head.me@campus.edu")
    cse_head = auth_headers("head-1", "head.cse@campus.edu")

    assert client.get(f"/api/v1/posts/{activity.id}", headers=me_head).status_code == 404
    assert client.get(f"/api/v1/posts/{activity.id}", headers=cse_head).status_code == 200


def test_anonymous_post_hides_author(client, student_headers, other_headers) -> None:
    created = client.post(
        "/api/v1/posts/",
        json={"content": "Struggling lately", "category": "mental-health", "is_anonymous": True},
        headers=student_headers,
    ).json()

    seen = client.get(f"/api/v1/posts/{created['id']}", headers=other_headers).json()

    assert seen["author_id"] is None
    assert seen["author_name"] is None


def test_delete_own_post(client, student_headers, make_post) -> None:
    post = make_post(author_id=STUDENT_ID)

    response = client.delete(f"/api/v1/posts/{post.id}", headers=student_headers)

    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert client.get(f"/api/v1/posts/{post.id}", headers=student_headers).status_code == 404


def test_cannot_delete_others_post(client, student_headers, test_post) -> None:
    response = client.delete(f"/api/v1/posts/{test_post.id}", headers=student_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_comments(client, student_headers, other_headers, test_post) -> None:
    response = client.post(
        f"/api/v1/posts/{test_post.id}/comments",
        json={"content": "Agreed, it is a problem"},
        headers=student_headers,
    )
    assert response.status_code == status.HTTP_201_CREATED

    comments = client.get(f"/api/v1/posts/{test_post.id}/comments", headers=other_headers).json()
    assert [c["content"] for c in comments] == ["Agreed, it is a problem"]
    assert comments[0]["author_id"] == STUDENT_ID


def test_join_leave_and_capacity(client, auth_headers, make_post) -> None:
    activity = make_post(post_type="activity", category="sports", max_participants=1)
    first = auth_headers("p-1", "p1@campus.edu", name="Pat")
    second = auth_headers("p-2", "p2@campus.edu")

    joined = client.post(f"/api/v1/posts/{activity.id}/join", headers=first)
    assert joined.status_code == status.HTTP_200_OK
    assert joined.json()["participant_count"] == 1

    full = client.post(f"/api/v1/posts/{activity.id}/join", headers=second)
    assert full.status_code == status.HTTP_409_CONFLICT

    participants = client.get(f"/api/v1/posts/{activity.id}/participants", headers=second).json()
    assert [(p["user_id"], p["display_name"]) for p in participants] == [("p-1", "Pat")]

    left = client.post(f"/api/v1/posts/{activity.id}/leave", headers=first)
    assert left.json() == {
        "post_id": activity.id,
        "joined": False,
        "participant_count": 0,
        "max_participants": 1,
    }
    assert client.post(f"/api/v1/posts/{activity.id}/join", headers=second).status_code == 200


def test_activity_listing_reports_participants(client, other_headers, make_post) -> None:
    make_post(
        post_type="activity",
        category="sports",
        activity_date=utcnow() + timedelta(days=1),
    )

    posts = client.get(
        "/api/v1/posts/", params={"post_type": "activity"}, headers=other_headers
    ).json()

    assert len(posts) == 1
    assert posts[0]["participant_count"] == 0
    assert posts[0]["author_id"] == OTHER_ID
