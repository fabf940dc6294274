"""
Post Repository, Mutation Authorization and Comment Log Tests
"""

from datetime import datetime, timedelta, timezone

import pytest

from errors import ForbiddenError, NotFoundError, ValidationError
from models.post import Post, PostCreate, PostUpdate
from models.user import User
from services.authorization import assert_owner, toggle_like

ALICE = User(id="alice-id", username="alice", email="alice@example.com")
BOB = User(id="bob-id", username="bob", email="bob@example.com")


def make_post(post_repository, author=ALICE, title="Hello", content="World", **kwargs):
    return post_repository.create(author, PostCreate(title=title, content=content, **kwargs))


# ==============================================================================
# Create / read
# ==============================================================================


def test_create_sets_author_and_defaults(post_repository):
    post = make_post(post_repository, tags=["python", "python", " web "])

    assert post.author == ALICE.id
    assert post.author_username == "alice"
    assert post.likes == []
    assert post.comments == []
    assert post.image == ""
    assert post.tags == ["python", "web"]
    assert post_repository.get_by_id(post.id) == post


@pytest.mark.parametrize("title,content", [("", "body"), ("title", ""), ("   ", "body"), ("title", "\n\t")])
def test_create_requires_title_and_content(post_repository, title, content):
    with pytest.raises(ValidationError):
        make_post(post_repository, title=title, content=content)


def test_create_strips_markup(post_repository):
    post = make_post(post_repository, title="<h1>Bold</h1> move", content="<script>x</script>text")

    assert post.title == "Bold move"
    assert "<script>" not in post.content


def test_text_is_stored_as_typed(post_repository, comment_log):
    post = make_post(post_repository, title="Q&A: is 1 < 2?", content="Tom & Jerry", tags=["R&D"])
    comments = comment_log.append(post.id, BOB, "I <3 Python")

    stored = post_repository.get_by_id(post.id)
    assert stored.title == "Q&A: is 1 < 2?"
    assert stored.content == "Tom & Jerry"
    assert stored.tags == ["R&D"]
    assert comments[0].text == "I <3 Python"
    assert comment_log.list(post.id)[0].text == "I <3 Python"


def test_get_missing_post(post_repository):
    with pytest.raises(NotFoundError):
        post_repository.get_by_id("missing")


def test_list_is_newest_first(post_repository, fake_client):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    ids = []
    for offset in (1, 2, 3):
        post = make_post(post_repository, title=f"post {offset}")
        fake_client.collection("posts").document(post.id).update({"created_at": base + timedelta(minutes=offset)})
        ids.append(post.id)

    assert [p.id for p in post_repository.list()] == list(reversed(ids))


def test_list_breaks_timestamp_ties_by_id(post_repository, fake_client):
    same_time = datetime(2024, 1, 1, tzinfo=timezone.utc)
    ids = []
    for title in ("a", "b", "c"):
        post = make_post(post_repository, title=title)
        fake_client.collection("posts").document(post.id).update({"created_at": same_time})
        ids.append(post.id)

    first = [p.id for p in post_repository.list()]
    second = [p.id for p in post_repository.list()]

    assert first == second == sorted(ids, reverse=True)


def test_list_by_author(post_repository):
    mine = make_post(post_repository, author=ALICE)
    make_post(post_repository, author=BOB)

    assert [p.id for p in post_repository.list_by_author(ALICE.id)] == [mine.id]


# ==============================================================================
# Ownership
# ==============================================================================


def test_assert_owner():
    post = Post(id="p1", title="t", content="c", author=ALICE.id, created_at=datetime.now(timezone.utc))

    assert_owner(post, ALICE.id)
    with pytest.raises(ForbiddenError):
        assert_owner(post, BOB.id)


def test_author_can_update_mutable_fields(post_repository):
    post = make_post(post_repository)

    updated = post_repository.update(
        post.id, ALICE.id, PostUpdate(title="New title", image="posts/a.png", tags=["news"])
    )

    assert updated.title == "New title"
    assert updated.content == "World"
    assert updated.image == "posts/a.png"
    assert updated.tags == ["news"]
    assert updated.author == ALICE.id


def test_other_user_cannot_update(post_repository):
    post = make_post(post_repository)

    with pytest.raises(ForbiddenError):
        post_repository.update(post.id, BOB.id, PostUpdate(title="Mine now"))
    assert post_repository.get_by_id(post.id).title == "Hello"


def test_update_rejects_blank_title(post_repository):
    post = make_post(post_repository)

    with pytest.raises(ValidationError):
        post_repository.update(post.id, ALICE.id, PostUpdate(title="  "))


def test_update_missing_post(post_repository):
    with pytest.raises(NotFoundError):
        post_repository.update("missing", ALICE.id, PostUpdate(title="x"))


def test_delete_by_other_user_is_forbidden_then_author_succeeds(post_repository):
    post = make_post(post_repository)

    with pytest.raises(ForbiddenError):
        post_repository.delete(post.id, BOB.id)

    deleted = post_repository.delete(post.id, ALICE.id)
    assert deleted.id == post.id
    with pytest.raises(NotFoundError):
        post_repository.get_by_id(post.id)


# ==============================================================================
# Likes
# ==============================================================================


def test_toggle_like_twice_restores_membership(post_repository):
    post = make_post(post_repository)

    liked = post_repository.toggle_like(post.id, BOB.id)
    assert liked.likes == [BOB.id]

    unliked = post_repository.toggle_like(post.id, BOB.id)
    assert unliked.likes == []


def test_author_may_like_own_post(post_repository):
    post = make_post(post_repository)

    assert post_repository.toggle_like(post.id, ALICE.id).likes == [ALICE.id]


def test_stale_read_does_not_lose_other_likes(post_repository, db):
    post = make_post(post_repository)
    stale = post_repository.get_by_id(post.id)

    toggle_like(db, stale, ALICE.id)
    result = toggle_like(db, stale, BOB.id)

    assert sorted(result.likes) == sorted([ALICE.id, BOB.id])


def test_toggles_from_same_stale_read_apply_in_order(post_repository, db):
    post = make_post(post_repository)

    # both calls see a copy where BOB has not liked the post
    toggle_like(db, post, BOB.id)
    result = toggle_like(db, post, BOB.id)

    assert result.likes == []


def test_toggle_retries_when_post_changes_before_commit(post_repository, db, fake_client):
    post = make_post(post_repository)

    # the same user toggles again between the read and the commit
    fake_client.before_commit.append(lambda: db.toggle_like(post.id, BOB.id))
    result = post_repository.toggle_like(post.id, BOB.id)

    assert result.likes == []
    assert post_repository.get_by_id(post.id).likes == []


def test_concurrent_toggles_by_different_users_both_land(post_repository, db, fake_client):
    post = make_post(post_repository)

    fake_client.before_commit.append(lambda: db.toggle_like(post.id, ALICE.id))
    result = post_repository.toggle_like(post.id, BOB.id)

    assert sorted(result.likes) == sorted([ALICE.id, BOB.id])


def test_like_missing_post(post_repository):
    with pytest.raises(NotFoundError):
        post_repository.toggle_like("missing", ALICE.id)


@pytest.mark.parametrize("post_id", ["__x__", "__name__"])
def test_reserved_document_ids_are_not_found(post_repository, comment_log, post_id):
    with pytest.raises(NotFoundError):
        post_repository.get_by_id(post_id)
    with pytest.raises(NotFoundError):
        post_repository.toggle_like(post_id, ALICE.id)
    with pytest.raises(NotFoundError):
        comment_log.append(post_id, ALICE, "hello")


# ==============================================================================
# Comments
# ==============================================================================


def test_comments_append_in_call_order(post_repository, comment_log):
    post = make_post(post_repository)

    for i in range(5):
        comments = comment_log.append(post.id, BOB if i % 2 else ALICE, f"comment {i}")

    assert [c.text for c in comments] == [f"comment {i}" for i in range(5)]
    assert [c.text for c in comment_log.list(post.id)] == [f"comment {i}" for i in range(5)]
    assert comments[1].author == BOB.id
    assert comments[1].author_username == "bob"


def test_identical_comments_are_both_kept(post_repository, comment_log):
    post = make_post(post_repository)

    comment_log.append(post.id, ALICE, "+1")
    comments = comment_log.append(post.id, ALICE, "+1")

    assert len(comments) == 2
    assert comments[0].id != comments[1].id


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_blank_comment_is_rejected(post_repository, comment_log, text):
    post = make_post(post_repository)

    with pytest.raises(ValidationError):
        comment_log.append(post.id, ALICE, text)
    assert comment_log.list(post.id) == []


def test_comment_on_missing_post(comment_log):
    with pytest.raises(NotFoundError):
        comment_log.append("missing", ALICE, "hello")
    with pytest.raises(NotFoundError):
        comment_log.list("missing")


def test_comments_are_embedded_in_post(post_repository, comment_log):
    post = make_post(post_repository)
    comment_log.append(post.id, BOB, "nice")

    assert [c.text for c in post_repository.get_by_id(post.id).comments] == ["nice"]
