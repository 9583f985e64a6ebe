from feed_client.state import Confirmed, FeedState, Pending, next_temp_id


def make_post(post_id, likes=(), comments=()):
    return {
        "id": post_id,
        "content": f"post {post_id}",
        "likes": [{"id": 100 + i, "user_id": uid, "post_id": post_id} for i, uid in enumerate(likes)],
        "likes_count": len(likes),
        "comments": list(comments),
    }


def make_comment(comment_id, post_id, content="hello"):
    return {
        "id": comment_id,
        "post_id": post_id,
        "content": content,
        "created_at": "2025-03-20T10:00:00Z",
        "user": {"id": 7, "username": "sam"},
    }


def test_temp_ids_are_unique_and_never_integers():
    ids = {next_temp_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(isinstance(i, str) and i.startswith("tmp-") for i in ids)


def test_load_builds_like_sets_and_confirmed_comments():
    state = FeedState([make_post(1, likes=[2, 3], comments=[make_comment(10, 1)])])

    entry = state.get(1)
    assert entry.liked_by == {2, 3}
    assert entry.likes_count == 2
    assert isinstance(entry.comments[0], Confirmed)
    assert entry.comments[0].id == 10


def test_like_toggle_then_rollback_restores_membership():
    state = FeedState([make_post(1, likes=[2])])

    snapshot = state.apply_like_toggle(1, user_id=5)
    assert state.get(1).is_liked_by(5)
    assert state.get(1).likes_count == 2

    state.rollback_like(snapshot)
    assert not state.get(1).is_liked_by(5)
    assert state.get(1).likes_count == 1


def test_rollback_does_not_blindly_retoggle():
    state = FeedState([make_post(1)])

    snapshot = state.apply_like_toggle(1, user_id=5)
    # another response already put the user back to "not liked"
    state.confirm_like(1, 5, liked=False, likes_count=0)

    state.rollback_like(snapshot)
    assert not state.get(1).is_liked_by(5)
    assert state.get(1).likes_count == 0


def test_confirm_like_never_duplicates_the_local_user():
    state = FeedState([make_post(1, likes=[5])])

    state.confirm_like(1, 5, liked=True, likes_count=1)
    state.confirm_like(1, 5, liked=True, likes_count=1)

    assert state.get(1).liked_by == {5}
    assert state.get(1).likes_count == 1


def test_pending_comment_is_replaced_by_server_comment():
    state = FeedState([make_post(1)])
    temp_id = state.add_pending_comment(1, {"content": "hi"})
    assert isinstance(state.get(1).comments[0], Pending)

    server_comment = make_comment(42, 1, "hi")
    assert state.confirm_comment(1, temp_id, server_comment)

    comments = state.get(1).comments
    assert len(comments) == 1
    assert comments[0].entity is server_comment


def test_confirm_comment_after_pending_was_lost_does_not_duplicate():
    state = FeedState([make_post(1, comments=[make_comment(42, 1)])])

    state.confirm_comment(1, "tmp-unknown", make_comment(42, 1))

    assert state.comment_ids(1) == [42]


def test_failed_comment_stays_visible_with_error():
    state = FeedState([make_post(1)])
    temp_id = state.add_pending_comment(1, {"content": "hi"})

    state.fail_comment(1, temp_id, "Network error")

    pending = state.get(1).comments[0]
    assert pending.failed
    assert pending.error == "Network error"


def test_restore_comment_puts_back_the_same_object_at_its_position():
    comments = [make_comment(10, 1, "a"), make_comment(11, 1, "b"), make_comment(12, 1, "c")]
    state = FeedState([make_post(1, comments=comments)])
    original = state.get(1).comments[1]

    removed = state.remove_comment(11)
    assert state.comment_ids(1) == [10, 12]

    state.restore_comment(removed)
    assert state.comment_ids(1) == [10, 11, 12]
    assert state.get(1).comments[1] is original
    assert state.get(1).comments[1].entity["created_at"] == "2025-03-20T10:00:00Z"


def test_remove_unknown_comment_returns_none():
    state = FeedState([make_post(1)])
    assert state.remove_comment(999) is None


def test_prepend_and_drop_post():
    state = FeedState([make_post(1), make_post(2)])

    state.prepend_post(make_post(3))
    assert [p.id for p in state.posts] == [3, 1, 2]

    state.drop_post(1)
    assert [p.id for p in state.posts] == [3, 2]
    assert 1 not in state


def test_mutations_on_unknown_post_return_none():
    state = FeedState([make_post(1)])

    assert state.apply_like_toggle(99, user_id=5) is None
    assert state.add_pending_comment(99, {"content": "hi"}) is None
    assert 99 not in state
