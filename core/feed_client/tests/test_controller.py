from unittest.mock import MagicMock

import pytest

from feed_client.api import ClientContext
from feed_client.controller import (
    ATTACHMENT_MAX_BYTES,
    FeedController,
    Upload,
)
from feed_client.exceptions import ApiError, NetworkFailure, ValidationError
from feed_client.state import FeedState, Pending

from .test_state import make_comment, make_post

USER_ID = 5


@pytest.fixture
def api():
    api = MagicMock()
    api.context = ClientContext(user_id=USER_ID, access_token="token")
    return api


@pytest.fixture
def errors():
    return []


@pytest.fixture
def controller(api, errors):
    state = FeedState([make_post(1, likes=[2]), make_post(2)])
    return FeedController(api, state=state, confirm=lambda message: True, on_error=errors.append)


def test_like_toggle_takes_server_membership(controller, api):
    api.toggle_like.return_value = {"success": True, "liked": True, "likes_count": 2}

    assert controller.toggle_like(1) is True
    entry = controller.state.get(1)
    assert entry.liked_by == {2, USER_ID}
    assert entry.likes_count == 2


def test_double_toggle_converges_to_server_without_duplicates(controller, api):
    api.toggle_like.side_effect = [
        {"success": True, "liked": True, "likes_count": 2},
        {"success": True, "liked": False, "likes_count": 1},
    ]

    controller.toggle_like(1)
    controller.toggle_like(1)

    entry = controller.state.get(1)
    assert entry.liked_by == {2}
    assert entry.likes_count == 1


def test_interleaved_toggles_end_on_the_last_server_answer(controller, api):
    # the second click happens while the first request is still in flight
    def first_request(post_id):
        api.toggle_like.side_effect = lambda _: {"success": True, "liked": False, "likes_count": 1}
        controller.toggle_like(post_id)
        return {"success": True, "liked": True, "likes_count": 2}

    api.toggle_like.side_effect = first_request
    controller.toggle_like(1)

    entry = controller.state.get(1)
    assert entry.liked_by == {2, USER_ID}
    assert entry.likes_count == 2


def test_like_failure_rolls_back(controller, api, errors):
    api.toggle_like.side_effect = NetworkFailure()

    assert controller.toggle_like(1) is None
    entry = controller.state.get(1)
    assert entry.liked_by == {2}
    assert entry.likes_count == 1
    assert errors


def test_long_comment_is_truncated_before_send_and_display(controller, api):
    text = "x" * 150

    def reply(post_id, content):
        pending = controller.state.get(post_id).comments[-1]
        assert isinstance(pending, Pending)
        assert pending.draft["content"] == "x" * 100
        return make_comment(77, post_id, content)

    api.add_comment.side_effect = reply

    comment = controller.submit_comment(1, text)

    api.add_comment.assert_called_once_with(1, "x" * 100)
    assert comment["content"] == "x" * 100
    assert controller.state.get(1).comments[-1].entity["id"] == 77


def test_empty_comment_is_rejected_locally(controller, api):
    with pytest.raises(ValidationError):
        controller.submit_comment(1, "   ")
    api.add_comment.assert_not_called()


def test_failed_comment_stays_and_composer_reopens(controller, api, errors):
    api.add_comment.side_effect = ApiError({"content": ["Comment cannot be empty"]}, 400)

    assert controller.submit_comment(1, "hello") is None

    pending = controller.state.get(1).comments[-1]
    assert isinstance(pending, Pending)
    assert pending.error == "Comment cannot be empty"
    composer = controller.comment_composer(1)
    assert composer.is_open
    assert composer.text == "hello"
    assert composer.error == "Comment cannot be empty"


def test_resubmitting_failed_comment_reuses_pending_entry(controller, api):
    api.add_comment.side_effect = [NetworkFailure(), make_comment(80, 1, "hello")]

    controller.submit_comment(1, "hello")
    controller.submit_comment(1, controller.comment_composer(1).text)

    comments = controller.state.get(1).comments
    assert len(comments) == 1
    assert comments[0].entity["id"] == 80
    assert not controller.comment_composer(1).is_open


def test_failed_comment_delete_restores_original_object(api, errors):
    original = make_comment(10, 1, "keep me")
    state = FeedState([make_post(1, comments=[make_comment(9, 1), original])])
    controller = FeedController(
        api, state=state, confirm=lambda message: True, on_error=errors.append
    )
    before = state.get(1).comments[1]
    api.delete_comment.side_effect = NetworkFailure()

    assert controller.delete_comment(10) is False

    restored = state.get(1).comments[1]
    assert restored is before
    assert restored.entity is original
    assert errors


def test_comment_delete_requires_confirmation(api):
    state = FeedState([make_post(1, comments=[make_comment(10, 1)])])
    controller = FeedController(api, state=state, confirm=lambda message: False)

    assert controller.delete_comment(10) is False
    api.delete_comment.assert_not_called()
    assert state.comment_ids(1) == [10]


def test_comment_delete_success(api):
    state = FeedState([make_post(1), make_post(2, comments=[make_comment(10, 2)])])
    controller = FeedController(api, state=state, confirm=lambda message: True)
    api.delete_comment.return_value = {"success": True}

    assert controller.delete_comment(10) is True
    api.delete_comment.assert_called_once_with(10)
    assert state.comment_ids(2) == []


def test_create_post_inserts_only_after_success(controller, api):
    def reply(content, attachments):
        assert 3 not in controller.state
        return make_post(3)

    api.create_post.side_effect = reply
    controller.post_composer.content = "  hello  "

    post = controller.create_post()

    api.create_post.assert_called_once_with("hello", [])
    assert post["id"] == 3
    assert controller.state.posts[0].id == 3
    assert controller.post_composer.content == ""


def test_create_post_truncates_content(controller, api):
    api.create_post.return_value = make_post(3)
    controller.post_composer.content = "y" * 600

    controller.create_post()

    assert api.create_post.call_args[0][0] == "y" * 500


def test_create_post_errors_keep_composer(controller, api):
    api.create_post.side_effect = ApiError({"content": ["Ensure this field has no more than 500 characters."]}, 400)
    controller.post_composer.content = "hello"

    assert controller.create_post() is None

    assert controller.post_composer.content == "hello"
    assert controller.post_composer.errors["content"].startswith("Ensure")
    assert [p.id for p in controller.state.posts] == [1, 2]


def test_create_post_requires_content_or_attachment(controller, api):
    with pytest.raises(ValidationError):
        controller.create_post()
    api.create_post.assert_not_called()


def test_oversized_attachments_are_reported_and_skipped(controller):
    small = Upload("small.png", b"1" * 10, "image/png")
    big = Upload("big.mov", b"0" * (ATTACHMENT_MAX_BYTES + 1), "video/quicktime")

    rejected = controller.post_composer.add_attachments([small, big])

    assert rejected == ["big.mov"]
    assert controller.post_composer.attachments == [small]


def test_delete_post_requires_confirmation(api):
    state = FeedState([make_post(1)])
    controller = FeedController(api, state=state, confirm=lambda message: False)

    assert controller.delete_post(1) is False
    api.delete_post.assert_not_called()
    assert 1 in state


def test_delete_post_removes_after_server_success(controller, api):
    api.delete_post.return_value = {"success": True}

    assert controller.delete_post(1) is True
    assert 1 not in controller.state


def test_delete_post_failure_keeps_post(controller, api, errors):
    api.delete_post.side_effect = ApiError({"detail": "You do not have permission to perform this action."}, 403)

    assert controller.delete_post(1) is False
    assert 1 in controller.state
    assert errors == ["You do not have permission to perform this action."]


def test_deletes_are_refused_without_a_confirmation_prompt(api):
    state = FeedState([make_post(1, comments=[make_comment(10, 1)])])
    controller = FeedController(api, state=state)

    assert controller.delete_post(1) is False
    assert controller.delete_comment(10) is False
    api.delete_post.assert_not_called()
    api.delete_comment.assert_not_called()
    assert state.comment_ids(1) == [10]


def test_like_on_post_missing_from_feed_is_reported(controller, api, errors):
    assert controller.toggle_like(99) is None
    api.toggle_like.assert_not_called()
    assert errors == ["This post is no longer available."]


def test_comment_on_post_missing_from_feed_is_reported(controller, api, errors):
    assert controller.submit_comment(99, "hello") is None
    api.add_comment.assert_not_called()
    assert errors == ["This post is no longer available."]
