import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .exceptions import ApiError, FeedClientError, NetworkFailure, ValidationError
from .state import FeedState

logger = logging.getLogger(__name__)

COMMENT_MAX_LENGTH = 100
POST_MAX_CONTENT_LENGTH = 500
ATTACHMENT_MAX_BYTES = 5 * 1024 * 1024

GENERIC_ERROR = "Something went wrong. Please try again."
POST_GONE = "This post is no longer available."


def _error_message(exc, *fields):
    if isinstance(exc, ApiError):
        return exc.first_message(*fields) or GENERIC_ERROR
    return str(exc) or GENERIC_ERROR


@dataclass
class Upload:
    name: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class CommentComposer:
    text: str = ""
    error: Optional[str] = None
    is_open: bool = False
    retry_temp_id: Optional[str] = None

    def open(self, text="", error=None, retry_temp_id=None):
        self.text = text
        self.error = error
        self.is_open = True
        self.retry_temp_id = retry_temp_id

    def close(self):
        self.text = ""
        self.error = None
        self.is_open = False
        self.retry_temp_id = None


@dataclass
class PostComposer:
    content: str = ""
    attachments: List[Upload] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)
    rejected_files: List[str] = field(default_factory=list)

    def add_attachments(self, uploads) -> List[str]:
        """Keeps the files under the size limit; returns the names of the rest."""
        rejected = [u.name for u in uploads if u.size > ATTACHMENT_MAX_BYTES]
        self.attachments.extend(u for u in uploads if u.size <= ATTACHMENT_MAX_BYTES)
        self.rejected_files = rejected
        return rejected

    def remove_attachment(self, index):
        del self.attachments[index]

    def reset(self):
        self.content = ""
        self.attachments = []
        self.errors = {}
        self.rejected_files = []


class FeedController:
    """
    Applies user actions to the local feed and reconciles with the server.

    Likes and comments show up before the request finishes; posts appear and
    disappear only once the server has accepted the change. Whatever the
    server answers wins over local state. Nothing here holds a lock across a
    request, so reconciliation only touches the entries the action created.

    ``confirm`` is the yes/no prompt shown before deletions. Without one,
    deletions are refused. ``on_error`` receives the message of every failed
    request.
    """

    def __init__(self, api, state=None, confirm=None, on_error=None):
        self.api = api
        self.state = state if state is not None else FeedState()
        self.confirm = confirm if confirm is not None else (lambda message: False)
        self.on_error = on_error
        self.post_composer = PostComposer()
        self._comment_composers: Dict[int, CommentComposer] = {}

    @property
    def user_id(self):
        return self.api.context.user_id

    def _report(self, message):
        logger.info("Feed action failed: %s", message)
        if self.on_error is not None:
            self.on_error(message)

    def refresh(self, username=None):
        self.state.load(self.api.list_posts(username=username))
        return self.state.posts

    def comment_composer(self, post_id) -> CommentComposer:
        return self._comment_composers.setdefault(post_id, CommentComposer())

    def toggle_like(self, post_id):
        """Returns the server's membership, or None when the toggle was rolled back."""
        snapshot = self.state.apply_like_toggle(post_id, self.user_id)
        if snapshot is None:
            self._report(POST_GONE)
            return None
        try:
            result = self.api.toggle_like(post_id)
        except FeedClientError as exc:
            self.state.rollback_like(snapshot)
            self._report(_error_message(exc))
            return None

        self.state.confirm_like(
            post_id, self.user_id, result["liked"], result["likes_count"]
        )
        return result["liked"]

    def submit_comment(self, post_id, text):
        """
        Shows the comment right away, then sends it.

        Empty text raises ValidationError. On failure the pending comment
        stays visible, marked with the error, and the composer re-opens with
        the text so the user can send it again.
        """
        content = (text or "").strip()
        if not content:
            raise ValidationError({"content": "Comment cannot be empty"})
        content = content[:COMMENT_MAX_LENGTH]
        if post_id not in self.state:
            self._report(POST_GONE)
            return None

        composer = self.comment_composer(post_id)
        draft = {"post_id": post_id, "content": content, "user_id": self.user_id}
        temp_id = composer.retry_temp_id
        if temp_id is None or not self.state.retry_pending_comment(post_id, temp_id, draft):
            temp_id = self.state.add_pending_comment(post_id, draft)
        composer.close()

        try:
            comment = self.api.add_comment(post_id, content)
        except FeedClientError as exc:
            message = _error_message(exc, "content")
            self.state.fail_comment(post_id, temp_id, message)
            composer.open(text=content, error=message, retry_temp_id=temp_id)
            self._report(message)
            return None

        self.state.confirm_comment(post_id, temp_id, comment)
        return comment

    def discard_failed_comment(self, post_id):
        """Drops the failed pending comment and closes the composer."""
        composer = self.comment_composer(post_id)
        if composer.retry_temp_id is not None:
            self.state.discard_pending_comment(post_id, composer.retry_temp_id)
        composer.close()

    def delete_comment(self, comment_id):
        if not self.confirm("Are you sure you want to delete this comment? This action cannot be undone."):
            return False

        removed = self.state.remove_comment(comment_id)
        if removed is None:
            return False

        try:
            self.api.delete_comment(comment_id)
        except FeedClientError as exc:
            self.state.restore_comment(removed)
            self._report(_error_message(exc))
            return False
        return True

    def create_post(self):
        """
        Sends the post composer's content and attachments.

        Raises ValidationError when there is nothing to send. On success the
        server's post goes to the top of the feed and the composer is reset;
        on failure the composer keeps its input and gets the field errors.
        """
        composer = self.post_composer
        content = (composer.content or "").strip()[:POST_MAX_CONTENT_LENGTH]
        composer.content = content
        if not content and not composer.attachments:
            composer.errors = {"content": "Write something or attach a file."}
            raise ValidationError(composer.errors)

        composer.errors = {}
        try:
            post = self.api.create_post(content, composer.attachments)
        except ApiError as exc:
            composer.errors = {
                key: exc.first_message(key) for key in exc.errors
            } or {"content": GENERIC_ERROR}
            self._report(_error_message(exc, "content", "attachments"))
            return None
        except NetworkFailure as exc:
            composer.errors = {"content": _error_message(exc)}
            self._report(composer.errors["content"])
            return None

        self.state.prepend_post(post)
        composer.reset()
        return post

    def delete_post(self, post_id):
        if not self.confirm("Are you sure you want to delete this post? This action cannot be undone."):
            return False

        try:
            self.api.delete_post(post_id)
        except FeedClientError as exc:
            self._report(_error_message(exc))
            return False

        self.state.drop_post(post_id)
        return True
