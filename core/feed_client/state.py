"""
Local copy of the feed, edited optimistically and reconciled with the server.

Comments are held as LocalEntity values: a comment the server has not
acknowledged yet is ``Pending`` under a temporary id, one it has returned is
``Confirmed`` and wraps the server payload untouched. Server ids are
integers and temporary ids are ``"tmp-<n>"`` strings, so the two never
collide.
"""
import itertools
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple, Union

_temp_ids = itertools.count(1)
_temp_ids_lock = threading.Lock()


def next_temp_id() -> str:
    with _temp_ids_lock:
        return f"tmp-{next(_temp_ids)}"


@dataclass
class Pending:
    temp_id: str
    draft: dict
    error: Optional[str] = None

    @property
    def id(self):
        return self.temp_id

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class Confirmed:
    entity: dict

    @property
    def id(self):
        return self.entity["id"]


LocalEntity = Union[Pending, Confirmed]


@dataclass
class PostEntry:
    post: dict
    liked_by: Set[int] = field(default_factory=set)
    likes_count: int = 0
    comments: List[LocalEntity] = field(default_factory=list)

    @property
    def id(self):
        return self.post["id"]

    def is_liked_by(self, user_id) -> bool:
        return user_id in self.liked_by

    def find_comment(self, local_id) -> Optional[int]:
        for index, comment in enumerate(self.comments):
            if comment.id == local_id:
                return index
        return None

    @classmethod
    def from_payload(cls, post):
        liked_by = {like["user_id"] for like in post.get("likes", [])}
        return cls(
            post=post,
            liked_by=liked_by,
            likes_count=post.get("likes_count", len(liked_by)),
            comments=[Confirmed(comment) for comment in post.get("comments", [])],
        )


@dataclass(frozen=True)
class LikeSnapshot:
    post_id: int
    user_id: int
    was_liked: bool


@dataclass(frozen=True)
class RemovedComment:
    """The removed comment object and where it sat, per post."""

    comment: Confirmed
    positions: Tuple[Tuple[int, int], ...]


class FeedState:
    """Posts in display order, newest first."""

    def __init__(self, posts=()):
        self._posts: "OrderedDict[int, PostEntry]" = OrderedDict()
        self.load(posts)

    def load(self, posts):
        self._posts.clear()
        for post in posts:
            entry = PostEntry.from_payload(post)
            self._posts[entry.id] = entry

    @property
    def posts(self) -> List[PostEntry]:
        return list(self._posts.values())

    def get(self, post_id) -> Optional[PostEntry]:
        return self._posts.get(post_id)

    def __contains__(self, post_id):
        return post_id in self._posts

    def __len__(self):
        return len(self._posts)

    # Likes

    def apply_like_toggle(self, post_id, user_id) -> Optional[LikeSnapshot]:
        """Flips the user's like; None when the post is not in the feed."""
        entry = self._posts.get(post_id)
        if entry is None:
            return None
        snapshot = LikeSnapshot(post_id, user_id, entry.is_liked_by(user_id))
        self._set_like(entry, user_id, not snapshot.was_liked)
        return snapshot

    def confirm_like(self, post_id, user_id, liked, likes_count):
        """Takes the server's membership and count as final."""
        entry = self._posts.get(post_id)
        if entry is None:
            return
        if liked:
            entry.liked_by.add(user_id)
        else:
            entry.liked_by.discard(user_id)
        entry.likes_count = likes_count

    def rollback_like(self, snapshot: LikeSnapshot):
        """Puts the user's membership back to what it was before the toggle."""
        entry = self._posts.get(snapshot.post_id)
        if entry is None:
            return
        self._set_like(entry, snapshot.user_id, snapshot.was_liked)

    @staticmethod
    def _set_like(entry, user_id, liked):
        if liked == entry.is_liked_by(user_id):
            return
        if liked:
            entry.liked_by.add(user_id)
            entry.likes_count += 1
        else:
            entry.liked_by.discard(user_id)
            entry.likes_count = max(0, entry.likes_count - 1)

    # Comments

    def add_pending_comment(self, post_id, draft) -> Optional[str]:
        entry = self._posts.get(post_id)
        if entry is None:
            return None
        temp_id = next_temp_id()
        entry.comments.append(Pending(temp_id=temp_id, draft=draft))
        return temp_id

    def retry_pending_comment(self, post_id, temp_id, draft) -> bool:
        """Clears the error on a failed pending comment before it is resent."""
        pending = self._pending(post_id, temp_id)
        if pending is None:
            return False
        pending.draft = draft
        pending.error = None
        return True

    def confirm_comment(self, post_id, temp_id, comment) -> bool:
        """
        Replaces the pending entry with the server's comment.

        If the pending entry is gone (post reloaded or removed meanwhile) the
        comment is appended instead, unless the post already shows it.
        """
        entry = self._posts.get(post_id)
        if entry is None:
            return False

        index = entry.find_comment(temp_id)
        if index is not None:
            entry.comments[index] = Confirmed(comment)
        elif entry.find_comment(comment["id"]) is None:
            entry.comments.append(Confirmed(comment))
        return True

    def fail_comment(self, post_id, temp_id, error) -> bool:
        pending = self._pending(post_id, temp_id)
        if pending is None:
            return False
        pending.error = error
        return True

    def discard_pending_comment(self, post_id, temp_id) -> bool:
        entry = self._posts.get(post_id)
        index = entry.find_comment(temp_id) if entry else None
        if index is None:
            return False
        del entry.comments[index]
        return True

    def _pending(self, post_id, temp_id) -> Optional[Pending]:
        entry = self._posts.get(post_id)
        index = entry.find_comment(temp_id) if entry else None
        if index is None:
            return None
        return entry.comments[index]

    def remove_comment(self, comment_id) -> Optional[RemovedComment]:
        """Removes a confirmed comment from every post showing it."""
        removed = None
        positions = []
        for entry in self._posts.values():
            index = entry.find_comment(comment_id)
            if index is None:
                continue
            removed = entry.comments.pop(index)
            positions.append((entry.id, index))

        if removed is None:
            return None
        return RemovedComment(comment=removed, positions=tuple(positions))

    def restore_comment(self, snapshot: RemovedComment):
        """Puts the very same comment object back where it was removed from."""
        for post_id, index in snapshot.positions:
            entry = self._posts.get(post_id)
            if entry is None or entry.find_comment(snapshot.comment.id) is not None:
                continue
            entry.comments.insert(min(index, len(entry.comments)), snapshot.comment)

    # Posts

    def prepend_post(self, post) -> PostEntry:
        entry = PostEntry.from_payload(post)
        self._posts[entry.id] = entry
        self._posts.move_to_end(entry.id, last=False)
        return entry

    def drop_post(self, post_id) -> Optional[PostEntry]:
        return self._posts.pop(post_id, None)

    def comment_ids(self, post_id) -> List:
        return [comment.id for comment in self._posts[post_id].comments]
