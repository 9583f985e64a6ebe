import logging
from dataclasses import dataclass
from typing import Optional

import requests

from .exceptions import ApiError, NetworkFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientContext:
    """Who the client acts for. Passed to every call instead of being looked up."""

    user_id: int
    access_token: Optional[str] = None


class FeedApi:
    """
    Thin wrapper over the feed endpoints.

    Every method returns the decoded JSON body of a 2xx response. Transport
    errors and 5xx answers raise NetworkFailure; other non-2xx answers raise
    ApiError carrying the ``errors`` map.
    """

    def __init__(self, base_url, context, session=None, timeout=10):
        self.base_url = base_url.rstrip("/")
        self.context = context
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self):
        headers = {"Accept": "application/json"}
        if self.context.access_token:
            headers["Authorization"] = f"Bearer {self.context.access_token}"
        return headers

    def _request(self, method, path, **kwargs):
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.request(
                method, url, headers=self._headers(), timeout=self.timeout, **kwargs
            )
        except requests.exceptions.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise NetworkFailure() from e

        if response.status_code >= 500:
            logger.warning("%s %s answered %s", method, url, response.status_code)
            raise NetworkFailure(status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            body = {}
        else:
            try:
                body = response.json()
            except ValueError:
                body = {"errors": {"non_field_errors": [response.text[:200]]}}

        if response.status_code >= 400:
            if not isinstance(body, dict):
                body = {"errors": {"non_field_errors": body}}
            errors = body.get("errors")
            if errors is None:
                # DRF's own errors (404, 403, throttling) carry "detail" only
                errors = {k: v for k, v in body.items() if k != "success"}
            retry_after = body.get("retry_after") or response.headers.get("Retry-After")
            raise ApiError(
                errors,
                response.status_code,
                code=body.get("code"),
                retry_after=int(retry_after) if retry_after else None,
                body=body,
            )
        return body

    def list_posts(self, username=None):
        params = {"username": username} if username else None
        return self._request("GET", "/api/posts/", params=params)

    def create_post(self, content, attachments=()):
        files = [
            ("attachments", (upload.name, upload.content, upload.content_type))
            for upload in attachments
        ]
        body = self._request(
            "POST", "/api/posts/", data={"content": content}, files=files or None
        )
        return body["post"]

    def delete_post(self, post_id):
        return self._request("DELETE", f"/api/posts/{post_id}/")

    def toggle_like(self, post_id):
        return self._request("POST", f"/api/posts/{post_id}/like/")

    def add_comment(self, post_id, content):
        body = self._request(
            "POST", f"/api/posts/{post_id}/comment/", json={"content": content}
        )
        return body["comment"]

    def delete_comment(self, comment_id):
        return self._request("DELETE", f"/api/comments/{comment_id}/")

    def send_email_otp(self):
        return self._request("POST", "/api/user/send-email-otp/")

    def verify_email_otp(self, otp):
        return self._request("POST", "/api/user/verify-email-otp/", json={"otp": otp})
