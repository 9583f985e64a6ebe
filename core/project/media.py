from urllib.parse import urlparse

from django.conf import settings


def absolute_media_url(url, request=None):
    """
    Turns a storage URL into one the client can fetch directly.

    Storage backends may hand back absolute URLs (S3, CDN), protocol
    relative ones, or site-relative paths for local MEDIA_ROOT files.
    """
    if not url:
        return None
    if url.startswith("//"):
        return f"https:{url}"

    parsed = urlparse(url)
    if parsed.scheme in {"http", "https"} and parsed.netloc:
        return url
    if request is not None:
        return request.build_absolute_uri(url)
    return f"{settings.BACKEND_URL.rstrip('/')}{url}"


def build_file_url(file_field, request=None):
    """URL for an avatar or attachment file, or None when the field is empty."""
    if not file_field:
        return None
    try:
        url = file_field.url
    except ValueError:
        # FieldFile without a stored file
        return None
    return absolute_media_url(url, request=request)
