"""Cache keys and HTTP revalidation for project views

Clients cache project data under two independently fetched keys: the
owner's list and the admin's global list. Both derive from the same rows,
so every project mutation names both keys for invalidation, and list
responses are revalidated with ETags instead of being cached blindly.
"""

import hashlib
from typing import Iterable, List, Optional
from fastapi import Request, Response

INVALIDATE_HEADER = "X-Invalidate-Queries"

CLIENT_PROJECTS_KEY = "/api/dashboard/projects"
ADMIN_PROJECTS_KEY = "/api/admin/projects"
NOTIFICATIONS_KEY = "/api/dashboard/notifications"

CACHE_CONTROL = "private, no-cache"


def project_detail_key(project_id: int) -> str:
    return f"{CLIENT_PROJECTS_KEY}/{project_id}"


def project_invalidation_keys(project_id: Optional[int] = None) -> List[str]:
    """
    Cache keys made stale by a change to a project

    Both list keys are always included since an admin's change is visible
    in the owner's list and vice versa.
    """
    keys = [CLIENT_PROJECTS_KEY, ADMIN_PROJECTS_KEY]
    if project_id is not None:
        keys.append(project_detail_key(project_id))
    return keys


def mark_stale(response: Response, keys: Iterable[str]) -> None:
    """Tell the client which cached queries to drop"""
    response.headers[INVALIDATE_HEADER] = ", ".join(keys)
    response.headers["Cache-Control"] = "no-store"


def collection_etag(rows: Iterable, *fields: str) -> str:
    """
    Weak ETag over a collection of rows

    Args:
        rows: ORM objects or response models
        fields: Attribute names that make up a row's version (id is always included)

    Returns:
        ETag header value
    """
    digest = hashlib.sha256()
    for row in rows:
        parts = [str(row.id)] + [str(getattr(row, field, "")) for field in fields]
        digest.update("|".join(parts).encode("utf-8"))
        digest.update(b"\n")
    return f'W/"{digest.hexdigest()[:32]}"'


def revalidate(request: Request, response: Response, etag: str) -> Optional[Response]:
    """
    Attach validators to a list response

    Returns:
        A 304 response when the client's copy is current, otherwise None
        (the validators are set on ``response``)
    """
    if_none_match = request.headers.get("if-none-match")
    if if_none_match and etag in [tag.strip() for tag in if_none_match.split(",")]:
        return Response(
            status_code=304,
            headers={"ETag": etag, "Cache-Control": CACHE_CONTROL},
        )

    response.headers["ETag"] = etag
    response.headers["Cache-Control"] = CACHE_CONTROL
    return None
