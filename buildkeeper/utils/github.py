from __future__ import annotations

import json
import re
from base64 import b64encode
from collections.abc import Mapping
from typing import Any, Literal
from urllib.error import HTTPError, URLError

from fastcore.net import HTTP4xxClientError, HTTP5xxServerError
from ghapi.all import GhApi

from buildkeeper.exceptions import GithubAPIError, InvalidGithubURL, UnexpectedResponseError

Permission = Literal["pull", "triage", "push", "maintain", "admin"]

GITHUB_REPO_URL_PATTERN = re.compile(r".*[/@]?github\.com[/:]([^/]+)\/([^/]+?)(?:\.git)?/?$")


def is_github_repo_url(data_path: str) -> bool:
    """Check if data_path is an URL pointing to a github repository."""
    return GITHUB_REPO_URL_PATTERN.search(data_path) is not None


def parse_gh_repo_url(repo_url: str) -> tuple[str, str]:
    """
    Returns:
        owner: Repo owner/org
        repo: Repo name

    Raises:
        InvalidGithubURL: If the URL is not a valid github repo URL
    """
    match = GITHUB_REPO_URL_PATTERN.search(repo_url)
    if not match:
        msg = f"Invalid GitHub repository URL: {repo_url}"
        raise InvalidGithubURL(msg)
    res = match.groups()
    assert len(res) == 2
    return tuple(res)  # type: ignore


def get_api(*, user: str = "", token: str = "") -> GhApi:
    """Return a GhApi client.

    With a user name, the requests use basic authentication (user name and
    token or password), otherwise the token alone.
    """
    api = GhApi(token=token or None)
    if user and token:
        credentials = b64encode(f"{user}:{token}".encode()).decode()
        api.headers["Authorization"] = f"Basic {credentials}"
    return api


_ERROR_BODY_MARKER = "====Error Body===="


def _error_message(e: HTTPError) -> str:
    """The `message` GitHub sent in the error body, falling back to the HTTP reason.

    fastcore appends the response body to the reason after `_ERROR_BODY_MARKER`.
    """
    reason, _, body = str(e.msg or "").partition(_ERROR_BODY_MARKER)
    try:
        message = json.loads(body).get("message", "")
    except (ValueError, AttributeError):
        message = ""
    return str(message).strip() or reason.strip() or f"HTTP error {e.code}"


def get_collaborators(api: GhApi, owner: str, repo: str) -> Any:
    """Raw response of the collaborators endpoint.
    See https://docs.github.com/en/rest/collaborators/collaborators#list-repository-collaborators

    Raises:
        GithubAPIError: If GitHub answers with an error or cannot be reached
    """
    try:
        return api.repos.list_collaborators(owner, repo)  # type: ignore
    except (HTTP4xxClientError, HTTP5xxServerError) as e:
        raise GithubAPIError(_error_message(e)) from e
    except URLError as e:
        msg = f"Could not reach GitHub: {e.reason}"
        raise GithubAPIError(msg) from e


def filter_collaborators(payload: Any, permission: Permission = "pull") -> list[str]:
    """Return the logins of all collaborators that have `permission`.

    Raises:
        GithubAPIError: If the payload is an error object (has a `message` field)
        UnexpectedResponseError: If a collaborator lacks the permission flag
    """
    if isinstance(payload, Mapping):
        if "message" in payload:
            raise GithubAPIError(str(payload["message"]))
        msg = f"Expected a list of collaborators, got an object with keys {sorted(payload)}"
        raise UnexpectedResponseError(msg)
    logins = []
    for collaborator in payload:
        permissions = collaborator.get("permissions") if isinstance(collaborator, Mapping) else None
        if not isinstance(permissions, Mapping) or permission not in permissions:
            msg = f"Collaborator entry has no '{permission}' permission field: {collaborator!r}"
            raise UnexpectedResponseError(msg)
        if permissions[permission]:
            logins.append(collaborator["login"])
    return logins


def list_collaborators_with_permission(
    owner: str, repo: str, *, permission: Permission = "pull", user: str = "", token: str = "", api: GhApi | None = None
) -> list[str]:
    """Logins of the collaborators of `owner/repo` that have `permission`."""
    if api is None:
        api = get_api(user=user, token=token)
    return filter_collaborators(get_collaborators(api, owner, repo), permission)
