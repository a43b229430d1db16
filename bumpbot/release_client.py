"""
HTTP client for the GitHub releases and pull-request API.

Reads the upstream release feed, reads a repository's latest release, and
creates releases and pull requests.  Any status other than the one an
endpoint documents for success raises UpstreamError with the status and
response body; so does a transport failure.  Nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .errors import UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"

HTTP_OK = 200
HTTP_CREATED = 201


class ReleaseClient:
    """HTTP client for the release-hosting API."""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        token: str | None = None,
        *,
        timeout: float | None = None,
    ):
        self._api_url = api_url.rstrip("/")

        # Refuse non-HTTPS when a token would be sent in cleartext
        if token and not self._api_url.startswith("https://"):
            from urllib.parse import urlparse
            host = urlparse(self._api_url).hostname or ""
            if host not in ("localhost", "127.0.0.1", "::1"):
                raise ValueError(
                    f"API URL must use HTTPS (got {self._api_url}). "
                    "Use HTTPS to protect the access token, or use localhost for local development."
                )

        headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "Content-Type": "application/json",
        }
        if token:
            headers["Authorization"] = f"token {token}"

        self._client = httpx.Client(
            base_url=self._api_url,
            headers=headers,
            timeout=timeout,
        )

    def _request(self, method: str, path: str, *, expect: int, what: str, **kwargs) -> Any:
        try:
            resp = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise UpstreamError(f"{what}: {e}") from e
        if resp.status_code != expect:
            raise UpstreamError(what, status=resp.status_code, body=resp.text)
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError(
                f"{what} (response is not JSON)", status=resp.status_code, body=resp.text,
            ) from e

    def list_releases(self, owner: str, repo: str) -> list[dict[str, Any]]:
        """GET /repos/{owner}/{repo}/releases -> releases, newest first."""
        return self._request(
            "GET", f"/repos/{owner}/{repo}/releases",
            expect=HTTP_OK, what=f"Failed to list releases of {owner}/{repo}",
        )

    def latest_release(self, owner: str, repo: str) -> dict[str, Any]:
        """GET /repos/{owner}/{repo}/releases/latest."""
        return self._request(
            "GET", f"/repos/{owner}/{repo}/releases/latest",
            expect=HTTP_OK, what=f"Failed to get latest release of {owner}/{repo}",
        )

    def create_release(
        self,
        owner: str,
        repo: str,
        *,
        tag: str,
        target_branch: str,
        name: Optional[str] = None,
        body: str = "",
    ) -> dict[str, Any]:
        """POST /repos/{owner}/{repo}/releases -> created release (non-draft, non-prerelease)."""
        payload = {
            "tag_name": tag,
            "target_commitish": target_branch,
            "name": name if name is not None else tag,
            "body": body,
            "draft": False,
            "prerelease": False,
        }
        logger.info("Creating release %s on https://github.com/%s/%s/releases", tag, owner, repo)
        data = self._request(
            "POST", f"/repos/{owner}/{repo}/releases", json=payload,
            expect=HTTP_CREATED, what="Failed to create release",
        )
        logger.info("Release %s created.", tag)
        return data

    def create_pull_request(
        self,
        owner: str,
        repo: str,
        *,
        title: str,
        head: str,
        base: str,
    ) -> dict[str, Any]:
        """POST /repos/{owner}/{repo}/pulls -> created pull request."""
        payload = {"title": title, "head": head, "base": base}
        logger.info("Creating pull request on https://github.com/%s/%s/pulls", owner, repo)
        data = self._request(
            "POST", f"/repos/{owner}/{repo}/pulls", json=payload,
            expect=HTTP_CREATED, what="Failed to create pull request",
        )
        logger.info("Pull request created.")
        return data

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "ReleaseClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
