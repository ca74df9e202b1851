"""Async client for the GitHub repository-creation endpoint.

Only ``POST /user/repos`` is needed: the bootstrapper creates a repository
for the authenticated user and clones it.

Typical usage::

    client = GitHubClient(token=config.github_token())
    repo = await client.create_repository("my-app", private=True)
    print(repo.clone_url)
"""

from __future__ import annotations

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bootstrapper.errors import RemoteError


class CreatedRepository(BaseModel):
    """Subset of the GitHub repository payload the pipeline consumes."""

    model_config = ConfigDict(extra="allow")

    html_url: str = Field(..., description="Web URL for the repository")
    clone_url: str = Field(..., description="HTTPS clone URL")
    name: str | None = Field(None, description="Repository name as stored by GitHub")
    private: bool | None = Field(None, description="Whether the repository is private")


class GitHubClient:
    """Creates repositories through the GitHub REST API with a bearer token."""

    def __init__(
        self,
        token: str,
        api_base: str = "https://api.github.com",
        timeout: float = 30.0,
    ) -> None:
        self.token = token
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured with our base URL and timeout."""
        return httpx.AsyncClient(
            base_url=self.api_base,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "Content-Type": "application/json",
        }

    async def create_repository(self, name: str, private: bool = True) -> CreatedRepository:
        """Create a repository owned by the authenticated user.

        Args:
            name: Repository name.
            private: Whether the repository should be private.

        Returns:
            The ``html_url`` / ``clone_url`` of the new repository.

        Raises:
            RemoteError: On any non-2xx response, a connection failure, a
                timeout, or a response without the expected fields.
        """
        payload = {"name": name, "private": private}
        try:
            async with self._client() as client:
                response = await client.post(
                    "/user/repos", headers=self._headers(), json=payload
                )
        except httpx.ConnectError as exc:
            raise RemoteError(f"Cannot connect to {self.api_base}: {exc}") from exc
        except httpx.TimeoutException as exc:
            raise RemoteError(
                f"Request to {self.api_base} timed out after {self.timeout}s."
            ) from exc
        except httpx.TransportError as exc:
            raise RemoteError(f"Request to {self.api_base} failed: {exc}") from exc

        if not response.is_success:
            raise RemoteError(
                f"Error creating repository '{name}': HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            return CreatedRepository.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise RemoteError(
                f"Unexpected response while creating repository '{name}'",
                status_code=response.status_code,
                body=response.text,
            ) from exc
