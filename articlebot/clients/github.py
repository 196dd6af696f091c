"""GitHub Git Data API publisher."""

import asyncio
import base64
import logging
from typing import Any, Dict, Optional

import aiohttp

from articlebot.clients.interfaces import ArticlePublisher
from articlebot.core.exceptions import InvalidInput, PublishFailed

logger = logging.getLogger(__name__)


def parse_repo(repo: str):
    """Split ``owner/name`` into its parts.

    Raises:
        InvalidInput: If the value is not of the form owner/name
    """
    owner, _, name = (repo or "").strip().partition("/")
    if not owner or not name or "/" in name:
        raise InvalidInput(f"Repository must be 'owner/name', got {repo!r}")
    return owner, name


class GitHubPublisher(ArticlePublisher):
    """Commits a set of files to a branch as a single commit."""

    def __init__(self, token: str, repo: str, branch: str = "main", settings=None):
        """Initialize GitHub publisher.

        Args:
            token: GitHub token with contents write access
            repo: Repository as owner/name
            branch: Branch to commit to
            settings: Settings instance for configuration values
        """
        if not token:
            raise InvalidInput("GitHub token not configured")

        self.owner, self.repo = parse_repo(repo)
        self.branch = branch
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

        if settings:
            self.base_url = settings.github_api_url.rstrip("/")
            self.timeout = settings.github_timeout
            self.commit_message = settings.github_commit_message
        else:
            self.base_url = "https://api.github.com"
            self.timeout = 30.0
            self.commit_message = "Add generated article and cover image"

    @property
    def target_name(self) -> str:
        return f"{self.owner}/{self.repo}@{self.branch}"

    @property
    def repo_url(self) -> str:
        return f"{self.base_url}/repos/{self.owner}/{self.repo}"

    async def publish(
        self, files: Dict[str, bytes], base_ref: Optional[str] = None
    ) -> str:
        """Create blobs, a tree and a commit, then move the branch to it.

        Returns:
            SHA of the new commit

        Raises:
            PublishFailed: If any step of the commit sequence fails
        """
        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                parent_sha = base_ref or await self.get_branch_sha(session)

                commit = await self._request(
                    session, "GET", f"/git/commits/{parent_sha}", expected={200}
                )
                base_tree = commit["tree"]["sha"]

                tree_entries = []
                for path, content in files.items():
                    blob = await self._request(
                        session,
                        "POST",
                        "/git/blobs",
                        expected={201},
                        payload={
                            "content": base64.b64encode(content).decode("ascii"),
                            "encoding": "base64",
                        },
                    )
                    tree_entries.append(
                        {
                            "path": path,
                            "mode": "100644",
                            "type": "blob",
                            "sha": blob["sha"],
                        }
                    )

                tree = await self._request(
                    session,
                    "POST",
                    "/git/trees",
                    expected={201},
                    payload={"base_tree": base_tree, "tree": tree_entries},
                )

                new_commit = await self._request(
                    session,
                    "POST",
                    "/git/commits",
                    expected={201},
                    payload={
                        "message": self.commit_message,
                        "tree": tree["sha"],
                        "parents": [parent_sha],
                    },
                )

                await self._request(
                    session,
                    "PATCH",
                    f"/git/refs/heads/{self.branch}",
                    expected={200},
                    payload={"sha": new_commit["sha"], "force": False},
                )

                logger.info(
                    f"Committed {len(files)} file(s) to {self.target_name}: "
                    f"{new_commit['sha'][:7]}"
                )
                return new_commit["sha"]

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Network error publishing to GitHub: {e}")
            raise PublishFailed(f"Network error calling GitHub: {e}") from e
        except (KeyError, ValueError, TypeError) as e:
            logger.error(f"Unexpected GitHub API response: {e}")
            raise PublishFailed(f"Unreadable GitHub response: {e}") from e

    async def get_branch_sha(self, session: aiohttp.ClientSession) -> str:
        """Resolve the commit SHA the branch currently points at."""
        ref = await self._request(
            session, "GET", f"/git/ref/heads/{self.branch}", expected={200}
        )
        return ref["object"]["sha"]

    async def _request(
        self,
        session: aiohttp.ClientSession,
        method: str,
        path: str,
        expected: set,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.repo_url}{path}"
        async with session.request(
            method, url, headers=self.headers, json=payload
        ) as response:
            if response.status in expected:
                return await response.json()

            error_detail = await response.text()
            logger.error(f"GitHub API error {response.status} on {method} {path}:")
            for line in str(error_detail).splitlines():
                logger.error(f"GitHub error detail: {line}")
            raise PublishFailed(
                f"GitHub {method} {path} failed", status=response.status
            )
