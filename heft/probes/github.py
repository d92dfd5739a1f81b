import os
import math
import base64
import asyncio
import binascii
import httpx
from typing import Any, Dict, List, Optional
from urllib.parse import quote
from heft.models.repository import CommitHistory, CommitSummary, FileContent
from heft.probes.normalizer import select_important_paths

GITHUB_API_URL = "https://api.github.com"
MANIFEST_PATH = "package.json"


class GithubProbeError(Exception):
    pass


def kb_to_mb(size_kb: float) -> float:
    """
    GitHub reports repository size in KB. Rounds half-up to two decimals.
    """
    return math.floor(size_kb / 1024 * 100 + 0.5) / 100


def default_branch_of(repo_data: Dict[str, Any]) -> str:
    return repo_data.get("default_branch") or "main"


def size_of(repo_data: Dict[str, Any]) -> float:
    return kb_to_mb(repo_data.get("size") or 0)


class GithubProbe:
    def __init__(self, token: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.token = token or os.getenv("GITHUB_TOKEN")
        self.transport = transport
        self.headers = {
            "User-Agent": "heft/1.0 (+https://github.com/heft-dev/heft)",
            "Accept": "application/vnd.github+json",
        }
        if self.token:
            self.auth_headers = {
                **self.headers,
                "Authorization": f"Bearer {self.token}"
            }
        else:
            self.auth_headers = self.headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=GITHUB_API_URL,
            headers=self.auth_headers,
            timeout=15.0,
            follow_redirects=True,
            transport=self.transport,
        )

    # --- Sync facade ---

    def get_default_branch(self, owner: str, repo: str) -> str:
        return asyncio.run(self._with_client(self._get_default_branch, owner, repo))

    def get_file_paths(self, owner: str, repo: str, ref: Optional[str] = None) -> List[str]:
        return asyncio.run(self._with_client(self._get_file_paths, owner, repo, ref))

    def get_file_content(self, owner: str, repo: str, path: str) -> FileContent:
        return asyncio.run(self._with_client(self._get_file_content, owner, repo, path))

    def get_repo_size_mb(self, owner: str, repo: str) -> float:
        return asyncio.run(self._with_client(self._get_repo_size_mb, owner, repo))

    def get_repository_commits(self, owner: str, repo: str, limit: int = 30) -> CommitHistory:
        return asyncio.run(self._with_client(self._get_repository_commits, owner, repo, limit))

    def collect_heaviness_inputs(self, owner: str, repo: str, ref: Optional[str] = None) -> Dict[str, Any]:
        return asyncio.run(self.collect_heaviness_inputs_async(owner, repo, ref))

    def collect_readme_inputs(self, owner: str, repo: str, max_files: int = 10, max_commits: int = 5) -> Dict[str, Any]:
        return asyncio.run(self.collect_readme_inputs_async(owner, repo, max_files, max_commits))

    async def _with_client(self, method, *args):
        async with self._client() as client:
            return await method(client, *args)

    # --- Composite fetches ---

    async def _gather_or_cancel(self, *coros):
        """
        Like asyncio.gather, but a failure cancels and awaits the remaining
        requests before the shared client is closed.
        """
        tasks = [asyncio.ensure_future(c) for c in coros]
        try:
            return await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def collect_heaviness_inputs_async(self, owner: str, repo: str, ref: Optional[str] = None) -> Dict[str, Any]:
        """
        Fetches the file listing, repository size and root manifest concurrently.
        The repository payload is requested once and supplies both the size and
        the default branch. The manifest text is empty unless the listing
        contains it and it decoded.
        """
        async def listing():
            repo_data = await self._get_repository(client, owner, repo)
            paths = await self._get_file_paths(client, owner, repo, ref or default_branch_of(repo_data))
            return repo_data, paths

        async with self._client() as client:
            print(f"  > Fetching file tree, size and {MANIFEST_PATH} for {owner}/{repo}...")
            (repo_data, paths), manifest = await self._gather_or_cancel(
                listing(),
                self._get_file_content(client, owner, repo, MANIFEST_PATH),
            )

        manifest_text = manifest.content if MANIFEST_PATH in paths and manifest.ok else ""
        return {"paths": paths, "repo_size_mb": size_of(repo_data), "manifest_text": manifest_text}

    async def collect_readme_inputs_async(self, owner: str, repo: str, max_files: int = 10, max_commits: int = 5) -> Dict[str, Any]:
        async with self._client() as client:
            branch = await self._get_default_branch(client, owner, repo)
            paths = await self._get_file_paths(client, owner, repo, branch)
            important = select_important_paths(paths)[:max_files]

            print(f"  > Fetching {len(important)} source files and recent commits...")
            contents = await self._gather_or_cancel(
                *[self._get_file_content(client, owner, repo, p) for p in important]
            )
            history = await self._get_repository_commits(client, owner, repo, max_commits)

        files = {path: res.content for path, res in zip(important, contents) if res.ok}
        return {"paths": paths, "files": files, "history": history}

    # --- REST calls ---

    async def _get_json(self, client: httpx.AsyncClient, url: str, **params) -> Any:
        response = await client.get(url, params=params or None)
        if response.status_code != 200:
            raise GithubProbeError(f"GitHub API Error: {response.status_code} - {response.text}")
        return response.json()

    async def _get_repository(self, client: httpx.AsyncClient, owner: str, repo: str) -> Dict[str, Any]:
        return await self._get_json(client, f"/repos/{owner}/{repo}")

    async def _get_default_branch(self, client: httpx.AsyncClient, owner: str, repo: str) -> str:
        return default_branch_of(await self._get_repository(client, owner, repo))

    async def _get_file_paths(self, client: httpx.AsyncClient, owner: str, repo: str, ref: Optional[str] = None) -> List[str]:
        if not ref:
            ref = await self._get_default_branch(client, owner, repo)
        data = await self._get_json(client, f"/repos/{owner}/{repo}/git/trees/{quote(ref, safe='')}", recursive="1")
        if data.get("truncated"):
            print(f"  > Tree for {owner}/{repo} was truncated by GitHub; listing is partial.")
        return [entry["path"] for entry in data.get("tree", []) if entry.get("type") == "blob"]

    async def _get_file_content(self, client: httpx.AsyncClient, owner: str, repo: str, path: str) -> FileContent:
        response = await client.get(f"/repos/{owner}/{repo}/contents/{quote(path)}")
        if response.status_code != 200:
            return FileContent(ok=False)

        data = response.json()
        # Directories come back as a list of entries.
        if not isinstance(data, dict) or data.get("type") != "file" or data.get("content") is None:
            return FileContent(ok=False)

        try:
            raw = base64.b64decode(data["content"])
            return FileContent(ok=True, content=raw.decode("utf-8"))
        except (binascii.Error, UnicodeDecodeError):
            return FileContent(ok=False)

    async def _get_repo_size_mb(self, client: httpx.AsyncClient, owner: str, repo: str) -> float:
        return size_of(await self._get_repository(client, owner, repo))

    async def _get_repository_commits(self, client: httpx.AsyncClient, owner: str, repo: str, limit: int = 30) -> CommitHistory:
        response = await client.get(f"/repos/{owner}/{repo}/commits", params={"per_page": limit})
        if response.status_code != 200:
            return CommitHistory(ok=False)

        commits = []
        for item in response.json()[:limit]:
            commit = item.get("commit") or {}
            author = commit.get("author") or {}
            commits.append(CommitSummary(
                sha=item.get("sha", ""),
                message=commit.get("message", ""),
                author=author.get("name") or "unknown",
                date=author.get("date") or "",
            ))
        return CommitHistory(ok=True, commits=commits)
