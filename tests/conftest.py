"""Shared test fixtures."""

import json
import threading
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Set, Tuple

import pytest

from models.repo import Commit, Release
from repo_metrics.cache import Cache
from repo_metrics.gitee.gitee_client import GiteeApiError, GiteeClient, PartRepository

NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


class FakeGiteeClient(GiteeClient):
    """
    Deterministic in-memory Gitee client.

    failures maps (repo, operation name) pairs to the calls that must fail.
    """

    def __init__(self, name: str = "fake", failures: Optional[Set[Tuple[str, str]]] = None, delay: float = 0.0):
        self.name = name
        self.failures = failures or set()
        self.delay = delay
        self.calls: List[Tuple[str, str]] = []
        self._lock = threading.Lock()
        self.in_use = 0
        self.max_in_use = 0

    def _call(self, op: str, repo: str) -> None:
        with self._lock:
            self.calls.append((repo, op))
        if (repo, op) in self.failures:
            raise GiteeApiError(f"{op} failed for {repo}")

    def get_repository(self, owner, repo):
        with self._lock:
            self.in_use += 1
            self.max_in_use = max(self.max_in_use, self.in_use)
        try:
            if self.delay:
                threading.Event().wait(self.delay)
            self._call("get_repository", repo)
        finally:
            with self._lock:
                self.in_use -= 1
        return PartRepository(
            default_branch="master",
            description=f"{repo} description",
            license="MIT",
            stars=42,
            topics=["landscape", repo],
            html_url=f"https://gitee.com/{owner}/{repo}",
        )

    def get_contributors_count(self, owner, repo):
        self._call("get_contributors_count", repo)
        return 7

    def get_license(self, owner, repo):
        self._call("get_license", repo)
        return "Apache-2.0"

    def get_languages(self, owner, repo):
        self._call("get_languages", repo)
        return None

    def get_first_commit(self, owner, repo, ref):
        self._call("get_first_commit", repo)
        return Commit(url=f"https://gitee.com/{owner}/{repo}/commit/first", ts=NOW - timedelta(days=900))

    def get_latest_commit(self, owner, repo, ref):
        self._call("get_latest_commit", repo)
        return Commit(url=f"https://gitee.com/{owner}/{repo}/commit/latest", ts=NOW - timedelta(days=1))

    def get_latest_release(self, owner, repo):
        self._call("get_latest_release", repo)
        return Release(url=f"https://gitee.com/{owner}/{repo}/releases/tag/v1.0.0", ts=NOW - timedelta(days=30))

    def get_participation_stats(self, owner, repo):
        self._call("get_participation_stats", repo)
        stats = [0] * 52
        stats[51] = 3
        return stats


class FakeResponse:
    def __init__(self, status_code: int = 200, body=None, headers: Optional[Dict[str, str]] = None):
        self.status_code = status_code
        self._body = body
        self.headers = headers or {}
        self.text = body if isinstance(body, str) else json.dumps(body)

    def json(self):
        if isinstance(self._body, str):
            return json.loads(self._body)
        return self._body


class FakeSession:
    """
    Stands in for requests.Session.

    routes maps a url path suffix (after /repos/{owner}/{repo}) to either a
    FakeResponse or a callable(params) returning one. Unknown routes give 404.
    """

    def __init__(self, routes: Optional[Dict[str, object]] = None, head_headers: Optional[Dict[str, str]] = None):
        self.headers: Dict[str, str] = {}
        self.routes = routes or {}
        self.head_headers = head_headers or {}
        self.requests: List[Tuple[str, str, dict]] = []

    def _route(self, url: str, params: Optional[dict]):
        path = url.split("/repos/", 1)[1]
        suffix = "/" + path.split("/", 2)[2] if path.count("/") >= 2 else ""
        handler = self.routes.get(suffix)
        if handler is None:
            return FakeResponse(404, {"message": "Not Found"})
        if callable(handler):
            return handler(params or {})
        return handler

    def get(self, url, params=None, timeout=None):
        self.requests.append(("GET", url, dict(params or {})))
        return self._route(url, params)

    def head(self, url, params=None, timeout=None):
        self.requests.append(("HEAD", url, dict(params or {})))
        return FakeResponse(200, None, headers=dict(self.head_headers))


def commit_json(sha: str, date: Optional[str]) -> dict:
    author = {"name": "dev"}
    if date is not None:
        author["date"] = date
    return {"sha": sha, "html_url": f"https://gitee.com/o/r/commit/{sha}", "commit": {"author": author}}


@pytest.fixture
def fake_client():
    return FakeGiteeClient()


@pytest.fixture
def cache(tmp_path):
    return Cache(tmp_path / "cache")


@pytest.fixture
def now():
    return NOW
