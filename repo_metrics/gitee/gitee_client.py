# ----------------------------
# Gitee REST client (one per token)
# ----------------------------
from __future__ import annotations

import abc
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional

import requests

import utils
from configuration import Configuration as Config
from models.repo import Commit, Release
from loggers.gitee_client_logger import gitee_client_logger as logger

# Response headers Gitee (and compatible forges) use for the total item count
TOTAL_COUNT_HEADERS = ("total_count", "Total-Count", "X-Total-Count")


class GiteeApiError(RuntimeError):
    """Non-success response or undecodable body from the Gitee API."""


@dataclass
class PartRepository:
    """The subset of the repository resource the collector needs."""
    default_branch: str = ""
    description: str = ""
    license: Optional[str] = None
    stars: int = 0
    topics: List[str] = field(default_factory=list)
    html_url: str = ""


class GiteeClient(abc.ABC):
    """Operations a repository data source must support."""

    @abc.abstractmethod
    def get_repository(self, owner: str, repo: str) -> PartRepository:
        ...

    @abc.abstractmethod
    def get_contributors_count(self, owner: str, repo: str) -> int:
        ...

    @abc.abstractmethod
    def get_license(self, owner: str, repo: str) -> str:
        ...

    @abc.abstractmethod
    def get_languages(self, owner: str, repo: str) -> Optional[Dict[str, int]]:
        ...

    @abc.abstractmethod
    def get_first_commit(self, owner: str, repo: str, ref: str) -> Optional[Commit]:
        ...

    @abc.abstractmethod
    def get_latest_commit(self, owner: str, repo: str, ref: str) -> Optional[Commit]:
        ...

    @abc.abstractmethod
    def get_latest_release(self, owner: str, repo: str) -> Optional[Release]:
        ...

    @abc.abstractmethod
    def get_participation_stats(self, owner: str, repo: str) -> List[int]:
        ...


# ============================================================
# Pure helpers
# ============================================================

def compute_last_page(headers: Mapping[str, str]) -> int:
    """
    Last page of a per_page=1 listing, read from the total count header.

    With one item per page the total count is the last page number. No header
    means a single page. A header that isn't an integer is an error.
    """
    for name in TOTAL_COUNT_HEADERS:
        value = headers.get(name)
        if value is None:
            continue
        try:
            count = int(str(value).strip())
        except ValueError:
            raise GiteeApiError(f"failed to parse total count header {name}={value!r}") from None
        return max(count, 1)
    return 1


def commit_from(value: Mapping[str, Any]) -> Commit:
    commit = value.get("commit") or {}
    author = commit.get("author") or {}
    return Commit(
        url=str(value.get("html_url") or ""),
        ts=utils.parse_iso(author.get("date")),
    )


def release_from(value: Mapping[str, Any], *, owner: str, repo: str) -> Release:
    url = value.get("html_url")
    tag_name = value.get("tag_name") or ""
    if not url:
        url = f"https://{Config.gitee_host}/{owner}/{repo}/releases/tag/{tag_name}" if tag_name else ""
    return Release(url=str(url), ts=utils.parse_iso(value.get("created_at")))


def participation_week(commit_date: datetime, begin: datetime, weeks: int = Config.gitee_participation_weeks) -> Optional[int]:
    """
    Histogram slot for a commit date, or None when it falls outside the window.

    The window spans begin .. begin + 365 days; the day left over after the
    last full week is counted in the last slot.
    """
    end = begin + timedelta(days=365)
    if commit_date < begin or commit_date > end:
        return None
    return min((commit_date - begin).days // 7, weeks - 1)


def bucket_commit_weeks(
    commits: Iterable[Mapping[str, Any]],
    begin: datetime,
    histogram: Optional[List[int]] = None,
    weeks: int = Config.gitee_participation_weeks,
) -> List[int]:
    """Add the commits provided to a weekly histogram (a new one if none is given)."""
    if histogram is None:
        histogram = [0] * weeks
    for commit in commits:
        detail = commit.get("commit") if isinstance(commit, dict) else None
        author = detail.get("author") if isinstance(detail, dict) else None
        if not isinstance(author, dict):
            logger.debug(f"Malformed commit entry skipped: {str(commit)[:200]}")
            continue
        raw_date = author.get("date")
        if raw_date is None:
            logger.debug("Date field not found in commit data")
            continue
        commit_date = utils.parse_iso(raw_date)
        if commit_date is None:
            logger.debug(f"Error parsing commit date: {raw_date!r}")
            continue
        week = participation_week(commit_date, begin, weeks)
        if week is not None:
            histogram[week] += 1
    return histogram


# ============================================================
# requests backed implementation
# ============================================================

class GiteeApiClient(GiteeClient):
    def __init__(
        self,
        token: str,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base = (base_url or Config.gitee_api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else Config.gitee_request_timeout_seconds

        s = session or requests.Session()
        s.headers.update({
            "Accept": "application/json",
            "User-Agent": Config.gitee_user_agent,
            "Authorization": f"Bearer {token}",
        })
        self.session = s

    def _url(self, owner: str, repo: str, path: str = "") -> str:
        return f"{self.base}/repos/{owner}/{repo}{path}"

    def _get(self, url: str, *, params: Optional[dict] = None, allow_404: bool = False) -> Optional[requests.Response]:
        resp = self.session.get(url, params=params, timeout=self.timeout)
        if allow_404 and resp.status_code == 404:
            return None
        if not 200 <= resp.status_code < 300:
            logger.error(f"Gitee REST error {resp.status_code} for {url}: {resp.text[:300]}")
            raise GiteeApiError(f"Gitee REST error {resp.status_code} for {url}")
        return resp

    def _get_json(self, url: str, *, params: Optional[dict] = None, allow_404: bool = False) -> Any:
        """Decoded JSON body; None for a 404 when allow_404 is set."""
        resp = self._get(url, params=params, allow_404=allow_404)
        if resp is None:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise GiteeApiError(f"invalid JSON body from {url}: {e}") from e

    def get_repository(self, owner: str, repo: str) -> PartRepository:
        data = self._get_json(self._url(owner, repo))
        if not isinstance(data, dict):
            raise GiteeApiError(f"unexpected repository payload for {owner}/{repo}")

        raw_topics = data.get("topics")
        topics: List[str] = []
        if isinstance(raw_topics, list):
            for t in raw_topics:
                if isinstance(t, dict):
                    t = t.get("name")
                if isinstance(t, str) and t:
                    topics.append(t)

        raw_license = data.get("license")
        return PartRepository(
            default_branch=str(data.get("default_branch") or ""),
            description=str(data.get("description") or ""),
            license=raw_license if isinstance(raw_license, str) else None,
            stars=int(data.get("stargazers_count") or 0),
            topics=topics,
            html_url=str(data.get("html_url") or ""),
        )

    def get_contributors_count(self, owner: str, repo: str) -> int:
        data = self._get_json(self._url(owner, repo, "/contributors"), params={"type": "authors"})
        return len(data) if isinstance(data, list) else 0

    def get_license(self, owner: str, repo: str) -> str:
        data = self._get_json(self._url(owner, repo, "/license"))
        license_ = data.get("license") if isinstance(data, dict) else None
        return license_ if isinstance(license_, str) else ""

    def get_languages(self, owner: str, repo: str) -> Optional[Dict[str, int]]:
        # not every Gitee deployment serves language statistics
        data = self._get_json(self._url(owner, repo, "/languages"), allow_404=True)
        if not isinstance(data, dict):
            return None
        return {str(k): int(v) for k, v in data.items() if isinstance(v, (int, float))}

    def _commits_page(self, owner: str, repo: str, ref: str, page: int) -> List[dict]:
        data = self._get_json(
            self._url(owner, repo, "/commits"),
            params={"sha": ref, "per_page": 1, "page": page},
        )
        return data if isinstance(data, list) else []

    def get_first_commit(self, owner: str, repo: str, ref: str) -> Optional[Commit]:
        # Commits are listed newest first; with per_page=1 the total count is the
        # page holding the oldest one, so the first request only reads headers.
        head = self.session.head(
            self._url(owner, repo, "/commits"),
            params={"sha": ref, "per_page": 1, "page": 1},
            timeout=self.timeout,
        )
        last_page = compute_last_page(head.headers)

        commits = self._commits_page(owner, repo, ref, last_page)
        if not commits:
            return None
        return commit_from(commits[0])

    def get_latest_commit(self, owner: str, repo: str, ref: str) -> Optional[Commit]:
        commits = self._commits_page(owner, repo, ref, 1)
        if not commits:
            return None
        return commit_from(commits[0])

    def get_latest_release(self, owner: str, repo: str) -> Optional[Release]:
        data = self._get_json(
            self._url(owner, repo, "/releases"),
            params={"per_page": 1, "page": 1, "direction": "desc"},
        )
        if isinstance(data, list) and data:
            return release_from(data[0], owner=owner, repo=repo)
        return None

    def get_participation_stats(self, owner: str, repo: str) -> List[int]:
        begin = utils.now_utc() - timedelta(days=365)
        histogram = [0] * Config.gitee_participation_weeks
        page = 1
        # no "more pages" signal: keep going until a page comes back empty
        while True:
            data = self._get_json(
                self._url(owner, repo, "/commits"),
                params={
                    "per_page": Config.gitee_commits_page_size,
                    "page": page,
                    "since": utils.iso_z(begin),
                },
            )
            if not isinstance(data, list) or not data:
                break
            bucket_commit_weeks(data, begin, histogram)
            page += 1
        logger.debug(f"Collected participation stats for {owner}/{repo} over {page - 1} page(s)")
        return histogram
