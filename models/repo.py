from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import utils

PARTICIPATION_WEEKS = 52


@dataclass(frozen=True)
class Commit:
    url: str
    ts: Optional[datetime] = None


@dataclass(frozen=True)
class Release:
    url: str
    ts: Optional[datetime] = None


@dataclass(frozen=True)
class Contributors:
    count: int
    url: str


@dataclass(frozen=True)
class RepositoryData:
    """Metadata collected from Gitee for one landscape repository."""
    url: str
    generated_at: datetime
    contributors: Contributors
    description: str = ""
    license: Optional[str] = None
    stars: int = 0
    topics: List[str] = field(default_factory=list)
    languages: Optional[Dict[str, int]] = None
    first_commit: Optional[Commit] = None
    latest_commit: Optional[Commit] = None
    latest_release: Optional[Release] = None
    participation_stats: List[int] = field(default_factory=lambda: [0] * PARTICIPATION_WEEKS)

    @property
    def primary_language(self) -> Optional[str]:
        if not self.languages:
            return None
        # most bytes wins, name breaks ties
        return min(self.languages.items(), key=lambda kv: (-kv[1], kv[0]))[0]


# url -> RepositoryData
CollectionResult = Dict[str, RepositoryData]


# ============================================================
# Dataclass <-> dict helpers (for cache round-trip)
# ============================================================

def _ts_to_str(ts: Optional[datetime]) -> Optional[str]:
    return utils.iso_z(ts) if ts is not None else None


def _link_to_dict(link: Optional[Any]) -> Optional[Dict[str, Any]]:
    if link is None:
        return None
    return {"url": link.url, "ts": _ts_to_str(link.ts)}


def _commit_from(d: Any) -> Optional[Commit]:
    if d is None:
        return None
    if not isinstance(d, dict):
        raise ValueError(f"invalid commit entry: {d!r}")
    return Commit(url=str(d.get("url") or ""), ts=utils.parse_iso(d.get("ts")))


def _release_from(d: Any) -> Optional[Release]:
    if d is None:
        return None
    if not isinstance(d, dict):
        raise ValueError(f"invalid release entry: {d!r}")
    return Release(url=str(d.get("url") or ""), ts=utils.parse_iso(d.get("ts")))


def repo_to_dict(repo: RepositoryData) -> Dict[str, Any]:
    return {
        "url": repo.url,
        "generated_at": utils.iso_z(repo.generated_at),
        "contributors": {"count": repo.contributors.count, "url": repo.contributors.url},
        "description": repo.description,
        "first_commit": _link_to_dict(repo.first_commit),
        "languages": dict(sorted(repo.languages.items())) if repo.languages is not None else None,
        "latest_commit": _link_to_dict(repo.latest_commit),
        "latest_release": _link_to_dict(repo.latest_release),
        "license": repo.license,
        "participation_stats": list(repo.participation_stats),
        "stars": repo.stars,
        "topics": list(repo.topics),
    }


def repo_from_dict(d: Dict[str, Any]) -> RepositoryData:
    """
    Rebuild a RepositoryData from its cached dict form.
    Raises ValueError when a required field is missing or has the wrong shape.
    """
    if not isinstance(d, dict):
        raise ValueError(f"invalid repository entry: {d!r}")

    generated_at = utils.parse_iso(d.get("generated_at"))
    if generated_at is None:
        raise ValueError(f"missing or invalid generated_at: {d.get('generated_at')!r}")

    url = d.get("url")
    if not isinstance(url, str) or not url:
        raise ValueError(f"missing or invalid url: {url!r}")

    raw_contributors = d.get("contributors")
    if not isinstance(raw_contributors, dict):
        raise ValueError(f"invalid contributors entry for {url}")

    stats = d.get("participation_stats")
    if not isinstance(stats, list) or len(stats) != PARTICIPATION_WEEKS:
        raise ValueError(f"participation_stats for {url} must hold {PARTICIPATION_WEEKS} entries")

    languages = d.get("languages")
    if languages is not None and not isinstance(languages, dict):
        raise ValueError(f"invalid languages entry for {url}")

    try:
        return RepositoryData(
            url=url,
            generated_at=generated_at,
            contributors=Contributors(
                count=int(raw_contributors.get("count") or 0),
                url=str(raw_contributors.get("url") or ""),
            ),
            description=str(d.get("description") or ""),
            license=d.get("license"),
            stars=int(d.get("stars") or 0),
            topics=[str(t) for t in (d.get("topics") or [])],
            languages={str(k): int(v) for k, v in languages.items()} if languages is not None else None,
            first_commit=_commit_from(d.get("first_commit")),
            latest_commit=_commit_from(d.get("latest_commit")),
            latest_release=_release_from(d.get("latest_release")),
            participation_stats=[int(v) for v in stats],
        )
    except (TypeError, AttributeError) as e:
        raise ValueError(f"invalid repository entry for {url}: {e}") from e


def collection_to_json(data: CollectionResult) -> bytes:
    """Serialize a CollectionResult, sorted by url so equal results give equal bytes."""
    payload = {url: repo_to_dict(data[url]) for url in sorted(data)}
    return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")


def collection_from_json(raw: bytes) -> CollectionResult:
    try:
        payload = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"invalid gitee data payload: {e}") from e
    if not isinstance(payload, dict):
        raise ValueError("gitee data payload must be a JSON object keyed by repository url")
    return {str(url): repo_from_dict(entry) for url, entry in payload.items()}
