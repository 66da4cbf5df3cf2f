from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import utils
from models.repo import RepositoryData, repo_to_dict


@dataclass
class LandscapeRepository:
    url: str
    primary: bool = False
    branch: Optional[str] = None
    gitee_data: Optional[RepositoryData] = None


@dataclass
class LandscapeItem:
    name: str
    category: str = ""
    subcategory: str = ""
    description: str = ""
    repositories: Optional[List[LandscapeRepository]] = None

    def repo_urls(self) -> List[str]:
        return [r.url for r in (self.repositories or []) if r.url]

    def primary_repository(self) -> Optional[LandscapeRepository]:
        if not self.repositories:
            return None
        for repo in self.repositories:
            if repo.primary:
                return repo
        return self.repositories[0]


def _repository_from(raw: Any) -> Optional[LandscapeRepository]:
    # a bare string is shorthand for {"url": ...}
    if isinstance(raw, str):
        return LandscapeRepository(url=raw.strip()) if raw.strip() else None
    if isinstance(raw, dict) and isinstance(raw.get("url"), str):
        return LandscapeRepository(
            url=raw["url"].strip(),
            primary=bool(raw.get("primary", False)),
            branch=raw.get("branch"),
        )
    return None


def item_from_dict(d: Dict[str, Any]) -> LandscapeItem:
    raw_repos = d.get("repositories")
    repositories: Optional[List[LandscapeRepository]] = None
    if isinstance(raw_repos, list):
        repositories = [r for r in (_repository_from(x) for x in raw_repos) if r is not None]

    return LandscapeItem(
        name=str(d.get("name") or ""),
        category=str(d.get("category") or ""),
        subcategory=str(d.get("subcategory") or ""),
        description=str(d.get("description") or ""),
        repositories=repositories,
    )


def item_to_dict(item: LandscapeItem) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "name": item.name,
        "category": item.category,
        "subcategory": item.subcategory,
        "description": item.description,
    }
    if item.repositories is not None:
        repos = []
        for r in item.repositories:
            rd: Dict[str, Any] = {"url": r.url, "primary": r.primary}
            if r.branch:
                rd["branch"] = r.branch
            if r.gitee_data is not None:
                rd["gitee_data"] = repo_to_dict(r.gitee_data)
            repos.append(rd)
        d["repositories"] = repos
    return d


def load_landscape_items(path: Union[str, Path]) -> List[LandscapeItem]:
    """
    Load landscape items from a JSON file holding either a list of items
    or an object with an "items" list.
    """
    data = utils.read_json_file(path)
    if isinstance(data, dict):
        data = data.get("items")
    if not isinstance(data, list):
        raise ValueError(f"No landscape items list found in {path}")
    return [item_from_dict(d) for d in data if isinstance(d, dict)]


def dump_landscape_items(items: List[LandscapeItem], path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {"items": [item_to_dict(i) for i in items]}
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return path
