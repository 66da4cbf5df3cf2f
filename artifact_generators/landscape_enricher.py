from __future__ import annotations

from pathlib import Path
from typing import List, Union

from models.landscape import LandscapeItem
from models.repo import CollectionResult, collection_to_json


def enrich_landscape_items(items: List[LandscapeItem], gitee_data: CollectionResult) -> int:
    """
    Attach the collected Gitee data to the matching item repositories.

    Items without a description take the one of their primary repository.
    Returns the number of repositories enriched.
    """
    enriched = 0
    for item in items:
        for repo in item.repositories or []:
            data = gitee_data.get(repo.url)
            if data is None:
                continue
            repo.gitee_data = data
            enriched += 1

        if not item.description:
            primary = item.primary_repository()
            if primary is not None and primary.gitee_data is not None and primary.gitee_data.description:
                item.description = primary.gitee_data.description
    return enriched


def write_gitee_data_json(gitee_data: CollectionResult, output_path: Union[str, Path]) -> Path:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(collection_to_json(gitee_data))
    return path
