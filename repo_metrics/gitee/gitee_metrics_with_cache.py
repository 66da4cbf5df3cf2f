from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import utils
from configuration import Configuration as Config
from models.landscape import LandscapeItem
from models.repo import (
    CollectionResult,
    Contributors,
    RepositoryData,
    collection_from_json,
    collection_to_json,
)
from repo_metrics.cache import Cache, CacheError
from repo_metrics.gitee.client_pool import ClientPool
from repo_metrics.gitee.gitee_client import GiteeClient
from tools.repo_url_finder import find_repo_urls, get_owner_and_repo
from loggers.gitee_metrics_logger import gitee_metrics_logger as logger


# ----------------------------
# Single repository
# ----------------------------
def collect_repository_data(gt: GiteeClient, repo_url: str, *, now: Optional[datetime] = None) -> RepositoryData:
    """
    Collect one repository's data from Gitee.
    The first failing call aborts the whole repository.
    """
    owner, repo = get_owner_and_repo(repo_url)

    gt_repo = gt.get_repository(owner, repo)
    contributors_count = gt.get_contributors_count(owner, repo)
    license_ = gt.get_license(owner, repo)
    first_commit = gt.get_first_commit(owner, repo, gt_repo.default_branch)
    languages = gt.get_languages(owner, repo)
    latest_commit = gt.get_latest_commit(owner, repo, gt_repo.default_branch)
    latest_release = gt.get_latest_release(owner, repo)
    participation_stats = gt.get_participation_stats(owner, repo)

    return RepositoryData(
        url=gt_repo.html_url or repo_url,
        generated_at=now or utils.now_utc(),
        contributors=Contributors(
            count=contributors_count,
            url=f"https://{Config.gitee_host}/{owner}/{repo}/graphs/contributors",
        ),
        description=gt_repo.description,
        license=license_,
        stars=gt_repo.stars,
        topics=list(gt_repo.topics),
        languages=languages,
        first_commit=first_commit,
        latest_commit=latest_commit,
        latest_release=latest_release,
        participation_stats=list(participation_stats),
    )


# ----------------------------
# Cache helpers
# ----------------------------
def read_cached_data(cache: Cache) -> Optional[CollectionResult]:
    """Cached Gitee data, or None when it's absent, unreadable or corrupt."""
    try:
        cached = cache.read(Config.gitee_cache_file_name)
    except CacheError as e:
        logger.warning(f"error reading gitee cache file: {e}")
        return None
    if cached is None:
        return None

    _, json_data = cached
    try:
        return collection_from_json(json_data)
    except ValueError as e:
        logger.warning(f"error parsing gitee cache file: {e}")
        return None


def is_fresh(repo: RepositoryData, now: datetime, ttl_days: int = Config.gitee_cache_ttl_days) -> bool:
    return repo.generated_at + timedelta(days=ttl_days) > now


# ----------------------------
# Collection
# ----------------------------
def collect_gitee_data(
    cache: Cache,
    landscape_data: Iterable[Union[LandscapeItem, str]],
    tokens: Optional[Sequence[str]] = None,
    *,
    pool: Optional[ClientPool] = None,
    now: Optional[datetime] = None,
    carry_forward_stale: Optional[bool] = None,
) -> CollectionResult:
    """
    Collect Gitee data for each of the landscape repositories, reusing cached
    data whenever it's still fresh.

    Repositories that can't be collected are logged and left out; cache faults
    are logged too. The result (sorted by url) is written back to the cache.
    """
    logger.debug("collecting repositories information from gitee (this may take a while)")
    # records are stamped when fetched unless the caller pins the clock
    stamp = now
    now = now or utils.now_utc()
    if carry_forward_stale is None:
        carry_forward_stale = Config.gitee_carry_forward_stale

    cached_data = read_cached_data(cache) or {}

    # Setup Gitee API clients pool if any tokens have been provided
    if pool is None:
        pool = ClientPool.from_tokens(Config.gitee_tokens if tokens is None else tokens)
    if pool is None:
        logger.warning("gitee tokens not provided: no information will be collected from gitee")

    urls = find_repo_urls(landscape_data)

    def collect_one(url: str) -> RepositoryData:
        cached_repo = cached_data.get(url)
        if cached_repo is not None and is_fresh(cached_repo, now):
            return cached_repo
        if pool is None:
            raise RuntimeError("no tokens provided")
        with pool.acquire() as gt:
            return collect_repository_data(gt, url, now=stamp)

    results: Dict[str, RepositoryData] = {}
    errors: List[Tuple[str, Exception]] = []
    concurrency = pool.size if pool is not None else 1

    with ThreadPoolExecutor(max_workers=concurrency) as ex:
        fut_map = {ex.submit(collect_one, url): url for url in urls}
        for fut in as_completed(fut_map):
            url = fut_map[fut]
            try:
                results[url] = fut.result()
            except Exception as e:
                errors.append((url, e))

    for url, e in sorted(errors, key=lambda x: x[0]):
        stale = cached_data.get(url)
        if carry_forward_stale and stale is not None:
            logger.warning(f"error collecting gitee data for {url}, keeping stale cache entry: {e}")
            results[url] = stale
        else:
            logger.warning(f"error collecting gitee data for {url}: {e}")

    gitee_data: CollectionResult = {url: results[url] for url in sorted(results)}

    # Write data (in json format) to cache
    try:
        cache.write(Config.gitee_cache_file_name, collection_to_json(gitee_data))
    except CacheError as e:
        logger.warning(f"error writing gitee cache file: {e}")

    logger.info(f"collected gitee data for {len(gitee_data)}/{len(urls)} repositories ({len(errors)} failed)")
    return gitee_data
