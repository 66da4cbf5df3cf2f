import re
from typing import Iterable, List, Tuple, Union

from configuration import Configuration as Config
from models.landscape import LandscapeItem

# Gitee repository url, e.g. https://gitee.com/openharmony/docs
GITEE_REPO_URL = re.compile(
    rf"^https?://{re.escape(Config.gitee_host)}/(?P<owner>[^/\s]+)/(?P<repo>[^/\s]+)/?$"
)


def is_gitee_repo_url(url: str) -> bool:
    return bool(url) and GITEE_REPO_URL.match(url) is not None


def get_owner_and_repo(repo_url: str) -> Tuple[str, str]:
    """Extract (owner, repo) from a Gitee repository url."""
    m = GITEE_REPO_URL.match(repo_url or "")
    if not m:
        raise ValueError(f"invalid repository url: {repo_url!r}")
    return m.group("owner"), m.group("repo")


def find_repo_urls(items: Iterable[Union[LandscapeItem, str]]) -> List[str]:
    """
    Collect the Gitee repository urls of the landscape items provided.

    Plain url strings are accepted as well. Urls of other hosts are left out;
    the result is deduplicated and sorted so runs are reproducible.
    """
    urls = set()
    for item in items:
        candidates = [item] if isinstance(item, str) else item.repo_urls()
        for url in candidates:
            if is_gitee_repo_url(url):
                urls.add(url)
    return sorted(urls)
