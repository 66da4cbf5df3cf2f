"""Tests for the Gitee repository url finder."""

import pytest

from models.landscape import LandscapeItem, LandscapeRepository
from tools.repo_url_finder import find_repo_urls, get_owner_and_repo, is_gitee_repo_url


def _item(name, *urls):
    return LandscapeItem(name=name, repositories=[LandscapeRepository(url=u) for u in urls])


def test_non_gitee_urls_are_excluded():
    items = [
        _item("a", "https://github.com/cncf/landscape", "https://gitee.com/openharmony/docs"),
        _item("b", "https://gitlab.com/group/project", "https://gitee.com/mindspore/mindspore/"),
    ]

    urls = find_repo_urls(items)

    assert urls == ["https://gitee.com/mindspore/mindspore/", "https://gitee.com/openharmony/docs"]
    assert all("gitee.com" in u for u in urls)


def test_duplicates_across_items_are_yielded_once_and_sorted():
    items = [
        _item("a", "https://gitee.com/zeta/repo", "https://gitee.com/alpha/repo"),
        _item("b", "https://gitee.com/alpha/repo"),
        LandscapeItem(name="no repos"),
    ]

    assert find_repo_urls(items) == ["https://gitee.com/alpha/repo", "https://gitee.com/zeta/repo"]


def test_plain_url_strings_are_accepted():
    urls = find_repo_urls(["https://gitee.com/o/r", "https://example.com/o/r", "https://gitee.com/o/r"])
    assert urls == ["https://gitee.com/o/r"]


@pytest.mark.parametrize("url", [
    "https://gitee.com/owner",
    "https://gitee.com/owner/repo/tree/master",
    "https://gitee.com.evil.org/owner/repo",
    "",
])
def test_url_pattern_rejects_non_repository_urls(url):
    assert not is_gitee_repo_url(url)


def test_get_owner_and_repo():
    assert get_owner_and_repo("https://gitee.com/openharmony/docs/") == ("openharmony", "docs")
    with pytest.raises(ValueError):
        get_owner_and_repo("https://github.com/openharmony/docs")
