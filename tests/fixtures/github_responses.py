"""Mock GitHub API response fixtures.

These fixtures represent realistic GitHub REST API responses for testing
schema parsing and client behavior. Structure matches the GitHub REST API v3.

See: https://docs.github.com/en/rest/search/search#search-issues-and-pull-requests
"""

from tests.conftest import JAN_10_ISO, JAN_12_ISO, JAN_15_ISO, JAN_16_ISO

# -----------------------------------------------------------------------------
# User Response
# -----------------------------------------------------------------------------
GITHUB_USER_PROFILE_RESPONSE = {
    "login": "octocat",
    "id": 583231,
    "type": "User",
    "name": "The Octocat",
    "avatar_url": "https://avatars.githubusercontent.com/u/583231?v=4",
    "public_repos": 8,
}

# -----------------------------------------------------------------------------
# Search Response
# -----------------------------------------------------------------------------
GITHUB_SEARCH_RESPONSE = {
    "total_count": 2,
    "incomplete_results": False,
    "items": [
        {
            "id": 2001,
            "number": 12,
            "title": "Add retry to uploader",
            "html_url": "https://github.com/octo/repo/pull/12",
            "comments_url": "https://api.github.com/repos/octo/repo/issues/12/comments",
            "state": "closed",
            "comments": 3,
            "draft": False,
            "user": {"login": "octocat", "id": 583231, "type": "User"},
            "labels": [{"id": 1, "name": "enhancement", "color": "a2eeef"}],
            "pull_request": {
                "url": "https://api.github.com/repos/octo/repo/pulls/12",
                "html_url": "https://github.com/octo/repo/pull/12",
                "merged_at": JAN_12_ISO,
            },
            "created_at": JAN_10_ISO,
            "closed_at": JAN_12_ISO,
            "score": 1.0,
        },
        {
            "id": 2002,
            "number": 15,
            "title": "Fix flaky test",
            "html_url": "https://github.com/octo/other/pull/15",
            "comments_url": "https://api.github.com/repos/octo/other/issues/15/comments",
            "state": "open",
            "comments": 0,
            "draft": True,
            "user": {"login": "octocat", "id": 583231, "type": "User"},
            "labels": [],
            "pull_request": {
                "url": "https://api.github.com/repos/octo/other/pulls/15",
                "html_url": "https://github.com/octo/other/pull/15",
                "merged_at": None,
            },
            "created_at": JAN_15_ISO,
            "closed_at": None,
            "score": 1.0,
        },
    ],
}

# -----------------------------------------------------------------------------
# Comment Responses
# -----------------------------------------------------------------------------
GITHUB_ISSUE_COMMENTS_RESPONSE = [
    {
        "id": 7001,
        "body": "Can we add a test for the timeout path?",
        "user": {"login": "reviewer", "id": 9001, "type": "User"},
        "created_at": JAN_15_ISO,
        "author_association": "MEMBER",
    },
    {
        "id": 7002,
        "body": "LGTM",
        "user": {"login": "lead", "id": 9002, "type": "User"},
        "created_at": JAN_16_ISO,
        "author_association": "MEMBER",
    },
]

GITHUB_REVIEW_COMMENTS_RESPONSE = [
    {
        "id": 8001,
        "body": "This allocates on every call.",
        "user": {"login": "reviewer", "id": 9001, "type": "User"},
        "created_at": JAN_16_ISO,
        "path": "uploader/retry.py",
        "line": 42,
    },
]

# -----------------------------------------------------------------------------
# Rate Limit Headers
# -----------------------------------------------------------------------------
RATE_LIMIT_HEADERS_HEALTHY = {
    "x-ratelimit-limit": "5000",
    "x-ratelimit-remaining": "4500",
    "x-ratelimit-used": "500",
    "x-ratelimit-reset": "1893456000",
    "x-ratelimit-resource": "core",
}

RATE_LIMIT_HEADERS_LOW = {
    "x-ratelimit-limit": "5000",
    "x-ratelimit-remaining": "100",
    "x-ratelimit-used": "4900",
    "x-ratelimit-reset": "1893456000",
    "x-ratelimit-resource": "core",
}

RATE_LIMIT_HEADERS_SEARCH_EXHAUSTED = {
    "x-ratelimit-limit": "30",
    "x-ratelimit-remaining": "0",
    "x-ratelimit-used": "30",
    "x-ratelimit-reset": "1893456000",
    "x-ratelimit-resource": "search",
}
