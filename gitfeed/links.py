"""Link helpers for activity feed items.

All helpers are pure functions of their arguments.
"""

from urllib.parse import quote

from .models import Repository

# Sub-delimiters kept unescaped in a path segment; ! ' ( ) * , ; are encoded.
_PATH_SAFE = "$&+:=@"


def path_escape(segment: str) -> str:
    """Percent-encode a single path segment, including any '/'."""
    return quote(segment, safe=_PATH_SAFE)


def path_escape_segments(path: str) -> str:
    """Percent-encode every segment of a '/'-separated path, keeping the '/'."""
    return "/".join(path_escape(segment) for segment in path.split("/"))


def repo_link(app_sub_url: str, repo: Repository) -> str:
    return f"{app_sub_url}/{path_escape(repo.owner_name)}/{path_escape(repo.name)}"


def branch_link(repo_url: str, branch: str) -> str:
    return f"{repo_url}/src/branch/{path_escape_segments(branch)}"


def tag_link(repo_url: str, tag: str) -> str:
    return f"{repo_url}/src/tag/{path_escape_segments(tag)}"


def src_link(repo_url: str, ref_name: str) -> str:
    return f"{repo_url}/src/{path_escape_segments(ref_name)}"


def release_link(repo_url: str, tag: str) -> str:
    return f"{repo_url}/releases/tag/{path_escape_segments(tag)}"


def issue_link(repo_url: str, index: str) -> str:
    return f"{repo_url}/issues/{path_escape(index)}"


def pull_link(repo_url: str, index: str) -> str:
    return f"{repo_url}/pulls/{path_escape(index)}"


def commit_link(repo_url: str, sha: str) -> str:
    return f"{repo_url}/commit/{sha}"


def compare_link(app_sub_url: str, compare_url: str) -> str:
    return f"{app_sub_url}/{compare_url}"
