"""Git working copy operations.

Usage:
    from relcat.core.result import Ok
    from relcat.git import Repository

    repo = Repository(catalog_dir, default_branch="main")
    status = repo.status()
    if isinstance(status, Ok):
        print(f"Branch: {status.unwrap().branch}")
"""

from .repository import GitProvider, GitStatus, Repository, StatusEntry

__all__ = [
    "GitProvider",
    "GitStatus",
    "Repository",
    "StatusEntry",
]
