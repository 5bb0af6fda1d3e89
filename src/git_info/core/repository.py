"""Read-only access to a git repository's authorship history."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, List, Optional

import git
from git import Repo

from git_info.core.config import GitInfoConfig, load_config
from git_info.core.exceptions import GitCommandFailed, RepositoryNotFound
from git_info.core.parser import (
    FILE_CHANGE_SHAPE,
    DiffHunkMap,
    find_file_status,
    log_shape,
    parse_blame,
    parse_blame_map,
    parse_diff,
    parse_records,
)
from git_info.models.blame import BlameLine, BlameTable
from git_info.models.change import FileChangeRecord, FileStatus
from git_info.models.commit import CommitRecord, FileHistoryEntry
from git_info.models.deletion import DeletionAttribution

logger = logging.getLogger(__name__)

LOG_FIELDS = ("%H", "%an", "%ai", "%s")


def find_repo_root(start: Path) -> Path:
    """Return the working tree root of the repository containing ``start``."""
    try:
        repo = Repo(Path(start), search_parent_directories=True)
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
        raise RepositoryNotFound(f"No git repository found at {start}") from e

    with repo:
        working_tree_dir = repo.working_tree_dir

    if working_tree_dir is None:
        raise RepositoryNotFound(f"{start} is inside a bare repository")
    return Path(working_tree_dir)


class GitInfoRepository:
    """Commits, blame and deleted-line authorship for one git working tree.

    The repository root is given explicitly; use ``find_repo_root`` to locate
    it from an arbitrary directory.
    """

    def __init__(self, project_root: Path, config: Optional[GitInfoConfig] = None):
        self.project_root = Path(project_root).resolve()
        self.config = config if config is not None else load_config(self.project_root)
        self._repo: Optional[Repo] = None

    @property
    def repo(self) -> Repo:
        """Get the git repository."""
        if self._repo is None:
            self._repo = Repo(self.project_root)
        return self._repo

    def close(self) -> None:
        """Release the git child processes held by the underlying repository."""
        if self._repo is not None:
            self._repo.close()
            self._repo = None

    def __enter__(self) -> "GitInfoRepository":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def run_git_command(self, args: List[str]) -> str:
        """Run a git command in the repository and return its output."""
        if not args:
            raise GitCommandFailed([], "No git command specified")

        command, command_args = args[0], args[1:]
        logger.debug("Running git %s", " ".join(args))
        try:
            git_method = getattr(self.repo.git, command)
            return git_method(*command_args)
        except git.exc.GitCommandError as e:
            raise GitCommandFailed(args, str(e.stderr)) from e

    def _log_format(self) -> str:
        return "--pretty=format:" + self.config.log_delimiter.join(LOG_FIELDS)

    def _log_args(self, limit: Optional[int] = None) -> List[str]:
        args = ["log", self._log_format()]
        limit = limit or self.config.log_limit
        if limit:
            args.append(f"--max-count={limit}")
        return args

    def get_commits(self, limit: Optional[int] = None) -> Iterator[CommitRecord]:
        """Commits reachable from HEAD, newest first."""
        output = self.run_git_command(self._log_args(limit))
        shape = log_shape(CommitRecord, self.config.timestamp_format)
        return parse_records(output, shape, self.config.log_delimiter)

    def get_latest_commit(self) -> Optional[CommitRecord]:
        """Newest commit on HEAD, or None while HEAD has no commits yet."""
        if not self.repo.head.is_valid():
            return None
        return next(iter(self.get_commits(limit=1)), None)

    def get_commit(self, commit_sha: str) -> Optional[CommitRecord]:
        """Log record of a single commit."""
        output = self.run_git_command(self._log_args(1) + [commit_sha])
        shape = log_shape(CommitRecord, self.config.timestamp_format)
        return next(parse_records(output, shape, self.config.log_delimiter), None)

    def get_commit_changes(self, commit_sha: str) -> Iterator[FileChangeRecord]:
        """Files added, modified, deleted or renamed by a commit."""
        output = self._get_name_status(commit_sha)
        return parse_records(output, FILE_CHANGE_SHAPE, "\t")

    def get_file_history(self, relative_path: str, limit: Optional[int] = None) -> Iterator[FileHistoryEntry]:
        """Commits that touched ``relative_path``, newest first."""
        output = self.run_git_command(self._log_args(limit) + ["--", relative_path])
        shape = log_shape(FileHistoryEntry, self.config.timestamp_format)
        return parse_records(output, shape, self.config.log_delimiter)

    def get_file_blame(self, relative_path: str) -> Iterator[BlameLine]:
        """Per-line authorship of ``relative_path`` at HEAD."""
        output = self.run_git_command(["blame", "--line-porcelain", "--", relative_path])
        return parse_blame(output)

    def get_deleted_lines_with_authors(
        self, commit_sha: str, file_path: Optional[str] = None
    ) -> Iterator[DeletionAttribution]:
        """Yield every line deleted by ``commit_sha`` with its original author.

        Added files are skipped, as are files that cannot be blamed at the
        parent revision. Deleted lines missing from the parent's blame are
        dropped rather than reported with a placeholder author.
        """
        deleted_by = self._get_deleted_by(commit_sha)
        file_diffs = self._get_file_diffs(commit_sha, file_path)
        name_status = self._get_name_status(commit_sha)
        commit_dates: Dict[str, Optional[datetime]] = {}

        for path, deleted_lines in file_diffs.items():
            status = find_file_status(name_status, path)
            if FileStatus.from_code(status) is FileStatus.ADDED:
                logger.debug("%s was added in %s, nothing to blame", path, commit_sha)
                continue

            blame_table = self._get_parent_commit_blame(commit_sha, path)
            if not blame_table:
                logger.debug("No blame available for %s before %s", path, commit_sha)
                continue

            for line_number, text in deleted_lines:
                entry = blame_table.get(line_number)
                if entry is None:
                    continue

                if entry.sha not in commit_dates:
                    commit_dates[entry.sha] = self._get_commit_date(entry.sha)

                yield DeletionAttribution(
                    line_number=line_number,
                    text=text,
                    file_path=path,
                    deleted_in=commit_sha,
                    deleted_by=deleted_by,
                    original_sha=entry.sha,
                    original_author=entry.author,
                    original_date=commit_dates[entry.sha],
                )

    def _get_deleted_by(self, commit_sha: str) -> str:
        return self.run_git_command(["show", "-s", "--format=%an", commit_sha]).strip()

    def _get_name_status(self, commit_sha: str) -> str:
        return self.run_git_command(["show", "--name-status", "--pretty=format:", commit_sha])

    def _get_file_diffs(self, commit_sha: str, file_path: Optional[str]) -> DiffHunkMap:
        args = ["show", commit_sha, "--no-color", "--unified=0", "--pretty=format:", "-p"]
        if file_path:
            args += ["--", file_path]
        return parse_diff(self.run_git_command(args))

    def _get_parent_commit_blame(self, commit_sha: str, path: str) -> BlameTable:
        try:
            output = self.run_git_command(["blame", "--line-porcelain", f"{commit_sha}^", "--", path])
        except GitCommandFailed as e:
            if e.is_missing_path:
                logger.debug("%s does not exist before %s", path, commit_sha)
                return {}
            raise
        return parse_blame_map(output)

    def _get_commit_date(self, commit_sha: str) -> Optional[datetime]:
        try:
            return self.repo.commit(commit_sha).committed_datetime
        except (ValueError, git.exc.BadName):
            return None
