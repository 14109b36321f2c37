"""
Historian: per-file commit history from git.

The git walk is blocking, so it runs in a worker thread and is abandoned
after `history_timeout_seconds`. No repository, a git failure or a
timeout all leave the history finding absent.
"""

import asyncio
import os
from collections import OrderedDict
from typing import Dict, List

import git

from ..knowledge import Collaborator, FileHistory, HistoryFinding
from .base import Agent


class HistorianAgent(Agent):
    collaborator = Collaborator.HISTORIAN
    priority = 4

    async def explore(self, workspace_path: str) -> None:
        self.log("Starting historical analysis...")

        try:
            history = await asyncio.wait_for(
                asyncio.to_thread(self.mine_history, workspace_path),
                timeout=self.config.history_timeout_seconds,
            )
        except asyncio.TimeoutError:
            self.log(
                f"Git history timed out after {self.config.history_timeout_seconds}s. "
                f"Skipping."
            )
            return
        except (git.InvalidGitRepositoryError, git.NoSuchPathError):
            self.log(f"No git repo found at {workspace_path}. Skipping.")
            return
        except (git.GitCommandError, ValueError) as e:
            # ValueError: repository without any commits yet
            self.log(f"Failed to read git history: {e}")
            return

        self.knowledge.store(HistoryFinding(files=history))
        self.log(f"History analysis complete. Analyzed {len(history)} files.")

    def mine_history(self, workspace_path: str) -> List[FileHistory]:
        """Walk recent commits and aggregate them per file (blocking)."""
        repo = git.Repo(workspace_path, search_parent_directories=True)
        work_tree = repo.working_tree_dir or workspace_path

        commits: Dict[str, int] = OrderedDict()
        authors: Dict[str, List[str]] = {}
        last_modified = {}

        for commit in repo.iter_commits(max_count=self.config.history_max_commits):
            author = commit.author.name if commit.author else "unknown"
            committed = commit.committed_datetime

            try:
                if commit.parents:
                    diffs = commit.parents[0].diff(commit)
                else:
                    diffs = commit.diff(git.NULL_TREE)
            except (git.GitCommandError, ValueError) as e:
                self.log(f"Skipping commit {commit.hexsha[:8]}: {e}")
                continue

            for diff in diffs:
                relative = diff.b_path or diff.a_path
                if not relative:
                    continue
                path = os.path.normpath(os.path.join(work_tree, relative))

                commits[path] = commits.get(path, 0) + 1
                file_authors = authors.setdefault(path, [])
                if author not in file_authors:
                    file_authors.append(author)
                if path not in last_modified or committed > last_modified[path]:
                    last_modified[path] = committed

        return [
            FileHistory(
                file=path,
                commits=count,
                authors=authors[path],
                last_modified=last_modified.get(path),
            )
            for path, count in commits.items()
        ]
