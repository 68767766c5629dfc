"""Gitリポジトリからコミット情報を取得する。"""

import asyncio
import logging
import os
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

from vigil.models.git import GitContext

logger = logging.getLogger(__name__)

# detached HEAD（CI環境）の場合にブランチ名を探す環境変数
_CI_BRANCH_ENV_VARS = ("GITHUB_HEAD_REF", "GITHUB_REF_NAME", "CI_COMMIT_REF_NAME", "CIRCLE_BRANCH", "BRANCH_NAME")


async def _run_git(args: list[str], cwd: Path | None) -> str | None:
    """gitコマンドを実行し、標準出力を返す。失敗時はNone。"""
    try:
        proc = await asyncio.create_subprocess_exec(
            "git",
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
        )
    except OSError as e:
        logger.debug("git is not available: %s", e)
        return None

    stdout_bytes, stderr_bytes = await proc.communicate()
    if proc.returncode != 0:
        logger.debug("git %s failed: %s", " ".join(args), stderr_bytes.decode("utf-8", errors="replace").strip())
        return None
    output = stdout_bytes.decode("utf-8", errors="replace").strip()
    return output or None


def sanitize_remote_url(url: str | None) -> str | None:
    """リモートURLから認証情報（user:password@）を取り除く。"""
    if not url or "://" not in url:
        return url
    parts = urlsplit(url)
    netloc = parts.netloc.rpartition("@")[2]
    return urlunsplit(parts._replace(netloc=netloc))


def _ci_branch() -> str | None:
    for name in _CI_BRANCH_ENV_VARS:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return None


async def git_info(cwd: Path | None = None) -> GitContext:
    """カレントリポジトリのコミット情報を取得する。

    gitが無い、またはリポジトリ外の場合は空のGitContextを返し、例外は送出しない。
    """
    commit, branch, committer, message, remote_url = await asyncio.gather(
        _run_git(["rev-parse", "HEAD"], cwd),
        _run_git(["rev-parse", "--abbrev-ref", "HEAD"], cwd),
        _run_git(["log", "-1", "--pretty=format:%an <%ae>"], cwd),
        _run_git(["log", "-1", "--pretty=format:%B"], cwd),
        _run_git(["config", "--get", "remote.origin.url"], cwd),
    )
    if branch is None or branch == "HEAD":
        branch = _ci_branch() if commit else None

    context = GitContext(
        commit=commit,
        branch=branch,
        committer=committer,
        message=message,
        remote_url=sanitize_remote_url(remote_url),
    )
    if context.is_empty():
        logger.info("No git context available; checking without commit metadata")
    return context
