"""バージョン管理情報のデータモデル。"""

from pydantic import BaseModel, ConfigDict, Field


class GitContext(BaseModel):
    """チェック対象のコミット情報。取得できない項目はNone。"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    commit: str | None = None
    branch: str | None = None
    committer: str | None = None
    message: str | None = None
    remote_url: str | None = Field(default=None, alias="remoteUrl")

    def is_empty(self) -> bool:
        return not any((self.commit, self.branch, self.committer, self.message, self.remote_url))
