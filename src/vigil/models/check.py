"""サービスチェック関連のデータモデル。"""

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Severity(StrEnum):
    """変更の重大度。FAILUREのみがチェックを失敗させる。"""

    NOTICE = "NOTICE"
    WARNING = "WARNING"
    FAILURE = "FAILURE"


class Change(BaseModel):
    """スキーマ差分として検出された個別の変更。"""

    model_config = ConfigDict(frozen=True)

    type: Severity
    code: str
    description: str


class ValidationWindow(BaseModel):
    """検証対象の期間。現在時刻からの秒オフセット（0以下）で表す。"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: int = Field(alias="from")
    to: int = 0

    @model_validator(mode="after")
    def _check_bounds(self) -> "ValidationWindow":
        if self.to > 0:
            raise ValueError(f"window end must not be in the future: to={self.to}")
        if self.from_ > self.to:
            raise ValueError(f"window start must not be after its end: from={self.from_}, to={self.to}")
        return self

    @property
    def span_seconds(self) -> int:
        return abs(self.to - self.from_)


class AbsoluteCount(BaseModel):
    """期間内のリクエスト数の下限。"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["count"] = "count"
    value: int = Field(ge=1)


class Percentage(BaseModel):
    """総リクエスト数に対する割合の下限（0〜0.05）。"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["percentage"] = "percentage"
    value: float = Field(ge=0, le=0.05)


QueryThreshold = Annotated[AbsoluteCount | Percentage, Field(discriminator="kind")]


class HistoricParameters(BaseModel):
    """過去のオペレーション利用状況を絞り込むパラメータ。

    windowがNoneの場合、チェックサービス側のデフォルト期間が使われる。
    """

    model_config = ConfigDict(frozen=True)

    window: ValidationWindow | None = None
    threshold: QueryThreshold | None = None

    def to_variables(self) -> dict[str, Any]:
        """チェックサービスのHistoricQueryParameters入力に変換する。"""
        variables: dict[str, Any] = {}
        if self.window is not None:
            variables.update(self.window.model_dump(by_alias=True))
        if isinstance(self.threshold, AbsoluteCount):
            variables["queryCountThreshold"] = self.threshold.value
        elif isinstance(self.threshold, Percentage):
            variables["queryCountThresholdPercentage"] = self.threshold.value
        return variables


class CheckResult(BaseModel):
    """チェックサービスが返すスキーマチェック結果。"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    target_url: str | None = Field(default=None, alias="targetUrl")
    affected_query_count: int = Field(default=0, ge=0, alias="affectedQueryCount")
    changes: tuple[Change, ...] = ()
    window: ValidationWindow


class ChangeSummary(BaseModel):
    """重大度に基づく変更の集計結果。"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    breaking: tuple[Change, ...]
    total: int
    breaking_count: int = Field(alias="breakingCount")

    @property
    def has_blocking_changes(self) -> bool:
        return self.breaking_count > 0
