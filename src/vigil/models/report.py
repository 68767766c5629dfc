"""レポート出力関連のデータモデル。"""

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict

Emphasis = Literal["failure", "warning"]


class OutputMode(StrEnum):
    """レポートの出力形式。CLIの境界で1つだけ選ばれる。"""

    JSON = "json"
    MARKDOWN = "markdown"
    TABLE = "table"


class TableColumn(BaseModel):
    """テーブル出力の列定義。"""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str


class TableRow(BaseModel):
    """テーブル出力の1行。emphasisは描画側への強調指示。"""

    model_config = ConfigDict(frozen=True)

    change: str
    code: str
    description: str
    emphasis: Emphasis | None = None


class Report(BaseModel):
    """チェック結果を1つの出力形式で描画したもの。

    JSON/Markdownではbodyに文書全体が入る。
    テーブルではrowsに行が入り、変更が無い場合はbodyにメッセージのみが入る。
    """

    model_config = ConfigDict(frozen=True)

    mode: OutputMode
    body: str = ""
    columns: tuple[TableColumn, ...] = ()
    rows: tuple[TableRow, ...] = ()
    footer: str | None = None
    has_blocking_changes: bool = False
