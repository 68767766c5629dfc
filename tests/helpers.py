"""テスト用のフェイク実装と定数。"""

from collections.abc import Callable, Sequence
from typing import Any

from vigil.models.check import CheckResult
from vigil.models.git import GitContext
from vigil.models.report import TableColumn, TableRow

SCHEMA_SDL = """
type Query {
  me: User
  user(id: ID!): User
}

type User {
  id: ID!
  name: String
  email: String
}
"""

TARGET_URL = "https://engine.example.com/service/accounts/check/abc123"

ResultFactory = Callable[..., CheckResult]


class FakeEngine:
    """check_schemaの呼び出しを記録し、指定された結果を返すテスト用クライアント。"""

    def __init__(self, result: CheckResult | None = None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def check_schema(self, **kwargs: Any) -> CheckResult:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        assert self.result is not None
        return self.result


class RecordingSink:
    """出力内容を記録するテスト用LineSink。"""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.tables: list[tuple[tuple[TableColumn, ...], tuple[TableRow, ...]]] = []

    def echo(self, text: str = "") -> None:
        self.lines.append(text)

    def table(self, columns: Sequence[TableColumn], rows: Sequence[TableRow]) -> None:
        self.tables.append((tuple(columns), tuple(rows)))

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


async def empty_git_context() -> GitContext:
    return GitContext()
