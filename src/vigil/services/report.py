"""チェック結果のレポート整形（JSON・Markdown・テーブル）。"""

import json
import math

from vigil.models.check import Change, CheckResult, Severity
from vigil.models.report import Emphasis, OutputMode, Report, TableColumn, TableRow
from vigil.services.classifier import classify

NO_CHANGES_MESSAGE = "No changes present between schemas"

TABLE_COLUMNS: tuple[TableColumn, ...] = (
    TableColumn(key="change", label="Change"),
    TableColumn(key="code", label="Code"),
    TableColumn(key="description", label="Description"),
)

_EMPHASIS: dict[Severity, Emphasis] = {
    Severity.FAILURE: "failure",
    Severity.WARNING: "warning",
}

_SECONDS_PER_DAY = 86400


def format_report(
    result: CheckResult,
    mode: OutputMode,
    *,
    service_name: str = "",
    tag: str = "",
) -> Report:
    """チェック結果を指定された形式のレポートに変換する。

    Args:
        result: チェックサービスの結果。
        mode: 出力形式。
        service_name: Markdownに記載するサービス名。
        tag: Markdownに記載するスキーマタグ。

    Returns:
        整形済みレポート。
    """
    has_blocking = classify(result.changes).has_blocking_changes
    if mode is OutputMode.JSON:
        return Report(mode=mode, body=format_json(result), has_blocking_changes=has_blocking)
    if mode is OutputMode.MARKDOWN:
        body = format_markdown(result, service_name=service_name, tag=tag)
        return Report(mode=mode, body=body, has_blocking_changes=has_blocking)
    return _format_table(result, has_blocking)


def format_json(result: CheckResult) -> str:
    """jqなどで扱えるJSON文書を返す。変更一覧は省略しない。"""
    document = {
        "targetUrl": result.target_url,
        "changes": [change.model_dump(mode="json") for change in result.changes],
        "window": result.window.model_dump(mode="json", by_alias=True),
    }
    return json.dumps(document, indent=2)


def elapsed_days(result: CheckResult) -> int:
    """検証期間の日数（切り上げ）。オフセットの符号に関わらず非負。"""
    return math.ceil(result.window.span_seconds / _SECONDS_PER_DAY)


def format_markdown(result: CheckResult, *, service_name: str, tag: str) -> str:
    """PRコメントなどに貼り付けるMarkdown文書を返す。"""
    days = elapsed_days(result)
    period = "day" if days == 1 else f"{days} days"
    summary = classify(result.changes)

    lines = [
        "### Service Check",
        f"🔄 Validated your local schema against schema tag '{tag}' on service '{service_name}'.",
        f"🔢 Compared **{summary.total} schema changes** against operations seen over the **last {period}**.",
    ]
    if summary.has_blocking_changes:
        lines.append(
            f"❌ Found **{summary.breaking_count} breaking changes** "
            f"that would affect **{result.affected_query_count} operations**"
        )
    else:
        lines.append("✅ Found **no breaking changes**.")

    if result.target_url:
        lines.append("")
        lines.append(f"🔗 [View your service check details]({result.target_url}).")

    return "\n".join(lines) + "\n"


def _format_row(change: Change) -> TableRow:
    return TableRow(
        change=change.type.value,
        code=change.code,
        description=change.description,
        emphasis=_EMPHASIS.get(change.type),
    )


def _format_table(result: CheckResult, has_blocking: bool) -> Report:
    if not result.changes:
        return Report(mode=OutputMode.TABLE, body=NO_CHANGES_MESSAGE, has_blocking_changes=has_blocking)

    footer = f"View full details at: {result.target_url}" if result.target_url else None
    return Report(
        mode=OutputMode.TABLE,
        columns=TABLE_COLUMNS,
        rows=tuple(_format_row(change) for change in result.changes),
        footer=footer,
        has_blocking_changes=has_blocking,
    )
