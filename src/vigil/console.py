"""端末への行出力（テーブル・色付きテキスト）。"""

from collections.abc import Sequence
from typing import Protocol

import click

from vigil.models.report import Emphasis, OutputMode, Report, TableColumn, TableRow

_COLORS: dict[Emphasis, str] = {
    "failure": "red",
    "warning": "yellow",
}

_COLUMN_GAP = "  "


def _cell(row: TableRow, key: str) -> str:
    return " ".join(getattr(row, key).splitlines())


class LineSink(Protocol):
    """整形済みのテキストやテーブル行を出力先に書き出す。"""

    def echo(self, text: str = "") -> None: ...

    def table(self, columns: Sequence[TableColumn], rows: Sequence[TableRow]) -> None: ...


class ClickSink:
    """click経由で標準出力に書き出すLineSink。強調指示は色で表現する。"""

    def __init__(self, color: bool | None = None) -> None:
        self._color = color

    def echo(self, text: str = "") -> None:
        click.echo(text, color=self._color)

    def table(self, columns: Sequence[TableColumn], rows: Sequence[TableRow]) -> None:
        """列幅を揃えてテーブルを出力する。

        セル内の改行は空白にまとめる。列幅は文字数で数えるため、全角文字を含むと揃わない。
        """
        cells = [[_cell(row, column.key) for column in columns] for row in rows]
        widths = [max([len(column.label), *(len(line[i]) for line in cells)]) for i, column in enumerate(columns)]

        self.echo(_COLUMN_GAP.join(column.label.ljust(width) for column, width in zip(columns, widths)).rstrip())
        self.echo(_COLUMN_GAP.join("─" * width for width in widths))
        for row, values in zip(rows, cells):
            line = _COLUMN_GAP.join(value.ljust(width) for value, width in zip(values, widths)).rstrip()
            if row.emphasis is not None:
                line = click.style(line, fg=_COLORS[row.emphasis])
            self.echo(line)


def render_report(report: Report, sink: LineSink) -> None:
    """レポートを出力先に書き出す。"""
    if report.mode is not OutputMode.TABLE:
        sink.echo(report.body.rstrip("\n"))
        return

    sink.echo()
    if not report.rows:
        sink.echo(report.body)
        sink.echo()
        return

    sink.table(report.columns, report.rows)
    sink.echo()
    if report.footer:
        sink.echo(report.footer)
