"""スキーマ変更の重大度分類。"""

from collections.abc import Iterable

from vigil.models.check import Change, ChangeSummary, Severity


def classify(changes: Iterable[Change]) -> ChangeSummary:
    """変更一覧から破壊的変更（FAILURE）を抽出し、件数を集計する。

    入力の順序は保持される。WARNINGは集計上の扱いに影響しない。
    """
    snapshot = tuple(changes)
    breaking = tuple(change for change in snapshot if change.type is Severity.FAILURE)
    return ChangeSummary(breaking=breaking, total=len(snapshot), breaking_count=len(breaking))


def count_by_severity(changes: Iterable[Change]) -> dict[Severity, int]:
    """重大度ごとの変更件数を返す。件数0の重大度も含む。"""
    counts = {severity: 0 for severity in Severity}
    for change in changes:
        counts[change.type] += 1
    return counts
