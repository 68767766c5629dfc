"""履歴パラメータ（検証期間・閾値）のバリデーションロジック。"""

import math
import re

from vigil.models.check import AbsoluteCount, HistoricParameters, Percentage, ValidationWindow
from vigil.models.errors import ConflictingThresholdsError, InvalidDurationError, ThresholdOutOfRangeError

_SECONDS_PER_MINUTE = 60
_SECONDS_PER_HOUR = 60 * _SECONDS_PER_MINUTE
_SECONDS_PER_DAY = 24 * _SECONDS_PER_HOUR
# グレゴリオ暦400年周期の平均（146097日 / 4800ヶ月）
_DAYS_PER_MONTH = 146097 / 4800

# 割合閾値の上限。0〜100の百分率を渡した誤りを弾く
MAX_THRESHOLD_PERCENTAGE = 0.05

_INTEGER_RE = re.compile(r"^[+-]?\d+$")

_NUMBER = r"\d+(?:[.,]\d+)?"
# ISO 8601 期間表記: PnYnMnWnDTnHnMnS
_ISO_DURATION_RE = re.compile(
    rf"^P(?!$)"
    rf"(?:(?P<years>{_NUMBER})Y)?"
    rf"(?:(?P<months>{_NUMBER})M)?"
    rf"(?:(?P<weeks>{_NUMBER})W)?"
    rf"(?:(?P<days>{_NUMBER})D)?"
    rf"(?:T(?=\d)"
    rf"(?:(?P<hours>{_NUMBER})H)?"
    rf"(?:(?P<minutes>{_NUMBER})M)?"
    rf"(?:(?P<seconds>{_NUMBER})S)?"
    rf")?$",
    re.IGNORECASE,
)


def _component(match: re.Match[str], name: str) -> float:
    raw = match.group(name)
    if raw is None:
        return 0.0
    return float(raw.replace(",", "."))


def parse_duration_seconds(value: str) -> int:
    """検証期間の文字列を秒数に変換する。

    整数（秒）またはISO 8601期間表記（例: ``P7D``, ``PT12H``, ``P1Y2M``）を受け付ける。
    端数の秒は切り捨てる。

    Args:
        value: 検証期間の文字列。

    Returns:
        期間の長さ（秒）。常に正の値。

    Raises:
        InvalidDurationError: どちらの書式にも一致しない場合、または長さが0以下の場合。
    """
    text = value.strip()
    if _INTEGER_RE.match(text):
        seconds = int(text)
    else:
        match = _ISO_DURATION_RE.match(text)
        if match is None:
            raise InvalidDurationError(value)
        months = _component(match, "years") * 12 + _component(match, "months")
        days = _component(match, "weeks") * 7 + _component(match, "days") + months * _DAYS_PER_MONTH
        total = (
            days * _SECONDS_PER_DAY
            + _component(match, "hours") * _SECONDS_PER_HOUR
            + _component(match, "minutes") * _SECONDS_PER_MINUTE
            + _component(match, "seconds")
        )
        if not math.isfinite(total):
            raise InvalidDurationError(value)
        seconds = math.floor(total)

    if seconds <= 0:
        raise InvalidDurationError(value)
    return seconds


def validate_historic_params(
    validation_period: str | None = None,
    query_count_threshold: int | None = None,
    query_count_threshold_percentage: float | None = None,
) -> HistoricParameters | None:
    """CLIで指定された履歴パラメータを検証し、リクエスト用のパラメータを組み立てる。

    Args:
        validation_period: 検証期間（秒数またはISO 8601期間）。
        query_count_threshold: 期間内のリクエスト数の下限。
        query_count_threshold_percentage: 総リクエスト数に対する割合の下限（0〜0.05）。

    Returns:
        履歴パラメータ。いずれも未指定の場合はNone（サービス側のデフォルトを使用）。

    Raises:
        ConflictingThresholdsError: 件数閾値と割合閾値が両方指定された場合。
        InvalidDurationError: 検証期間が不正な場合。
        ThresholdOutOfRangeError: 閾値が範囲外の場合。
    """
    if validation_period is None and query_count_threshold is None and query_count_threshold_percentage is None:
        return None

    if query_count_threshold is not None and query_count_threshold_percentage is not None:
        raise ConflictingThresholdsError()

    window: ValidationWindow | None = None
    if validation_period is not None:
        window = ValidationWindow(from_=-parse_duration_seconds(validation_period), to=0)

    threshold: AbsoluteCount | Percentage | None = None
    if query_count_threshold is not None:
        if query_count_threshold < 1:
            raise ThresholdOutOfRangeError("queryCountThreshold", query_count_threshold, "an integer >= 1")
        threshold = AbsoluteCount(value=query_count_threshold)
    elif query_count_threshold_percentage is not None:
        if not 0 <= query_count_threshold_percentage <= MAX_THRESHOLD_PERCENTAGE:
            raise ThresholdOutOfRangeError(
                "queryCountThresholdPercentage",
                query_count_threshold_percentage,
                f"a fraction between 0 and {MAX_THRESHOLD_PERCENTAGE}",
            )
        threshold = Percentage(value=query_count_threshold_percentage)

    return HistoricParameters(window=window, threshold=threshold)
