"""サービスチェックのMCPツール定義。"""

import json
from typing import Any

from fastmcp import FastMCP

from vigil.models.errors import VigilError
from vigil.services.check import CheckOptions, CheckService
from vigil.services.classifier import classify, count_by_severity
from vigil.services.report import format_json, format_markdown
from vigil.validators.historic import validate_historic_params


def register_check_tools(mcp: FastMCP, check_service: CheckService, *, service_name: str = "") -> None:
    """サービスチェック関連のMCPツールを登録する。"""

    @mcp.tool()
    async def check_service_schema(
        tag: str | None = None,
        validation_period: str | None = None,
        query_count_threshold: int | None = None,
        query_count_threshold_percentage: float | None = None,
    ) -> dict[str, Any]:
        """ローカルスキーマを過去のオペレーション利用状況に照らしてチェックする。

        検出された変更一覧と、破壊的変更（FAILURE）の件数を返します。
        breakingCountが0であれば、このスキーマ変更は安全に公開できます。

        Args:
            tag: 比較対象のスキーマタグ（省略時は設定値、または "current"）。
            validation_period: 検証期間。秒数またはISO 8601期間（例: "P7D"）。
            query_count_threshold: 期間内のリクエスト数の下限。
            query_count_threshold_percentage: 総リクエスト数に対する割合の下限（0〜0.05）。
                query_count_thresholdとは同時に指定できません。
        """
        options = CheckOptions(
            tag=tag,
            validation_period=validation_period,
            query_count_threshold=query_count_threshold,
            query_count_threshold_percentage=query_count_threshold_percentage,
        )
        try:
            result = await check_service.check(options)
        except VigilError as e:
            return {"error": type(e).__name__, "message": str(e)}

        summary = classify(result.changes)
        counts = count_by_severity(result.changes)
        return {
            **json.loads(format_json(result)),
            "total": summary.total,
            "breakingCount": summary.breaking_count,
            "affectedQueryCount": result.affected_query_count,
            "severityCounts": {severity.value: count for severity, count in counts.items()},
            "markdown": format_markdown(result, service_name=service_name, tag=check_service.resolve_tag(options)),
        }

    @mcp.tool()
    async def validate_historic_parameters(
        validation_period: str | None = None,
        query_count_threshold: int | None = None,
        query_count_threshold_percentage: float | None = None,
    ) -> dict[str, Any]:
        """検証期間・閾値を検証し、チェックサービスに送るパラメータを返す。

        check_service_schemaを呼び出す前に、指定値が受け付けられるか確認できます。

        Args:
            validation_period: 検証期間。秒数またはISO 8601期間（例: "P7D"）。
            query_count_threshold: 期間内のリクエスト数の下限。
            query_count_threshold_percentage: 総リクエスト数に対する割合の下限（0〜0.05）。
        """
        try:
            params = validate_historic_params(
                validation_period=validation_period,
                query_count_threshold=query_count_threshold,
                query_count_threshold_percentage=query_count_threshold_percentage,
            )
        except VigilError as e:
            return {"error": type(e).__name__, "message": str(e)}
        return {"historicParameters": params.to_variables() if params is not None else None}
