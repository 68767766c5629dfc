"""スキーマチェックサービス（エンジン）のGraphQLクライアント。"""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from vigil.models.check import CheckResult, HistoricParameters, ValidationWindow
from vigil.models.errors import ExternalServiceError
from vigil.models.git import GitContext

logger = logging.getLogger(__name__)

CHECK_SCHEMA_MUTATION = """
mutation CheckSchema(
  $id: ID!
  $schema: IntrospectionSchemaInput
  $tag: String
  $gitContext: GitContextInput
  $historicParameters: HistoricQueryParameters
  $frontend: String
) {
  service(id: $id) {
    checkSchema(
      proposedSchema: $schema
      baseSchemaTag: $tag
      gitContext: $gitContext
      historicParameters: $historicParameters
      frontend: $frontend
    ) {
      targetUrl
      diffToPrevious {
        type
        affectedQueries {
          __typename
        }
        changes {
          type
          code
          description
        }
        validationConfig {
          from
          to
          queryCountThreshold
          queryCountThresholdPercentage
        }
      }
    }
  }
}
"""

# エラーメッセージに含めるレスポンス本文の最大長
_MAX_ERROR_BODY = 500


class EngineClient:
    """チェックサービスにスキーマ差分の計算を依頼する。

    リトライは行わない。失敗はすべてExternalServiceErrorとして送出する。
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    async def check_schema(
        self,
        *,
        service_id: str,
        schema: dict[str, Any],
        tag: str | None,
        git_context: GitContext | None = None,
        frontend: str | None = None,
        historic_parameters: HistoricParameters | None = None,
    ) -> CheckResult:
        """ローカルスキーマと過去のオペレーション利用状況の差分チェックを実行する。

        Args:
            service_id: サービス名。
            schema: イントロスペクションの ``__schema`` オブジェクト。
            tag: 比較対象のスキーマタグ。
            git_context: コミット情報。
            frontend: チェック結果ページのフロントエンドURL。
            historic_parameters: 検証期間・閾値。Noneの場合はサービス側のデフォルト。

        Returns:
            チェック結果。

        Raises:
            ExternalServiceError: 通信エラー、HTTPエラー、GraphQLエラー、または不正なレスポンスの場合。
        """
        variables: dict[str, Any] = {
            "id": service_id,
            "schema": schema,
            "tag": tag,
            "gitContext": None,
            "frontend": frontend or None,
        }
        if git_context is not None and not git_context.is_empty():
            variables["gitContext"] = git_context.model_dump(by_alias=True, exclude_none=True)
        if historic_parameters is not None:
            variables["historicParameters"] = historic_parameters.to_variables()

        payload = await self._post(
            {"operationName": "CheckSchema", "query": CHECK_SCHEMA_MUTATION, "variables": variables}
        )

        data = payload.get("data") or {}
        if not isinstance(data, dict):
            raise ExternalServiceError("Check service returned an unexpected payload")
        service = data.get("service")
        if service is None:
            raise ExternalServiceError(f"Service not found: {service_id}")
        if not isinstance(service, dict):
            raise ExternalServiceError("Check service returned an unexpected payload")
        return self._parse_result(service.get("checkSchema"))

    async def _post(self, body: dict[str, Any]) -> dict[str, Any]:
        headers = {
            "x-api-key": self._api_key,
            "x-client-name": "vigil",
        }
        logger.debug("POST %s (%s)", self._endpoint, body.get("operationName"))
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                resp = await client.post(self._endpoint, json=body, headers=headers)
            except httpx.HTTPError as exc:
                raise ExternalServiceError(f"Request to check service failed: {exc}") from exc

        if resp.status_code >= 400:
            raise ExternalServiceError(
                f"Check service returned {resp.status_code}: {resp.text[:_MAX_ERROR_BODY]}",
                status_code=resp.status_code,
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise ExternalServiceError(f"Check service returned invalid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise ExternalServiceError("Check service returned an unexpected payload")

        errors = payload.get("errors")
        if errors:
            messages = "; ".join(
                str(error.get("message", error)) if isinstance(error, dict) else str(error) for error in errors
            )
            raise ExternalServiceError(f"Check service reported errors: {messages}")
        return payload

    @staticmethod
    def _parse_result(check: Any) -> CheckResult:
        try:
            diff = check["diffToPrevious"]
            return CheckResult(
                target_url=check.get("targetUrl"),
                affected_query_count=len(diff.get("affectedQueries") or []),
                changes=diff.get("changes") or [],
                window=ValidationWindow.model_validate(diff["validationConfig"]),
            )
        except (KeyError, TypeError, AttributeError, ValidationError) as exc:
            raise ExternalServiceError(f"Malformed check result: {exc}") from exc
