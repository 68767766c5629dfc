"""サービスチェックのフロー制御を行うサービス。"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict

from vigil.clients.engine import EngineClient
from vigil.config import VigilConfig
from vigil.console import LineSink, render_report
from vigil.git import git_info
from vigil.models.check import CheckResult, HistoricParameters
from vigil.models.errors import MissingServiceIdentityError
from vigil.models.git import GitContext
from vigil.models.report import OutputMode
from vigil.schema.resolver import SchemaResolver
from vigil.services.classifier import classify, count_by_severity
from vigil.services.report import format_report
from vigil.validators.historic import validate_historic_params

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BREAKING_CHANGES = 1

DEFAULT_TAG = "current"


class SchemaSource(Protocol):
    async def resolve(self, tag: str) -> dict[str, Any]: ...


class CheckClient(Protocol):
    async def check_schema(
        self,
        *,
        service_id: str,
        schema: dict[str, Any],
        tag: str | None,
        git_context: GitContext | None = None,
        frontend: str | None = None,
        historic_parameters: HistoricParameters | None = None,
    ) -> CheckResult: ...


GitContextProvider = Callable[[], Awaitable[GitContext]]


class CheckOptions(BaseModel):
    """1回のチェック実行に対する呼び出し側の指定。"""

    model_config = ConfigDict(frozen=True)

    tag: str | None = None
    validation_period: str | None = None
    query_count_threshold: int | None = None
    query_count_threshold_percentage: float | None = None
    output: OutputMode = OutputMode.TABLE


class CheckService:
    """ローカルスキーマを過去のオペレーション利用状況に照らしてチェックする。"""

    def __init__(
        self,
        config: VigilConfig,
        resolver: SchemaSource,
        engine: CheckClient,
        git_provider: GitContextProvider = git_info,
    ) -> None:
        self._config = config
        self._resolver = resolver
        self._engine = engine
        self._git_provider = git_provider

    @classmethod
    def from_config(cls, config: VigilConfig) -> "CheckService":
        """設定からスキーマ解決・チェックサービスクライアントを組み立てる。"""
        return cls(
            config=config,
            resolver=SchemaResolver(config.schema_file),
            engine=EngineClient(config.engine_endpoint, config.api_key, timeout=config.timeout),
        )

    def resolve_tag(self, options: CheckOptions) -> str:
        return options.tag or self._config.tag or DEFAULT_TAG

    async def check(self, options: CheckOptions) -> CheckResult:
        """スキーマチェックを実行し、チェックサービスの結果を返す。

        Args:
            options: タグ・検証期間・閾値の指定。

        Returns:
            チェック結果。

        Raises:
            MissingServiceIdentityError: サービス名が設定されていない場合。
            SchemaResolutionError: ローカルスキーマが解決できない場合。
            ParameterValidationError: 検証期間・閾値が不正な場合。
            ExternalServiceError: チェックサービス呼び出しに失敗した場合。
        """
        service_name = self._config.service_name
        if not service_name:
            raise MissingServiceIdentityError()

        tag = self.resolve_tag(options)
        # スキーマとコミット情報は互いに独立しているため並行して取得する
        schema, git_context = await asyncio.gather(self._resolver.resolve(tag), self._git_provider())

        historic_parameters = validate_historic_params(
            validation_period=options.validation_period,
            query_count_threshold=options.query_count_threshold,
            query_count_threshold_percentage=options.query_count_threshold_percentage,
        )

        logger.info("Checking service %r against schema tag %r", service_name, tag)
        result = await self._engine.check_schema(
            service_id=service_name,
            schema=schema,
            tag=tag,
            git_context=git_context,
            frontend=self._config.frontend or None,
            historic_parameters=historic_parameters,
        )

        counts = count_by_severity(result.changes)
        logger.info(
            "Check finished: %d changes (%s)",
            len(result.changes),
            ", ".join(f"{severity.value}={count}" for severity, count in counts.items()),
        )
        return result

    async def run(self, options: CheckOptions, sink: LineSink) -> int:
        """チェックを実行してレポートを出力し、終了ステータスを返す。

        破壊的変更（FAILURE）が1件以上ある場合は、レポート出力後に非0を返す。
        """
        result = await self.check(options)
        report = format_report(
            result,
            options.output,
            service_name=self._config.service_name,
            tag=self.resolve_tag(options),
        )
        render_report(report, sink)

        if report.has_blocking_changes:
            logger.info("Found %d breaking changes", classify(result.changes).breaking_count)
            return EXIT_BREAKING_CHANGES
        return EXIT_OK
