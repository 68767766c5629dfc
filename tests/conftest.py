"""テスト共通フィクスチャ。"""

from collections.abc import Sequence
from pathlib import Path

import pytest
from helpers import SCHEMA_SDL, TARGET_URL, FakeEngine, RecordingSink, ResultFactory, empty_git_context

from vigil.config import VigilConfig
from vigil.models.check import Change, CheckResult, Severity, ValidationWindow
from vigil.schema.resolver import SchemaResolver
from vigil.services.check import CheckService


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """開発者の環境変数やvigil.yamlがテストに影響しないようにする。"""
    for name in ("VIGIL_SERVICE_NAME", "VIGIL_API_KEY", "VIGIL_TAG", "VIGIL_SCHEMA_FILE", "VIGIL_FRONTEND"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def sample_changes() -> list[Change]:
    """重大度が混在した変更一覧。"""
    return [
        Change(type=Severity.NOTICE, code="FIELD_ADDED", description="`User.email` was added"),
        Change(type=Severity.FAILURE, code="FIELD_REMOVED", description="`User.nickname` was removed"),
        Change(type=Severity.WARNING, code="ARG_DEFAULT_CHANGED", description="`Query.users(first:)` default changed"),
        Change(type=Severity.FAILURE, code="TYPE_REMOVED", description="`Profile` was removed"),
    ]


@pytest.fixture
def make_result() -> ResultFactory:
    """CheckResultを組み立てるファクトリ。"""

    def _make(
        changes: Sequence[Change] = (),
        *,
        target_url: str | None = TARGET_URL,
        affected_query_count: int = 0,
        days: int = 7,
    ) -> CheckResult:
        return CheckResult(
            target_url=target_url,
            affected_query_count=affected_query_count,
            changes=tuple(changes),
            window=ValidationWindow(from_=-days * 86400, to=0),
        )

    return _make


@pytest.fixture
def schema_file(tmp_path: Path) -> Path:
    """テスト用のSDLスキーマファイル。"""
    path = tmp_path / "schema.graphql"
    path.write_text(SCHEMA_SDL, encoding="utf-8")
    return path


@pytest.fixture
def vigil_config(schema_file: Path) -> VigilConfig:
    """テスト用VigilConfig。"""
    return VigilConfig(
        service_name="accounts",
        api_key="service:accounts:secret",
        schema_file=schema_file,
        engine_endpoint="https://engine.example.com/api/graphql",
        tag="current",
    )


@pytest.fixture
def fake_engine(make_result: ResultFactory) -> FakeEngine:
    """変更なしの結果を返すFakeEngine。"""
    return FakeEngine(result=make_result())


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def check_service(vigil_config: VigilConfig, fake_engine: FakeEngine) -> CheckService:
    """FakeEngineとローカルスキーマを使うCheckService。"""
    return CheckService(
        config=vigil_config,
        resolver=SchemaResolver(vigil_config.schema_file),
        engine=fake_engine,
        git_provider=empty_git_context,
    )
