"""vigilの設定管理。"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError, model_validator
from pydantic_settings import BaseSettings

from vigil.models.errors import ConfigError

PROJECT_CONFIG_FILE = "vigil.yaml"


class VigilConfig(BaseSettings):
    """チェック設定。環境変数・設定ファイル・CLIフラグから読み込み可能。"""

    model_config = {"env_prefix": "VIGIL_"}

    # チェック対象
    service_name: str = ""
    tag: str = "current"
    schema_file: Path = Path("schema.graphql")

    # チェックサービス
    api_key: str = ""
    engine_endpoint: str = "http://localhost:4000/api/graphql"
    frontend: str = ""
    timeout: float = 30.0

    # MCPサーバー
    host: str = "0.0.0.0"
    port: int = 8000

    log_level: str = "INFO"

    @model_validator(mode="after")
    def _derive_service_name(self) -> "VigilConfig":
        # APIキーは service:<name>:<secret> 形式
        if not self.service_name and self.api_key.startswith("service:"):
            parts = self.api_key.split(":")
            if len(parts) >= 3 and parts[1]:
                self.service_name = parts[1]
        return self


def load_config(path: Path | None = None, **overrides: Any) -> VigilConfig:
    """プロジェクト設定ファイルを読み込み、設定を組み立てる。

    優先順位は overrides > 設定ファイル > 環境変数 > デフォルト値。
    Noneのoverridesは無視する。

    Args:
        path: 設定ファイルのパス。Noneの場合はカレントディレクトリのvigil.yamlを探す。
        **overrides: CLIフラグなどで上書きする値。

    Raises:
        ConfigError: 設定ファイルが存在しない・YAMLとして不正・値が不正な場合。
    """
    data: dict[str, Any] = {}
    if path is None:
        candidate = Path.cwd() / PROJECT_CONFIG_FILE
        if candidate.exists():
            path = candidate

    if path is not None:
        try:
            with open(path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except FileNotFoundError:
            raise ConfigError(str(path), "file not found") from None
        except yaml.YAMLError as e:
            raise ConfigError(str(path), str(e)) from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(str(path), "top-level value must be a mapping")
        data.update(loaded or {})

    data.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return VigilConfig(**data)
    except ValidationError as e:
        raise ConfigError(str(path or "<arguments>"), str(e)) from e
