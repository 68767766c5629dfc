"""ローカルスキーマ定義の解決。"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from graphql import GraphQLError, build_schema, introspection_from_schema

from vigil.models.errors import SchemaResolutionError

logger = logging.getLogger(__name__)


class SchemaResolver:
    """ローカルファイルからチェック対象のスキーマを読み込む。

    ``.json`` はイントロスペクション結果、それ以外はSDLとして扱う。
    """

    def __init__(self, schema_file: Path) -> None:
        self._schema_file = schema_file

    async def resolve(self, tag: str) -> dict[str, Any]:
        """スキーマを読み込み、イントロスペクションの ``__schema`` オブジェクトを返す。

        Args:
            tag: チェック対象のスキーマタグ。ローカル解決では記録のみに使う。

        Raises:
            SchemaResolutionError: ファイルが読めない、または解析できない場合。
        """
        logger.debug("Resolving schema for tag %r from %s", tag, self._schema_file)
        return await asyncio.to_thread(self._load)

    def _load(self) -> dict[str, Any]:
        path = self._schema_file
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise SchemaResolutionError(str(path), e.strerror or str(e)) from e

        if path.suffix == ".json":
            return self._from_introspection(text)

        try:
            schema = build_schema(text)
        except (GraphQLError, TypeError) as e:
            raise SchemaResolutionError(str(path), str(e)) from e
        return dict(introspection_from_schema(schema)["__schema"])

    def _from_introspection(self, text: str) -> dict[str, Any]:
        source = str(self._schema_file)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SchemaResolutionError(source, f"invalid JSON: {e}") from e

        # {"data": {"__schema": ...}} 形式のレスポンスもそのまま受け付ける
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            data = data["data"]
        if not isinstance(data, dict) or not isinstance(data.get("__schema"), dict):
            raise SchemaResolutionError(source, "introspection result has no __schema object")
        return dict(data["__schema"])
