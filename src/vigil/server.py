"""FastMCPベースのMCPサーバーエントリポイント。"""

from collections.abc import Callable

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from vigil.config import VigilConfig
from vigil.services.check import CheckService
from vigil.tools.check import register_check_tools


def create_server(
    config: VigilConfig | None = None,
    *,
    service_factory: Callable[[VigilConfig], CheckService] = CheckService.from_config,
) -> FastMCP:
    """vigil MCPサーバーを作成し、ツールを登録する。

    Args:
        config: チェック設定。Noneの場合は環境変数から読み込む。
        service_factory: 設定からCheckServiceを組み立てる関数。

    Returns:
        設定済みのFastMCPインスタンス。
    """
    if config is None:
        config = VigilConfig()

    mcp = FastMCP("vigil")

    check_service = service_factory(config)
    register_check_tools(mcp, check_service, service_name=config.service_name)

    # ヘルスチェックエンドポイント
    @mcp.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return mcp
