"""vigilのカスタム例外クラス。"""


class VigilError(Exception):
    """vigilの基底例外クラス。"""


class ParameterValidationError(VigilError):
    """履歴パラメータ（検証期間・閾値）が不正な場合の例外。

    ネットワーク呼び出しの前に送出される。
    """


class InvalidDurationError(ParameterValidationError):
    """検証期間が秒数にもISO 8601期間にも解釈できない場合の例外。"""

    def __init__(self, value: str) -> None:
        super().__init__(
            f"Invalid validation period: {value!r}. "
            "Please provide a positive number of seconds or an ISO 8601 duration "
            "(see: https://en.wikipedia.org/wiki/ISO_8601#Durations)."
        )
        self.value = value


class ConflictingThresholdsError(ParameterValidationError):
    """件数閾値と割合閾値が同時に指定された場合の例外。"""

    def __init__(self) -> None:
        super().__init__(
            "Please provide either --query-count-threshold or --query-count-threshold-percentage, not both."
        )


class ThresholdOutOfRangeError(ParameterValidationError):
    """閾値が許容範囲外の場合の例外。"""

    def __init__(self, name: str, value: float, expected: str) -> None:
        super().__init__(f"Invalid value for {name}: {value}. Expected {expected}.")
        self.name = name
        self.value = value


class MissingServiceIdentityError(VigilError):
    """チェック対象のサービス名が解決できない場合の例外。"""

    def __init__(self) -> None:
        super().__init__(
            "No service found to check. Set VIGIL_SERVICE_NAME, pass --service, "
            "or use an API key of the form service:<name>:<secret>."
        )


class ExternalResolutionError(VigilError):
    """ローカルのスキーマやバージョン管理情報の解決に失敗した場合の例外。"""


class SchemaResolutionError(ExternalResolutionError):
    """ローカルスキーマの読み込み・解析に失敗した場合の例外。"""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Unable to resolve schema from {source}: {reason}")
        self.source = source
        self.reason = reason


class ExternalServiceError(VigilError):
    """チェックサービス呼び出しのエラー。"""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigError(VigilError):
    """プロジェクト設定ファイルの読み込みエラー。"""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Invalid config file {path}: {reason}")
        self.path = path
