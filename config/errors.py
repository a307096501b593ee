"""Exceptions shared by the benchmark components."""


class BenchmarkError(Exception):
    """ベンチマーク処理の基底例外"""
    pass


class ConfigurationError(BenchmarkError, ValueError):
    """設定値エラー（処理開始前に検出される）"""
    pass


class TransmitError(BenchmarkError, IOError):
    """送信先への書き込み失敗（実行全体を中断する）"""
    pass


class DeviceNotReadyError(TransmitError):
    """ロガーが準備完了プロンプトを返さなかった"""
    pass


class HeaderParseError(BenchmarkError, ValueError):
    """ヘッダーフィールドの解析エラー（致命的ではない）"""
    pass
