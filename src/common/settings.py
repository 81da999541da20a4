"""
どこで: `common.settings`
何を: framecheck の環境変数を型付きで一元管理し、import 時に読み込む。
なぜ: 許容誤差/乱数シード/リトライ上限の既定値をテストと実行で一致させるため。
"""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, env_int, env_str

_PREFIX = "FRAMECHECK_"


@dataclass
class _Settings:
    # 比較
    EPSILON: float = 1e-12

    # 乱数
    RANDOM_SEED: int = 345345

    # 反復/リトライ
    DEFAULT_ITERATIONS: int = 100
    MAX_CLONE_RETRIES: int = 50

    # ログ
    LOG_LEVEL: str = "WARNING"


_settings = _Settings()


def reload_from_env() -> None:
    """環境変数から設定を再読込。

    - 下限を持つ値は丸める（反復回数は 1、リトライ上限と誤差は 0）。
    - 不正値は既定値に戻す。
    """
    _settings.EPSILON = env_float(_PREFIX + "EPSILON", 1e-12, min_value=0.0) or 0.0
    _settings.RANDOM_SEED = env_int(_PREFIX + "RANDOM_SEED", 345345) or 0
    _settings.DEFAULT_ITERATIONS = env_int(_PREFIX + "DEFAULT_ITERATIONS", 100, min_value=1) or 1
    _settings.MAX_CLONE_RETRIES = env_int(_PREFIX + "MAX_CLONE_RETRIES", 50, min_value=0) or 0
    _settings.LOG_LEVEL = env_str(_PREFIX + "LOG_LEVEL", "WARNING").upper()


def get() -> _Settings:
    """現在の設定スナップショットを返す。"""
    return _settings


# 初期ロード
reload_from_env()


__all__ = ["get", "reload_from_env", "_Settings"]
