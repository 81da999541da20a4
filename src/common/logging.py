"""
どこで: `common.logging`
何を: framecheck 用の最小ロギング設定ヘルパ。
なぜ: 検査エンジンの診断（複製リトライ、スキップしたメソッド、評価中の例外）の
      出力量を `FRAMECHECK_LOG_LEVEL` で一括制御するため。

各モジュールは `logging.getLogger(__name__)` でロガーを取得する。
"""

from __future__ import annotations

import logging

from . import settings

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _to_level(level: int | str) -> int:
    if isinstance(level, str):
        value = logging.getLevelName(level.upper())
        return value if isinstance(value, int) else logging.WARNING
    return int(level)


def setup_default_logging(level: int | str | None = None, *, logger_name: str = "framecheck") -> None:
    """`logger_name` のレベルを設定し、未設定ならルートに最小構成を 1 度だけ適用する。

    Parameters
    ----------
    level : int | str | None
        ログレベル。省略時は設定値（`FRAMECHECK_LOG_LEVEL`）。
    logger_name : str
        レベルを適用するロガー名。

    Notes
    -----
    ルートロガーにハンドラが既にあれば（pytest やアプリ側で設定済み）ハンドラは追加しない。
    """
    lvl = _to_level(settings.get().LOG_LEVEL if level is None else level)
    logging.getLogger(logger_name).setLevel(lvl)

    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(level=lvl, format=_FORMAT)


__all__ = ["setup_default_logging"]
