"""
どこで: `common` パッケージ。
何を: 設定（環境変数）とロギングの共通基盤。
なぜ: framecheck 本体から環境依存の処理を分離し、依存の向きを単純化するため。
"""

from . import settings
from .logging import setup_default_logging

__all__ = [
    "settings",
    "setup_default_logging",
]
