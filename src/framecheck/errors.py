"""
どこで: `framecheck.errors`
何を: 検査エンジンが送出する例外型。
なぜ: pytest 等のランナーが通常の assert 失敗として扱えるよう、
      失敗は `AssertionError` 派生で統一し、型解決の失敗は `LookupError` 派生で区別するため。
"""

from __future__ import annotations


class FrameAPIAssertionError(AssertionError):
    """フレーム API の規約違反または frame/frameless 間の不一致。

    メッセージには両方のシグネチャ、宣言元、引数値と引数型を含める。
    """


class TypeResolutionError(LookupError):
    """レジストリが対応する型を解決できなかったことを表す。"""


__all__ = ["FrameAPIAssertionError", "TypeResolutionError"]
