"""
どこで: `framecheck` パッケージ。
何を: frame 付き/無しの幾何型 API を反射で検査するエンジンの公開入口。
なぜ: 利用側は `FrameAPITester` と設定・フィルタ補助だけを import すれば済むようにするため。
"""

from .builders import UNSUPPORTED, RandomObjectService, ReflectionBasedBuilder
from .catalog import MethodCatalog, MethodHandle
from .comparer import ReflectionBasedComparer, StructuralComparer
from .configuration import FrameAPIConfiguration
from .errors import FrameAPIAssertionError, TypeResolutionError
from .registry import FrameKind, TypeRegistry
from .signature import MethodSignature, method_filter_from_signature, method_filter_from_signatures
from .tester import FrameAPITester

__all__ = [
    "FrameAPITester",
    "FrameAPIConfiguration",
    "FrameAPIAssertionError",
    "TypeResolutionError",
    "TypeRegistry",
    "FrameKind",
    "MethodSignature",
    "MethodCatalog",
    "MethodHandle",
    "method_filter_from_signature",
    "method_filter_from_signatures",
    "RandomObjectService",
    "ReflectionBasedBuilder",
    "UNSUPPORTED",
    "StructuralComparer",
    "ReflectionBasedComparer",
]
