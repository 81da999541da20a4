"""共通フィクスチャ。

- 乱数シード固定
- サンプル幾何ライブラリで設定済みのテスタ
"""

from __future__ import annotations

import numpy as np
import pytest

from common import setup_default_logging
from framecheck import FrameAPITester
from tests._utils.sample_config import make_tester


@pytest.fixture(scope="session", autouse=True)
def np_seed() -> None:
    """NumPy の乱数を固定。"""
    np.random.seed(12345)
    setup_default_logging()


@pytest.fixture()
def rng() -> np.random.Generator:
    return np.random.default_rng(20240611)


@pytest.fixture()
def tester() -> FrameAPITester:
    """型登録済みのテスタ（テストごとに新しいレジストリ）。"""
    return make_tester(seed=1234)
