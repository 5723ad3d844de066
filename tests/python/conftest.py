import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from shoal.sim.core.config import EngineConfig, ShoalConfig  # noqa: E402
from shoal.sim.core.world import ShoalWorld  # noqa: E402


@pytest.fixture
def make_world():
    """Build an empty world that advances by a fixed step."""

    def _make(time_step: float = 0.1, **overrides) -> ShoalWorld:
        config = ShoalConfig(entity_count=0, width=200, height=100, **overrides)
        engine = EngineConfig(seed=1, fixed_time_step=time_step)
        return ShoalWorld(config, engine)

    return _make
