import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"

# Add both src and repo root to path for imports
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def blank():
    """Empty 320x240 grayscale frame."""
    from tests.helpers.synthetic import blank_frame

    return blank_frame()


@pytest.fixture
def worm_contour():
    """Elongated 20-vertex elliptical outline of roughly 700 px^2."""
    from tests.helpers.synthetic import ellipse_contour

    return ellipse_contour(100, 100)
