import os
import sys
from io import BytesIO
from pathlib import Path

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Ensure project root is on sys.path so 'src' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# fast background polling for job tests
os.environ.setdefault("JOB_POLL_INTERVAL", "0.01")
os.environ.setdefault("MOCK_JOB_TICKS", "2")


def _make_png(width: int = 800, height: int = 600, mode: str = "RGB") -> bytes:
    """Horizontal ramp so crops of different columns decode to different pixels."""
    ramp = np.tile(np.linspace(0, 255, width, dtype=np.uint8), (height, 1))
    arr = np.stack([ramp, np.full_like(ramp, 128), 255 - ramp], axis=-1)
    img = Image.fromarray(arr).convert(mode)
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def make_png():
    return _make_png


@pytest.fixture()
def png_bytes() -> bytes:
    return _make_png()


@pytest.fixture(scope="session")
def client() -> TestClient:
    # lazy import after env configured
    from src.main import create_app

    app = create_app()
    # keep one event loop alive across requests so background polls can run
    with TestClient(app) as c:
        yield c
