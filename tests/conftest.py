from __future__ import annotations

import pytest

from ordenpdf import config
from ordenpdf.models import OrderRecord
from _orders import make_record


@pytest.fixture
def record() -> OrderRecord:
    return make_record()


@pytest.fixture
def out_dir(tmp_path, monkeypatch):
    target = tmp_path / "out"
    monkeypatch.setattr(config, "OUT_DIR", target)
    return target
