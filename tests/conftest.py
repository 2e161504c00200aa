from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
for entry in (SRC_ROOT, ROOT):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))

import pytest  # noqa: E402

from texcompiler import config as app_config  # noqa: E402
from texcompiler import cli  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch, tmp_path) -> None:
    """Prevent local settings and backend overrides from bleeding into tests."""
    monkeypatch.setenv(app_config.ENV_SETTINGS_PATH, str(tmp_path / "missing_settings.json"))
    monkeypatch.delenv(app_config.ENV_BACKEND, raising=False)


@pytest.fixture(autouse=True)
def _keep_signal_handlers(monkeypatch) -> None:
    """Leave pytest's own SIGINT handling alone when calling cli.main."""
    monkeypatch.setattr(cli, "install_signal_handlers", lambda: None)
