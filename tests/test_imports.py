"""The game log engine must import without the Discord stack."""

import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent

ENGINE_MODULES = [
    "activity",
    "aggregation",
    "config",
    "models",
    "payload",
    "ranking",
    "updates",
    "utils",
    "utils.dates",
    "utils.deck_links",
    "validation",
]


def test_engine_does_not_import_discord():
    script = (
        "import importlib, sys\n"
        f"for name in {ENGINE_MODULES!r}:\n"
        "    importlib.import_module(name)\n"
        "print('discord' in sys.modules)\n"
    )
    completed = subprocess.run(
        [sys.executable, "-c", script],
        cwd=ROOT,
        capture_output=True,
        text=True,
        check=True,
    )
    assert completed.stdout.strip() == "False"
