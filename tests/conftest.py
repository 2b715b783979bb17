# SPDX-FileCopyrightText: 2025 Eric Löffler <eric.loeffler@opalia.systems>
# SPDX-License-Identifier: GPL-3.0-or-later

import importlib.util
from pathlib import Path

import pytest

EVALUATORS_DIR = Path(__file__).resolve().parent.parent / "extensions" / "when_evaluators"


@pytest.fixture(scope="session")
def calendar_rotor_app():
    """The evaluator script, loaded the way the engine runs it (not a package)."""
    path = EVALUATORS_DIR / "calendar_rotor" / "app.py"
    spec = importlib.util.spec_from_file_location("calendar_rotor_app", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module
