"""
Shared fixtures for the winrmexec test suite.
"""

import sys
from pathlib import Path

# Add src and the tests directory to path for imports
sys.path.insert(0, str(Path(__file__).parents[1] / "src"))
sys.path.insert(0, str(Path(__file__).parent))

import pytest

from winrmexec.domain.config import ExecutionSettings, TransportOptions


@pytest.fixture
def transport_options() -> TransportOptions:
    """Local administrator on a lab host."""
    return TransportOptions(host="10.0.0.5", username="administrator", password="P@ssw0rd")


@pytest.fixture
def execution_settings() -> ExecutionSettings:
    return ExecutionSettings(powershell=False)
