import os
import sys

import pytest

# Ensure repository root is on sys.path for package imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from playbook_agent.config import default_playbooks_config  # noqa: E402


@pytest.fixture
def playbooks_config():
    return default_playbooks_config()
