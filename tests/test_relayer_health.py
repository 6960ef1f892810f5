import os

import pytest
import requests

RELAYER = os.getenv("CIPHERLANDS_RELAYER_URL")

pytestmark = pytest.mark.skipif(not RELAYER, reason="set CIPHERLANDS_RELAYER_URL to check a live relayer")


def test_relayer_health():
    r = requests.get(f"{RELAYER.rstrip('/')}/health", timeout=10)
    assert r.status_code == 200
