# tests/helpers.py

from typing import Dict

PASSWORD = "secret1"


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
