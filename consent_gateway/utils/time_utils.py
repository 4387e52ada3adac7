"""
Time and identifier helpers.
"""
import time
import uuid


def now_epoch() -> float:
    return time.time()


def generate_cpid(email: str, random_suffix: bool = False) -> str:
    """Principal id sent to the consent provider: "<email>-<epoch millis>"."""
    cpid = f"{email}-{int(time.time() * 1000)}"
    if random_suffix:
        cpid = f"{cpid}-{uuid.uuid4().hex[:8]}"
    return cpid
