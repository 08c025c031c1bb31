import hashlib
import logging
from typing import Optional, Tuple

from semantic_engine.core.config import FINGERPRINT_VERSION

logger = logging.getLogger(__name__)


def profile_fingerprint(text: str, version: str = FINGERPRINT_VERSION) -> str:
    """Versioned sha256 digest of compiled profile text, e.g. ``v1:9f86d0...``."""
    digest = hashlib.sha256((text or "").encode("utf-8")).hexdigest()
    return f"{version}:{digest}"


def needs_update(text: str, stored_fingerprint: Optional[str]) -> Tuple[bool, str]:
    """
    Compare the fingerprint of ``text`` with the one persisted for the user.

    Returns ``(update_needed, fingerprint)``. A missing stored fingerprint, or
    one produced under a different FINGERPRINT_VERSION, always needs an update.
    """
    fingerprint = profile_fingerprint(text)
    if stored_fingerprint and stored_fingerprint == fingerprint:
        logger.debug(f"✅ Fingerprint HIT ({fingerprint[:12]}...)")
        return False, fingerprint
    return True, fingerprint
