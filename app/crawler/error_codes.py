from __future__ import annotations

"""Error code taxonomy for crawler failures.

Codes are included in structured logs so that a finished run can explain why a
unit, page or record was skipped. Only ``PORTAL_UNAVAILABLE`` aborts a run.
"""


class ErrorCode:
    NAVIGATION = "navigation_error"
    MISSING_ELEMENT = "missing_element"
    EXTRACTION = "extraction_failed"
    SCHEMA = "schema_mismatch"
    PERSISTENCE = "persistence_failed"
    SESSION = "session_error"
    PORTAL_UNAVAILABLE = "portal_unavailable"


__all__ = ["ErrorCode"]
