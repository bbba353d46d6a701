"""HackberryPi Q20 host setup.

Core design goals:
- Idempotent operations (guard, probe, apply, verify)
- One failing operation never stops the others
- Static payloads (packages, units, paths) kept in manifests/
- Centralized logging, plus a status line per operation
"""

__all__ = []
