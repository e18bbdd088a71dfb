from .guard import AccessDecision, AccessGuard


__all__ = ["AccessDecision", "AccessGuard"]
