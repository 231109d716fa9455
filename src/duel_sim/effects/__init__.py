"""Per-card effect handlers.

Handlers are registered in ``registry.EFFECT_REGISTRY`` at import time, grouped by
family: DD monsters, DDD monsters, Dark Contracts and inert cards.
"""
