"""ElementType discriminator values.

A constants container rather than an Enum; element payloads stay opaque and
only the ``type`` value is checked.
"""

from __future__ import annotations


class ElementType:
    SUPER = "Super"
    STRIPE = "Stripe"
    BOX = "Box"
    COUNTER = "Counter"
    FINGER = "Finger"
    LIVE = "Live"
    TICKER = "Ticker"
    ROLLER = "Roller"
    PROMO = "Promo"
    CG = "CG"

    ALL = (SUPER, STRIPE, BOX, COUNTER, FINGER, LIVE, TICKER, ROLLER, PROMO, CG)


__all__ = ["ElementType"]
