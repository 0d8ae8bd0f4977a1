"""
Identity state transitions.

``identity_changed`` is sent with ``identity`` (the new Identity or None),
``previous`` (the Identity before the transition or None) and ``event``, one
of ``signed_in``, ``signed_out`` or ``anonymous_upgraded``.
"""

from django.dispatch import Signal

SIGNED_IN = "signed_in"
SIGNED_OUT = "signed_out"
ANONYMOUS_UPGRADED = "anonymous_upgraded"

identity_changed = Signal()
