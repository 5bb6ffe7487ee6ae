"""The stream adapters.

- Dedup / DedupByKey: drop consecutive duplicates (by value or derived key)
- BatchWith: buffer items until a trigger stream fires
- Switch: flatten a stream of streams, following the latest inner stream
"""

from .batch import BatchWith, batch_with
from .dedup import Dedup, DedupByKey, dedup, dedup_by_key
from .switch import HasInner, InnerState, NoInner, Switch, switch

__all__ = [
    "Dedup",
    "DedupByKey",
    "BatchWith",
    "Switch",
    "NoInner",
    "HasInner",
    "InnerState",
    "dedup",
    "dedup_by_key",
    "batch_with",
    "switch",
]
