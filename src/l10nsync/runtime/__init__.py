"""Runtime building blocks of the synchronization subsystem.

Provides fallback chain resolution, at-most-once load tracking, the
per-(locale, component) message cache, placeholder and plural
formatting, and the batch-then-barrier task dispatcher.

Python 3.13+.
"""

from .batching import BatchRun, run_in_batches
from .cache import BundleCache, ComponentMessages
from .dedup import DedupKey, DedupTracker
from .formatter import PlaceholderFormatter
from .plural_rules import BabelPluralFormatter, PluralFormatter, select_plural_category
from .resolver import LocaleResolver
from .rwlock import RWLock

__all__ = [
    "BabelPluralFormatter",
    "BatchRun",
    "BundleCache",
    "ComponentMessages",
    "DedupKey",
    "DedupTracker",
    "LocaleResolver",
    "PlaceholderFormatter",
    "PluralFormatter",
    "RWLock",
    "run_in_batches",
    "select_plural_category",
]
