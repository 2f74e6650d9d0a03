import logging
from collections import OrderedDict

logger = logging.getLogger(__name__)


class ResultCache:
    """Bounded least-recently-used cache for whole strategy results.

    Keys are hashable deck contexts, so a renamed type or a moved slider is a
    different entry. The oldest entry is dropped once ``max_size`` is reached.
    """

    def __init__(self, max_size=100):
        if max_size < 1:
            raise ValueError(f"Cache size must be at least 1, got {max_size}")
        self.max_size = max_size
        self._entries = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key):
        if key not in self._entries:
            self.misses += 1
            return None
        self.hits += 1
        self._entries.move_to_end(key)
        return self._entries[key]

    def set(self, key, value):
        self._entries[key] = value
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cached result for %s", evicted)

    def clear(self):
        self._entries.clear()

    def __contains__(self, key):
        return key in self._entries

    def __len__(self):
        return len(self._entries)
