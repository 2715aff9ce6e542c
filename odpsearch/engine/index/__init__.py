"""Index structures for the pattern search engine.

- Term index: inverted index with tf-idf scoring and JSON snapshots
- Embedding index: random-indexing vector model persisted as ``.npz``
- Registry: the current index generation, swapped atomically on rebuild
"""

from .embedding_index import EmbeddingIndex, RandomIndexingModel
from .registry import IndexGeneration, IndexRegistry
from .term_index import TermIndex

__all__ = [
    "EmbeddingIndex",
    "IndexGeneration",
    "IndexRegistry",
    "RandomIndexingModel",
    "TermIndex",
]
