"""Index Builder.

Rebuilds both indices from the pattern repository:

1. Extract every non-hidden file of the repository (bounded per document)
2. Merge the extracted metadata with bulk metadata (MergePolicy)
3. Tokenize and expand each record into its ``all_terms`` bag
4. Fill a fresh term index and persist it
5. Train the embedding index on the term bags and persist it
6. Publish the new generation to the registry

Only one rebuild runs at a time; a concurrent request is rejected, never
queued. Readers keep the previous generation until the swap.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path

from ..config import Settings
from ..engine.core.document import IndexedDocument
from ..engine.core.query import index_tokens, split_related_term
from ..engine.index.embedding_index import RandomIndexingModel
from ..engine.index.registry import IndexRegistry
from ..engine.index.term_index import TermIndex
from ..errors import ExtractionError, RebuildInProgressError
from ..models.patterns import PatternMetadata, PatternRecord, merge_pattern_metadata
from ..models.responses import RebuildReport
from .bulk_import import load_bulk_metadata
from .extractor import PatternExtractor, RdfPatternExtractor
from .lexical_expander import LexicalExpander, NullExpander

logger = logging.getLogger(__name__)

REBUILD_IN_PROGRESS_MESSAGE = "Index rebuild already in progress."
BULK_ID_SUFFIX = ".owl"


def record_texts(record: PatternRecord) -> list[str | None]:
    """Text values of a record that feed its term bag."""
    return [
        record.name,
        record.intent,
        record.description,
        record.consequences,
        *record.categories,
        *record.scenarios,
        *record.competency_questions,
        *record.classes,
        *record.properties,
    ]


def expand_record_terms(record: PatternRecord, expander: LexicalExpander) -> list[str]:
    """Build the ``all_terms`` bag of a record.

    The bag holds every token occurrence of the record text (stop words
    removed), followed by the related terms of each distinct token. Related
    terms are split into tokens, added once per source token, and never
    repeat the source token.
    """
    tokens = index_tokens(record_texts(record))
    synonyms: list[str] = []
    for token in dict.fromkeys(tokens):
        parts: set[str] = set()
        for related in expander.related_terms(token):
            parts.update(split_related_term(related))
        parts.discard(token)
        synonyms.extend(sorted(parts))
    return tokens + synonyms


class IndexBuilder:
    """Builds a new index generation from the pattern repository."""

    def __init__(
        self,
        repository_path: str | Path,
        registry: IndexRegistry,
        term_index_path: str | Path,
        embedding_index_path: str | Path,
        extractor: PatternExtractor | None = None,
        expander: LexicalExpander | None = None,
        bulk_metadata_path: str | Path | None = None,
        extractor_timeout_seconds: float = 30.0,
        embedding_dimension: int = 512,
        embedding_seed: int = 7,
        embedding_training_cycles: int = 2,
    ):
        self.repository_path = Path(repository_path)
        self.registry = registry
        self.term_index_path = Path(term_index_path)
        self.embedding_index_path = Path(embedding_index_path)
        self.extractor = extractor or RdfPatternExtractor()
        self.expander = expander or NullExpander()
        self.bulk_metadata_path = Path(bulk_metadata_path) if bulk_metadata_path else None
        self.extractor_timeout_seconds = extractor_timeout_seconds
        self.embedding_dimension = embedding_dimension
        self.embedding_seed = embedding_seed
        self.embedding_training_cycles = embedding_training_cycles
        self._lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        config: Settings,
        registry: IndexRegistry,
        extractor: PatternExtractor | None = None,
        expander: LexicalExpander | None = None,
    ) -> "IndexBuilder":
        return cls(
            repository_path=config.pattern_repository_path,
            registry=registry,
            term_index_path=config.term_index_path,
            embedding_index_path=config.embedding_index_path,
            extractor=extractor,
            expander=expander,
            bulk_metadata_path=config.bulk_metadata_path,
            extractor_timeout_seconds=config.extractor_timeout_seconds,
            embedding_dimension=config.embedding_dimension,
            embedding_seed=config.embedding_seed,
            embedding_training_cycles=config.embedding_training_cycles,
        )

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    def _acquire(self) -> None:
        if not self._lock.acquire(blocking=False):
            raise RebuildInProgressError(REBUILD_IN_PROGRESS_MESSAGE)

    def rebuild(self) -> RebuildReport:
        """Rebuild and publish both indices.

        Never raises for expected failures; the outcome is described by the
        returned report.
        """
        try:
            self._acquire()
        except RebuildInProgressError as e:
            logger.warning(f"Rebuild rejected: {e}")
            return RebuildReport(success=False, message=str(e))

        try:
            logger.info("Initiating index rebuild")
            return self._rebuild()
        finally:
            self._lock.release()

    # ============ STAGES ============

    def _load_bulk(self) -> dict[str, PatternMetadata]:
        if self.bulk_metadata_path is None:
            return {}
        try:
            return load_bulk_metadata(self.bulk_metadata_path)
        except (OSError, ValueError) as e:
            logger.warning(f"Bulk metadata unavailable, continuing without it: {e}")
            return {}

    def _pattern_files(self) -> list[Path]:
        return sorted(
            p for p in self.repository_path.iterdir() if p.is_file() and not p.name.startswith(".")
        )

    def _extract(self, path: Path) -> PatternMetadata:
        """Run the extractor with a time bound.

        Raises:
            ExtractionError: If extraction fails or exceeds the timeout.
        """
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="extract")
        try:
            future = executor.submit(self.extractor.extract, path)
            return future.result(timeout=self.extractor_timeout_seconds)
        except FutureTimeoutError as e:
            raise ExtractionError(
                f"Extraction of {path} timed out after {self.extractor_timeout_seconds}s",
                source=str(path),
            ) from e
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _lookup_bulk(self, bulk: dict[str, PatternMetadata], pattern_id: str) -> PatternMetadata | None:
        return bulk.get(pattern_id) or bulk.get(pattern_id + BULK_ID_SUFFIX)

    def build_term_index(self) -> tuple[TermIndex, int]:
        """Extract, merge and index every pattern into a fresh term index.

        Returns:
            The new index and the number of skipped documents.
        """
        bulk = self._load_bulk()
        index = TermIndex()
        skipped = 0

        for path in self._pattern_files():
            try:
                extracted = self._extract(path)
            except ExtractionError as e:
                logger.warning(f"Skipping pattern file {path.name}: {e}")
                skipped += 1
                continue

            record = merge_pattern_metadata(self._lookup_bulk(bulk, extracted.id), extracted)
            if record.id in index:
                logger.warning(f"Duplicate pattern {record.id} in {path.name}; replacing earlier file")

            index.put(
                IndexedDocument(
                    id=record.id,
                    record=record,
                    all_terms=tuple(expand_record_terms(record, self.expander)),
                )
            )
            logger.debug(f"Indexed: {record.id}")

        return index, skipped

    def _build_embedding_index(self, term_index: TermIndex) -> RandomIndexingModel:
        corpus = {doc.id: doc.all_terms for doc in term_index.documents()}
        model = RandomIndexingModel.train(
            corpus,
            dimension=self.embedding_dimension,
            seed=self.embedding_seed,
            training_cycles=self.embedding_training_cycles,
        )
        model.save(self.embedding_index_path)
        return model

    def _rebuild(self) -> RebuildReport:
        if not self.repository_path.is_dir():
            message = f"Index rebuild failed: pattern repository {self.repository_path} is not a directory."
            logger.error(message)
            return RebuildReport(success=False, message=message)

        start_time = time.perf_counter()
        try:
            term_index, skipped = self.build_term_index()
            term_index.save(self.term_index_path)
        except OSError as e:
            message = f"Index rebuild failed: {e}"
            logger.error(message)
            return RebuildReport(success=False, message=message)
        term_seconds = time.perf_counter() - start_time

        term_status = (
            f"Term index rebuilt in {term_seconds:.1f} seconds "
            f"({len(term_index)} patterns indexed, {skipped} skipped)."
        )
        logger.info(term_status)

        start_time = time.perf_counter()
        embedding_index: RandomIndexingModel | None
        try:
            embedding_index = self._build_embedding_index(term_index)
            embedding_seconds = time.perf_counter() - start_time
            embedding_status = f"Embedding index rebuilt in {embedding_seconds:.1f} seconds."
            logger.info(embedding_status)
        except Exception as e:
            embedding_index = None
            embedding_seconds = time.perf_counter() - start_time
            embedding_status = f"Embedding index construction failed: {e}"
            logger.error(embedding_status, exc_info=True)
            # A stale file would be loaded against the new term index on restart.
            try:
                self.embedding_index_path.unlink(missing_ok=True)
            except OSError as unlink_error:
                logger.warning(f"Could not remove stale embedding index: {unlink_error}")

        self.registry.swap(term_index, embedding_index)

        return RebuildReport(
            success=True,
            message=f"{term_status} {embedding_status}",
            documents_indexed=len(term_index),
            documents_skipped=skipped,
            term_index_seconds=term_seconds,
            embedding_index_seconds=embedding_seconds,
        )
