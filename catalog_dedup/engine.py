"""
Restaurant Catalog — Deduplication Engine

Turns several normalised source batches into one deduplicated catalog.

Strategy:
    1. Load: order batches by source priority, coerce and validate records,
       drop malformed ones with a counted reason
    2. Cross-source pass: the first batch seeds a grid index; each record
       of every later batch is checked against earlier-batch records near
       it and merged into the first match, or staged as new
    3. Intra-set pass: survivors are re-indexed and compared with each
       other, catching pairs the cross-source pass never put side by side
       (two records of the same later batch, duplicates inside one source)
    4. Output: surviving records in priority order + run statistics

All records of a run live in one arena list.  Absorbing a record never
removes it; its slot is redirected to the slot that absorbed it, so slot
numbers stay stable across both passes.
"""

from __future__ import annotations

import enum
import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from pydantic import ValidationError

from .algorithms.geo_math import is_valid_coordinate
from .algorithms.match_policy import MatchResult, decide
from .algorithms.record_merger import merge_records
from .algorithms.spatial_index import SpatialIndex
from .config import DedupeConfig
from .enrichment import infer_cuisine_tags
from .errors import ConfigurationError, EmptyInputError, InvalidRecordError
from .models import NormalizedRecord, SourceBatch

logger = logging.getLogger(__name__)


CROSS_SOURCE = "cross_source"
INTRA_SET = "intra_set"

REASON_SCHEMA = "schema_error"
REASON_EMPTY_NAME = "empty_name"
REASON_BAD_COORDS = "invalid_coordinates"
REASON_LOW_CONFIDENCE = "low_confidence"
REASON_OUT_OF_BOUNDS = "out_of_bounds"


class EngineState(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    CROSS_SOURCE_PASS = "cross_source_pass"
    INTRA_SET_PASS = "intra_set_pass"
    DONE = "done"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Run results
# ---------------------------------------------------------------------------


@dataclass
class RunStats:
    """Counters for auditing a run without re-deriving them from output."""

    input_by_source: dict[str, int] = field(default_factory=dict)
    accepted_by_source: dict[str, int] = field(default_factory=dict)
    dropped_malformed: int = 0
    dropped_by_reason: dict[str, int] = field(default_factory=dict)
    filtered_by_reason: dict[str, int] = field(default_factory=dict)
    cross_source_merges: int = 0
    intra_set_merges: int = 0
    final_count: int = 0
    final_by_source: dict[str, int] = field(default_factory=dict)
    multi_source_count: int = 0
    cuisine_inferred: int = 0
    skipped_batches: int = 0
    # accepted records of skipped batches, moved out of accepted_by_source
    skipped_records: int = 0
    elapsed_s: float = 0.0

    @property
    def input_total(self) -> int:
        return sum(self.input_by_source.values())

    @property
    def merged_count(self) -> int:
        return self.cross_source_merges + self.intra_set_merges

    def to_dict(self) -> dict[str, Any]:
        return {
            "input_total": self.input_total,
            "input_by_source": dict(sorted(self.input_by_source.items())),
            "accepted_by_source": dict(sorted(self.accepted_by_source.items())),
            "dropped_malformed": self.dropped_malformed,
            "dropped_by_reason": dict(sorted(self.dropped_by_reason.items())),
            "filtered_by_reason": dict(sorted(self.filtered_by_reason.items())),
            "cross_source_merges": self.cross_source_merges,
            "intra_set_merges": self.intra_set_merges,
            "merged_count": self.merged_count,
            "final_count": self.final_count,
            "final_by_source": dict(sorted(self.final_by_source.items())),
            "multi_source_count": self.multi_source_count,
            "cuisine_inferred": self.cuisine_inferred,
            "skipped_batches": self.skipped_batches,
            "skipped_records": self.skipped_records,
            "elapsed_s": round(self.elapsed_s, 3),
        }


@dataclass
class DedupeResult:
    records: list[NormalizedRecord]
    stats: RunStats
    matches: list[dict[str, Any]] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Arena
# ---------------------------------------------------------------------------


class _Arena:
    """
    Owned storage for one run: record slots plus a redirect table.

    ``parent[slot] == slot`` while the slot is a survivor; once absorbed it
    points at the absorbing slot.  ``resolve`` follows redirects with path
    compression, like a union-find without union by rank.
    """

    def __init__(self) -> None:
        self.records: list[NormalizedRecord] = []
        self.parent: list[int] = []

    def __len__(self) -> int:
        return len(self.records)

    def add(self, record: NormalizedRecord) -> int:
        slot = len(self.records)
        self.records.append(record)
        self.parent.append(slot)
        return slot

    def resolve(self, slot: int) -> int:
        root = slot
        while self.parent[root] != root:
            root = self.parent[root]
        while self.parent[slot] != root:
            self.parent[slot], slot = root, self.parent[slot]
        return root

    def is_alive(self, slot: int) -> bool:
        return self.parent[slot] == slot

    def absorb(self, kept: int, absorbed: int) -> None:
        """Merge ``absorbed`` into ``kept`` and redirect it."""
        self.records[kept] = merge_records(self.records[kept], self.records[absorbed])
        self.parent[absorbed] = kept

    def survivors(self) -> list[int]:
        return [slot for slot in range(len(self.records)) if self.is_alive(slot)]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class DedupeEngine:
    """
    Batch deduplication over prioritised source batches.

    Each ``run`` owns its arena and spatial index; nothing is shared
    between runs, so one engine can run repeatedly.
    """

    def __init__(self, config: DedupeConfig | None = None):
        self.config = config if config is not None else DedupeConfig()
        self.state = EngineState.IDLE
        self._cancel_requested = False

    def cancel(self) -> None:
        """Stop after the batch currently being processed."""
        self._cancel_requested = True

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def run(self, batches: Sequence[SourceBatch]) -> DedupeResult:
        """
        Deduplicate ``batches`` into one catalog.

        Raises
        ------
        ConfigurationError
            A tunable is out of range; nothing has been processed.
        EmptyInputError
            No valid record across all batches. ``stats`` holds the
            per-source input and drop counts gathered so far.
        """
        try:
            return self._run(batches)
        finally:
            self._cancel_requested = False

    def _run(self, batches: Sequence[SourceBatch]) -> DedupeResult:
        t0 = time.time()
        stats = RunStats()
        matches: list[dict[str, Any]] = []

        try:
            self.config.validate()
        except ConfigurationError:
            self.state = EngineState.FAILED
            raise

        self.state = EngineState.LOADING
        ordered = self._order_batches(batches)
        loaded = [(batch, self._load_batch(batch, stats)) for batch in ordered]

        accepted = sum(len(records) for _, records in loaded)
        if accepted == 0:
            self.state = EngineState.FAILED
            stats.elapsed_s = time.time() - t0
            logger.error(
                "No valid records across %d batches (%d input, %d malformed)",
                len(ordered), stats.input_total, stats.dropped_malformed,
            )
            raise EmptyInputError("no valid records across all source batches", stats=stats)

        self.state = EngineState.CROSS_SOURCE_PASS
        arena = _Arena()
        self._cross_source_pass(arena, loaded, stats, matches)

        self.state = EngineState.INTRA_SET_PASS
        stats.intra_set_merges = self._intra_set_pass(arena, arena.survivors(), matches)
        logger.info("Intra-set pass merged %d residual duplicates", stats.intra_set_merges)

        records = [arena.records[slot] for slot in arena.survivors()]
        if self.config.infer_cuisine:
            records = self._infer_cuisines(records, stats)

        stats.final_count = len(records)
        stats.final_by_source = dict(Counter(r.source for r in records))
        stats.multi_source_count = sum(1 for r in records if len(r.provenance) > 1)
        stats.elapsed_s = time.time() - t0
        self.state = EngineState.DONE

        logger.info(
            "Final catalog: %d records (was %d accepted, merged %d duplicates) in %.1fs",
            stats.final_count, sum(stats.accepted_by_source.values()),
            stats.merged_count, stats.elapsed_s,
        )
        return DedupeResult(records=records, stats=stats, matches=matches)

    def deduplicate(self, records: Iterable[NormalizedRecord]) -> list[NormalizedRecord]:
        """Run only the intra-set pass over an existing record list."""
        self.config.validate()
        arena = _Arena()
        for record in records:
            arena.add(record)
        merges = self._intra_set_pass(arena, arena.survivors(), [])
        logger.info("Intra-set pass merged %d of %d records", merges, len(arena))
        return [arena.records[slot] for slot in arena.survivors()]

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _order_batches(self, batches: Sequence[SourceBatch]) -> list[SourceBatch]:
        # sorted() is stable, so equal ranks keep the caller's order
        return sorted(
            batches,
            key=lambda b: (self.config.source_rank(b.source_name), b.priority),
        )

    def _load_batch(self, batch: SourceBatch, stats: RunStats) -> list[NormalizedRecord]:
        dropped: Counter[str] = Counter()
        filtered: Counter[str] = Counter()
        records: list[NormalizedRecord] = []

        for raw in batch.records:
            try:
                record = self._coerce(raw, batch.source_name)
            except InvalidRecordError as exc:
                dropped[exc.reason] += 1
                logger.debug("Dropping record from %s: %s", batch.source_name, exc)
                continue

            reason = self._filter_reason(record)
            if reason:
                filtered[reason] += 1
                continue
            records.append(record)

        name = batch.source_name
        stats.input_by_source[name] = stats.input_by_source.get(name, 0) + len(batch.records)
        stats.accepted_by_source[name] = stats.accepted_by_source.get(name, 0) + len(records)
        stats.dropped_malformed += sum(dropped.values())
        for reason, count in dropped.items():
            stats.dropped_by_reason[reason] = stats.dropped_by_reason.get(reason, 0) + count
        for reason, count in filtered.items():
            stats.filtered_by_reason[reason] = stats.filtered_by_reason.get(reason, 0) + count

        logger.info(
            "Loaded %d of %d records from %s (%d malformed, %d filtered)",
            len(records), len(batch.records), name, sum(dropped.values()), sum(filtered.values()),
        )
        return records

    @staticmethod
    def _coerce(raw: NormalizedRecord | Mapping[str, Any], source_name: str) -> NormalizedRecord:
        """Validate one input into a NormalizedRecord or raise InvalidRecordError."""
        if isinstance(raw, NormalizedRecord):
            record = raw
        elif not isinstance(raw, Mapping):
            raise InvalidRecordError(REASON_SCHEMA, detail=f"not a record: {type(raw).__name__}")
        else:
            data = dict(raw)
            if not data.get("source"):
                data["source"] = source_name
            try:
                record = NormalizedRecord.model_validate(data)
            except ValidationError as exc:
                errors = [err for err in exc.errors() if err.get("loc")]
                fields = {str(err["loc"][0]) for err in errors}
                if fields & {"latitude", "longitude"}:
                    reason = REASON_BAD_COORDS
                elif any(err["loc"][0] == "name" and err.get("input") is None for err in errors):
                    reason = REASON_EMPTY_NAME
                else:
                    # includes a name of the wrong type, e.g. a bare number
                    reason = REASON_SCHEMA
                raise InvalidRecordError(reason, str(data.get("id")), detail=str(exc)) from exc

        if not record.name or not record.name.strip():
            raise InvalidRecordError(REASON_EMPTY_NAME, record.id)
        if not is_valid_coordinate(record.latitude, record.longitude):
            raise InvalidRecordError(
                REASON_BAD_COORDS, record.id,
                detail=f"({record.latitude}, {record.longitude})",
            )
        return record

    def _filter_reason(self, record: NormalizedRecord) -> str | None:
        floor = self.config.min_confidence.get(record.source)
        if floor is not None and record.confidence is not None and record.confidence < floor:
            return REASON_LOW_CONFIDENCE
        bounds = self.config.region_bounds
        if bounds is not None and not bounds.contains(record.latitude, record.longitude):
            return REASON_OUT_OF_BOUNDS
        return None

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    def _cross_source_pass(
        self,
        arena: _Arena,
        loaded: list[tuple[SourceBatch, list[NormalizedRecord]]],
        stats: RunStats,
        matches: list[dict[str, Any]],
    ) -> None:
        index = SpatialIndex(self.config.cell_size_degrees)

        for batch_no, (batch, records) in enumerate(loaded):
            staged: list[int] = []
            merged = 0
            for record in records:
                slot = arena.add(record)
                if batch_no == 0:
                    staged.append(slot)
                    continue

                for cand in index.candidates_near(record.latitude, record.longitude):
                    result = decide(arena.records[cand], record, self.config)
                    if result.matched:
                        arena.absorb(cand, slot)
                        matches.append({**result.to_dict(), "pass": CROSS_SOURCE})
                        merged += 1
                        break
                else:
                    staged.append(slot)

            # Same-batch records only meet each other in the intra-set pass
            for slot in staged:
                rec = arena.records[slot]
                index.insert(slot, rec.latitude, rec.longitude)

            stats.cross_source_merges += merged
            logger.info(
                "  %-20s %6d records → %d merged, %d new",
                batch.source_name, len(records), merged, len(staged),
            )

            remaining = len(loaded) - batch_no - 1
            if self._cancel_requested and remaining:
                stats.skipped_batches = remaining
                for skipped, pending in loaded[batch_no + 1:]:
                    name = skipped.source_name
                    stats.accepted_by_source[name] -= len(pending)
                    stats.skipped_records += len(pending)
                logger.warning(
                    "Cancelled after %s: skipping %d remaining batches (%d records)",
                    batch.source_name, remaining, stats.skipped_records,
                )
                break

    def _intra_set_pass(
        self,
        arena: _Arena,
        slots: list[int],
        matches: list[dict[str, Any]],
    ) -> int:
        index = SpatialIndex(self.config.cell_size_degrees)
        position: dict[int, int] = {}
        for pos, slot in enumerate(slots):
            rec = arena.records[slot]
            index.insert(slot, rec.latitude, rec.longitude)
            position[slot] = pos

        merges = 0
        for slot in slots:
            if not arena.is_alive(slot):
                continue
            anchor_pos = position[slot]
            rec = arena.records[slot]
            for cand in index.candidates_near(rec.latitude, rec.longitude):
                # Earlier survivors already had their turn as anchor
                if position[cand] <= anchor_pos or not arena.is_alive(cand):
                    continue
                result = decide(arena.records[slot], arena.records[cand], self.config)
                if result.matched:
                    arena.absorb(slot, cand)
                    matches.append({**result.to_dict(), "pass": INTRA_SET})
                    merges += 1
        return merges

    @staticmethod
    def _infer_cuisines(records: list[NormalizedRecord], stats: RunStats) -> list[NormalizedRecord]:
        out = []
        for record in records:
            enriched = infer_cuisine_tags(record)
            if enriched is not record:
                stats.cuisine_inferred += 1
            out.append(enriched)
        logger.info("Inferred cuisine for %d records", stats.cuisine_inferred)
        return out


def run_dedupe(
    batches: Sequence[SourceBatch],
    config: DedupeConfig | None = None,
) -> DedupeResult:
    """Convenience wrapper: one engine, one run."""
    return DedupeEngine(config).run(batches)
