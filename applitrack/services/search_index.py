"""
Inverted-index search over job applications.

The index maps every word, and every prefix of every word, to the positions
of the records containing it. Lookups are then a dictionary hit per query term
plus a set intersection, which gives instant search-as-you-type over the
whole collection.

Matching is by word prefix: "eng" finds "engineer" but not "reengineer".
The linear search in search_service matches substrings instead.
"""
import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Set

from applitrack.schemas.job import JobApplication

logger = logging.getLogger(__name__)

SearchIndexMap = Dict[str, Set[int]]


def index_fields(job: JobApplication) -> List[Optional[str]]:
    """Record fields that feed the searchable text, in order."""
    return [
        job.company,
        job.role,
        job.work_location,
        job.category,
        job.notes,
        job.status,
        job.experience_level,
        job.job_type,
        job.work_mode,
    ]


def searchable_text(fields: Sequence[Optional[str]]) -> str:
    """Lower-cased, space-joined text of the non-empty fields."""
    return " ".join(field for field in fields if field).lower()


def build_index(jobs: Sequence[JobApplication]) -> SearchIndexMap:
    """
    Build a word/prefix index over the given records.

    Args:
        jobs: Records to index; positions in this sequence are the postings

    Returns:
        Mapping from token to the set of record positions containing it
    """
    index: SearchIndexMap = defaultdict(set)

    for position, job in enumerate(jobs):
        for word in searchable_text(index_fields(job)).split():
            # Every prefix, including the full word
            for end in range(1, len(word) + 1):
                index[word[:end]].add(position)

    logger.debug(f"Search index built: records={len(jobs)}, tokens={len(index)}")
    return dict(index)


def search_with_index(
    query: str,
    jobs: Sequence[JobApplication],
    index: SearchIndexMap,
) -> List[JobApplication]:
    """
    Find records matching every query term by word prefix.

    Args:
        query: Free text; terms are whitespace-separated
        jobs: The records the index was built from
        index: Output of build_index(jobs)

    Returns:
        Matching records in their original order. A blank query returns
        the input unchanged; a term missing from the index matches nothing.
    """
    if not query.strip():
        return list(jobs)

    result: Optional[Set[int]] = None
    for term in query.lower().split():
        postings = index.get(term, set())
        result = set(postings) if result is None else result & postings
        if not result:
            return []

    return [jobs[position] for position in sorted(result or ())]


class SearchIndex:
    """
    A built index bound to the records it covers.

    Rebuild (or call refresh) whenever the record list changes; positions are
    only meaningful for the exact sequence that was indexed.
    """

    def __init__(self, jobs: Sequence[JobApplication]):
        self.refresh(jobs)

    def refresh(self, jobs: Sequence[JobApplication]) -> None:
        self.jobs = list(jobs)
        self.index = build_index(self.jobs)

    def search(self, query: str) -> List[JobApplication]:
        started = time.perf_counter()
        results = search_with_index(query, self.jobs, self.index)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(
            f"Indexed search: query_terms={len(query.split())}, "
            f"total={len(self.jobs)}, matched={len(results)}, elapsed_ms={elapsed_ms:.2f}"
        )
        return results

    def __len__(self) -> int:
        return len(self.index)
