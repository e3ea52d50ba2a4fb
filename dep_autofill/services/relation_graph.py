"""
Relation Graph — queries over the section relation table.

Direct and transitive neighbours for grouping answered questions by topic.
The table is hand-maintained, so traversal is cycle-safe and the table's
invariants (one entry per section, symmetric, no self or duplicate
references) can be verified on demand or eagerly at construction.
"""

from __future__ import annotations

import logging
from collections import Counter, deque
from typing import Iterable, Optional

from dep_autofill.data.sections import SECTION_RELATIONS
from dep_autofill.models import Section, SectionRelation

logger = logging.getLogger(__name__)


class RelationTableError(ValueError):
    """The section relation table violates one of its invariants."""

    def __init__(self, violations: list[str]):
        self.violations = violations
        super().__init__("Invalid section relation table: " + "; ".join(violations))


class RelationGraph:
    """Adjacency view of a SectionRelation table."""

    def __init__(
        self,
        relations: Optional[Iterable[SectionRelation]] = None,
        validate: bool = False,
    ):
        self._relations: tuple[SectionRelation, ...] = tuple(
            relations if relations is not None else SECTION_RELATIONS
        )
        # First entry wins if a section is listed twice; find_violations() reports it
        self._adjacency: dict[Section, list[Section]] = {}
        for relation in self._relations:
            self._adjacency.setdefault(relation.section, list(relation.related_to))

        if validate:
            violations = self.find_violations()
            if violations:
                raise RelationTableError(violations)

    @property
    def relations(self) -> tuple[SectionRelation, ...]:
        return self._relations

    # ── Queries ──────────────────────────────────────────

    def related_sections(self, section: Section) -> list[Section]:
        """Direct neighbours of ``section`` (empty if it has no entry)."""
        return list(self._adjacency.get(section, []))

    def sections_related_to(self, section: Section) -> list[Section]:
        """Sections whose entry lists ``section``."""
        return [r.section for r in self._relations if section in r.related_to]

    def all_related_sections(self, section: Section) -> list[Section]:
        """Every section reachable from ``section``, excluding it, in BFS order."""
        return [s for s in self._reachable(section) if s != section]

    def section_cluster(self, section: Section) -> list[Section]:
        """``section`` followed by everything reachable from it."""
        return self._reachable(section)

    def are_sections_related(self, first: Section, second: Section) -> bool:
        """Same section, direct neighbours either way, or sharing a direct neighbour."""
        if first == second:
            return True
        first_related = self.related_sections(first)
        second_related = self.related_sections(second)
        if second in first_related or first in second_related:
            return True
        return any(s in second_related for s in first_related)

    def _reachable(self, origin: Section) -> list[Section]:
        visited: set[Section] = {origin}
        order: list[Section] = [origin]
        queue: deque[Section] = deque([origin])

        while queue:
            current = queue.popleft()
            for neighbour in self._adjacency.get(current, []):
                if neighbour not in visited:
                    visited.add(neighbour)
                    order.append(neighbour)
                    queue.append(neighbour)
        return order

    # ── Verification ─────────────────────────────────────

    def verify_all_sections_have_relation(self) -> bool:
        defined = {r.section for r in self._relations}
        return all(s in defined for s in Section)

    def find_violations(self) -> list[str]:
        """Describe every broken invariant; an empty list means the table is sound."""
        violations: list[str] = []

        counts = Counter(r.section for r in self._relations)
        for section in Section:
            if counts[section] == 0:
                violations.append(f"Section {section.value} has no relation entry")
            elif counts[section] > 1:
                violations.append(f"Section {section.value} has {counts[section]} relation entries")

        for relation in self._relations:
            source = relation.section
            if source in relation.related_to:
                violations.append(f"Section {source.value} lists itself")

            duplicates = [s for s, n in Counter(relation.related_to).items() if n > 1]
            for dup in duplicates:
                violations.append(f"Section {source.value} lists {dup.value} more than once")

            for target in dict.fromkeys(relation.related_to):
                if target == source:
                    continue
                if source not in self._adjacency.get(target, []):
                    violations.append(
                        f"Asymmetric relation: {source.value} → {target.value} "
                        f"but not {target.value} → {source.value}"
                    )

        if violations:
            logger.warning(f"Section relation table has {len(violations)} violation(s)")
        return violations

    def is_consistent(self) -> bool:
        return not self.find_violations()
