"""
MappingResolver -- Effective-date selection of account mapping configurations.

Responsibility:
    Given a tenant, a posting date and the candidate mapping configurations
    for one rule family, selects the single configuration in effect.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O. Candidates arrive
    fully materialized from a MappingConfigurationSource; the resolver never
    queries storage.

Selection rule:
    1. Keep candidates of the requested tenant only
    2. Keep candidates with effective_from <= posting_date and
       (effective_to is None or effective_to >= posting_date)
    3. Among matches the greatest effective_from wins, so a newer
       configuration overrides an older open-ended one
    4. Matches sharing that greatest effective_from are ordered by version,
       compared piecewise so that numeric runs sort as numbers (v9 < v10)
    5. Two matches with the same start and an equal version are ambiguous

Failure modes:
    - MappingConfigurationNotFoundError if nothing covers the posting date
    - AmbiguousMappingConfigurationError if start and version both tie
    - InvalidPostingDateError from normalize_posting_date

Audit relevance:
    Every successful resolution emits a ``rule_mapping_trace`` log naming the
    admissible versions and the selected one, so the dispatch decision can
    be reconstructed.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, datetime

from posting_kernel.domain.dtos import MappingConfiguration
from posting_kernel.exceptions import (
    AmbiguousMappingConfigurationError,
    InvalidPostingDateError,
    MappingConfigurationNotFoundError,
)
from posting_kernel.logging_config import get_logger

logger = get_logger("domain.mapping_resolver")

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_VERSION_PARTS = re.compile(r"([0-9]+)")


def normalize_posting_date(value: date | str) -> date:
    """
    Normalize a posting date to a calendar date.

    Accepts a ``date`` or a ``YYYY-MM-DD`` string. A ``datetime`` is
    rejected: callers decide which calendar day a timestamp belongs to.

    Raises:
        InvalidPostingDateError: If value is not a valid calendar date.
    """
    if isinstance(value, datetime):
        raise InvalidPostingDateError(value.isoformat())
    if isinstance(value, date):
        return value
    if isinstance(value, str) and _ISO_DATE.match(value):
        try:
            return date.fromisoformat(value)
        except ValueError as e:
            raise InvalidPostingDateError(value) from e
    raise InvalidPostingDateError(str(value))


def version_sort_key(version: str | int) -> tuple[tuple[int, int, str], ...]:
    """Order versions piecewise: digit runs by value, other runs as text."""
    # split() with a capturing group puts the digit runs at odd indices
    parts = _VERSION_PARTS.split(str(version))
    return tuple(
        (0, int(part), "") if i % 2 else (1, 0, part)
        for i, part in enumerate(parts)
        if part
    )


class MappingResolver:
    """
    Selects the mapping configuration in effect on a posting date.

    Contract:
        ``resolve()`` returns exactly one MappingConfiguration or raises.

    Guarantees:
        - The result does not depend on candidate order.
        - Boundary dates are inclusive on both ends.

    Non-goals:
        - Does NOT reject overlapping configurations; overlap is resolved
          by the latest-start, then latest-version tie-break.
    """

    def resolve(
        self,
        tenant_id: str,
        posting_date: date,
        candidates: Iterable[MappingConfiguration],
        rule_family: str | None = None,
    ) -> MappingConfiguration:
        """
        Resolve the mapping configuration for a posting date.

        Args:
            tenant_id: Tenant whose configuration is wanted.
            posting_date: Calendar date the event posts on.
            candidates: Candidate configurations (any order).
            rule_family: Only used to enrich errors and logs.

        Returns:
            The single applicable MappingConfiguration.

        Raises:
            MappingConfigurationNotFoundError: If no candidate covers the date.
            AmbiguousMappingConfigurationError: If start and version both tie.
        """
        tenant_candidates = [c for c in candidates if c.tenant_id == str(tenant_id)]
        matching = [c for c in tenant_candidates if c.is_effective_on(posting_date)]

        if not matching:
            logger.warning(
                "rule_mapping_not_found",
                extra={
                    "tenant_id": str(tenant_id),
                    "posting_date": posting_date.isoformat(),
                    "rule_family": rule_family,
                    "candidate_count": len(tenant_candidates),
                },
            )
            raise MappingConfigurationNotFoundError(
                str(tenant_id),
                posting_date.isoformat(),
                rule_family,
                len(tenant_candidates),
            )

        latest_start = max(c.effective_from for c in matching)
        latest = [c for c in matching if c.effective_from == latest_start]
        resolution_method = "single_match" if len(matching) == 1 else "latest_start"

        if len(latest) > 1:
            top_key = max(version_sort_key(c.version) for c in latest)
            newest = [c for c in latest if version_sort_key(c.version) == top_key]
            if len(newest) > 1:
                versions = sorted(str(c.version) for c in newest)
                logger.warning(
                    "rule_mapping_ambiguous",
                    extra={
                        "tenant_id": str(tenant_id),
                        "posting_date": posting_date.isoformat(),
                        "effective_from": latest_start.isoformat(),
                        "versions": versions,
                    },
                )
                raise AmbiguousMappingConfigurationError(
                    str(tenant_id),
                    posting_date.isoformat(),
                    latest_start.isoformat(),
                    versions,
                )
            latest = newest
            resolution_method = "latest_version"

        selected = latest[0]
        self._emit_trace(
            tenant_id,
            posting_date,
            rule_family,
            matching,
            selected,
            resolution_method,
        )
        return selected

    @staticmethod
    def _emit_trace(
        tenant_id: str,
        posting_date: date,
        rule_family: str | None,
        matching: list[MappingConfiguration],
        selected: MappingConfiguration,
        resolution_method: str,
    ) -> None:
        logger.info(
            "rule_mapping_trace",
            extra={
                "trace_type": "RULE_MAPPING_TRACE",
                "tenant_id": str(tenant_id),
                "posting_date": posting_date.isoformat(),
                "rule_family": rule_family,
                "admissible_versions": [str(c.version) for c in matching],
                "selected_version": str(selected.version),
                "selected_effective_from": selected.effective_from.isoformat(),
                "resolution_method": resolution_method,
            },
        )
