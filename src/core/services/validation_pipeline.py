"""Commit validation orchestration.

This module owns the per-commit state machine and the aggregation of a run.
The CLI only wires settings in and renders what comes out: printing and
progress reporting go through `PipelineHooks`, so the pipeline is reusable
from tests or other entry points.

Flow per commit (strictly in input order):
  extract keys -> none? invalid
               -> check the first key only -> exists / not found / lookup failed
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from adapters.git_history import GitRangeResolver
from adapters.http_client import build_async_client
from adapters.issue_tracker import JiraIssueChecker
from core.config import AppSettings
from core.domain.models import (
    CommitRecord,
    ExistenceVerdict,
    IssueLookup,
    TicketKey,
    TrackerConfig,
    ValidationRecord,
    ValidationReport,
    ValidationSummary,
    Verdict,
)
from core.interfaces.history import CommitRangeResolver
from core.interfaces.tracker import IssueExistenceChecker
from core.services.key_extractor import extract_ticket_keys

logger = logging.getLogger(__name__)

NO_KEYS_REASON = "no keys found in commit summary"


def not_found_reason(ticket_key: TicketKey) -> str:
    return f"Jira key '{ticket_key}' not found in tracker (404)"


def lookup_error_reason(detail: str) -> str:
    return f"lookup error: {detail}"


@dataclass
class ValidationRequest:
    """Parameters of a single validation run."""

    start_ref: str
    end_ref: str
    repo_path: Path | None = None
    max_concurrency: int | None = None


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (progress, per-commit lines)."""

    range_resolved: Callable[[Sequence[CommitRecord]], None] | None = None
    commit_started: Callable[[int, int, CommitRecord], None] | None = None
    commit_validated: Callable[[int, int, ValidationRecord], None] | None = None


@dataclass
class _Progress:
    hooks: PipelineHooks
    total: int

    def started(self, index: int, commit: CommitRecord) -> None:
        if self.hooks.commit_started:
            self.hooks.commit_started(index, self.total, commit)

    def validated(self, index: int, record: ValidationRecord) -> None:
        if self.hooks.commit_validated:
            self.hooks.commit_validated(index, self.total, record)


def record_from_lookup(
    commit: CommitRecord,
    ticket_keys: Sequence[TicketKey],
    lookup: IssueLookup,
) -> ValidationRecord:
    keys = tuple(ticket_keys)
    if lookup.verdict is ExistenceVerdict.EXISTS:
        return ValidationRecord(
            commit=commit,
            ticket_keys=keys,
            verdict=Verdict.VALID,
            checked_key=lookup.ticket_key,
            status_code=lookup.status_code,
        )
    if lookup.verdict is ExistenceVerdict.NOT_FOUND:
        reason = not_found_reason(lookup.ticket_key)
    else:
        reason = lookup_error_reason(lookup.detail or "unknown error")
    return ValidationRecord(
        commit=commit,
        ticket_keys=keys,
        verdict=Verdict.INVALID,
        reason=reason,
        checked_key=lookup.ticket_key,
        status_code=lookup.status_code,
    )


async def validate_commit(commit: CommitRecord, checker: IssueExistenceChecker) -> ValidationRecord:
    """Run the state machine for one commit.

    Only the first key found is sent to the tracker; later keys are kept on
    the record but never checked.
    """

    ticket_keys = extract_ticket_keys(commit.summary)
    if not ticket_keys:
        return ValidationRecord(
            commit=commit,
            ticket_keys=(),
            verdict=Verdict.INVALID,
            reason=NO_KEYS_REASON,
        )

    lookup = await checker.exists(ticket_keys[0])
    return record_from_lookup(commit, ticket_keys, lookup)


async def validate_commits(
    commits: Sequence[CommitRecord],
    checker: IssueExistenceChecker,
    *,
    max_concurrency: int = 1,
    hooks: PipelineHooks | None = None,
) -> list[ValidationRecord]:
    """Validate every commit; never stops at the first invalid one.

    With `max_concurrency == 1` one lookup is in flight at a time. Above that,
    lookups run in a bounded pool and hooks fire afterwards, so callers always
    see records (and progress) in input order.
    """

    progress = _Progress(hooks=hooks or PipelineHooks(), total=len(commits))

    if max_concurrency <= 1:
        records: list[ValidationRecord] = []
        for index, commit in enumerate(commits, start=1):
            progress.started(index, commit)
            record = await validate_commit(commit, checker)
            progress.validated(index, record)
            records.append(record)
        return records

    sem = asyncio.Semaphore(max_concurrency)

    async def validate_one(commit: CommitRecord) -> ValidationRecord:
        async with sem:
            return await validate_commit(commit, checker)

    # gather() keeps input order regardless of completion order.
    records = list(await asyncio.gather(*(validate_one(c) for c in commits)))
    for index, (commit, record) in enumerate(zip(commits, records), start=1):
        progress.started(index, commit)
        progress.validated(index, record)
    return records


def build_report(
    *,
    start_ref: str,
    end_ref: str,
    records: Sequence[ValidationRecord],
) -> ValidationReport:
    records = list(records)
    return ValidationReport(
        start_ref=start_ref,
        end_ref=end_ref,
        records=records,
        summary=ValidationSummary.from_records(records),
    )


async def run_validation(
    *,
    settings: AppSettings,
    request: ValidationRequest,
    tracker: TrackerConfig | None = None,
    hooks: PipelineHooks | None = None,
    resolver: CommitRangeResolver | None = None,
    checker: IssueExistenceChecker | None = None,
) -> ValidationReport:
    """Resolve the range, validate every commit and aggregate the outcome.

    Range errors (`core.errors.RangeResolutionError`) propagate before any
    tracker call is made and before any record exists.
    """

    hooks = hooks or PipelineHooks()
    max_concurrency = request.max_concurrency or settings.max_concurrency
    if checker is None and tracker is None:
        # Fail on missing credentials before touching the repository.
        tracker = settings.tracker_config()

    resolver = resolver or GitRangeResolver(request.repo_path or settings.repo_path)
    commits = resolver.resolve(request.start_ref, request.end_ref)
    logger.info("Found %d commit(s) in %s..%s", len(commits), request.start_ref, request.end_ref)
    if hooks.range_resolved:
        hooks.range_resolved(commits)

    if not commits:
        return build_report(start_ref=request.start_ref, end_ref=request.end_ref, records=[])

    if checker is not None:
        records = await validate_commits(commits, checker, max_concurrency=max_concurrency, hooks=hooks)
    else:
        async with build_async_client(settings) as client:
            jira = JiraIssueChecker(tracker or settings.tracker_config(), settings, client=client)
            records = await validate_commits(commits, jira, max_concurrency=max_concurrency, hooks=hooks)

    report = build_report(start_ref=request.start_ref, end_ref=request.end_ref, records=records)
    logger.info(
        "Validation finished: %d valid, %d invalid",
        report.summary.valid,
        report.summary.invalid,
    )
    return report
