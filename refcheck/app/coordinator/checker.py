"""
Reference checker and batch coordinator.

The checker classifies one reference as valid, skipped or broken, and
drives the concurrent checking of a batch of references.

Check order for a single reference:
    1. Resolution (pure, may fail)
    2. Exclusion pattern on the resolved target (no I/O)
    3. Local target: filesystem check, never rate-limited
    4. Remote target: skipped in local-only mode, otherwise fetched while
       holding a limiter slot

Batch protocol:
    One task per reference writes its result to the sink. The sink is
    closed only after every task finished, so a consumer reading until
    the end marker sees exactly one result per submitted reference.
    A broken reference never affects its siblings.

Exception handling policy:
    Expected failures (resolution errors, filesystem errors, HTTP
    errors) are normalized into FAILED outcomes and never raise. Any
    other exception is a logic error. In a batch it is re-raised only
    after every sibling task finished and the sink was closed.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable, List, Optional

import httpx

from refcheck.app.config import CheckerConfig
from refcheck.app.checks.local import check_local_target
from refcheck.app.checks.remote import build_http_client, check_remote_target
from refcheck.app.checks.resolution import ResolutionError, resolve_reference
from refcheck.app.results import ResultSink
from refcheck.app.schemas.check_result import CheckOutcome, CheckResult
from refcheck.app.utils.concurrency import ConcurrencyLimiter

logger = logging.getLogger(__name__)


class ReferenceChecker:
    """
    Validates references found in documents.

    The configuration is immutable and the limiter is shared by reference,
    so one checker may serve any number of concurrent batches.
    """

    def __init__(
        self,
        config: CheckerConfig,
        limiter: Optional[ConcurrencyLimiter] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Direct constructor.

        A limiter sized from config.concurrency is created when none is
        given. An injected client is used for every fetch and is never
        closed by the checker; otherwise a client is opened per batch.
        """
        self._config = config
        self._limiter = (
            limiter
            if limiter is not None
            else ConcurrencyLimiter(config.concurrency)
        )
        self._client = client

    @property
    def config(self) -> CheckerConfig:
        return self._config

    @property
    def limiter(self) -> ConcurrencyLimiter:
        return self._limiter

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def check(
        self,
        reference: str,
        source_file: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> CheckOutcome:
        """
        Check a single reference found in source_file.

        Never raises for a broken reference; the outcome says why it is
        broken.
        """
        try:
            resolution = resolve_reference(
                reference,
                source_file,
                self._config.document_root,
            )
        except ResolutionError as exc:
            logger.debug("cannot resolve %r: %s", reference, exc)
            return CheckOutcome.failed(exc.kind, exc.message)

        if self._config.is_excluded(resolution.target):
            logger.debug("%s matches the exclusion pattern", resolution.target)
            return CheckOutcome.ok()

        if resolution.is_local:
            return check_local_target(resolution.target)

        if self._config.local_only:
            return CheckOutcome.skipped()

        async with self._client_scope(client) as http:
            return await check_remote_target(
                http,
                resolution.target,
                limiter=self._limiter,
                timeout=self._config.request_timeout,
            )

    async def check_many(
        self,
        references: Iterable[str],
        source_file: str,
        sink: ResultSink,
    ) -> None:
        """
        Check every reference concurrently and stream results to sink.

        Returns after all checks completed and sink was closed.
        """
        references = list(references)
        logger.info(
            "checking %d reference(s) from %s", len(references), source_file
        )

        outcomes: List[object] = []
        try:
            if references:
                async with self._client_scope() as client:
                    tasks = [
                        asyncio.create_task(
                            self._check_into(reference, source_file, sink, client)
                        )
                        for reference in references
                    ]
                    outcomes = await asyncio.gather(
                        *tasks, return_exceptions=True
                    )
        finally:
            await sink.close()

        errors = [o for o in outcomes if isinstance(o, BaseException)]
        if errors:
            logger.error(
                "%d check(s) from %s raised unexpectedly",
                len(errors),
                source_file,
            )
            raise errors[0]

        logger.info("finished checking references from %s", source_file)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _check_into(
        self,
        reference: str,
        source_file: str,
        sink: ResultSink,
        client: httpx.AsyncClient,
    ) -> None:
        outcome = await self.check(reference, source_file, client=client)
        await sink.emit(CheckResult(reference=reference, outcome=outcome))

    @asynccontextmanager
    async def _client_scope(
        self,
        client: Optional[httpx.AsyncClient] = None,
    ) -> AsyncIterator[httpx.AsyncClient]:
        """
        Yield the client to fetch with.

        Priority: per-call client, injected client, fresh client closed on
        exit.
        """
        if client is not None:
            yield client
        elif self._client is not None:
            yield self._client
        else:
            async with build_http_client(self._config) as fresh:
                yield fresh
