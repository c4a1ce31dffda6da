"""Query mode executor: submit, poll to a terminal status, shape rows."""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import tzinfo
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from loglens.exceptions import (
    InvalidTimeRangeError,
    JobFailedError,
    PollFailedError,
    QueryCancelledError,
    QueryTimeoutError,
    SubmitFailedError,
    TimeError,
    TransportError,
)
from loglens.query.models import (
    ExecutionState,
    JobStatus,
    QueryMetrics,
    QueryResult,
    ResultRow,
    TimeSelector,
)
from loglens.query.timewindow import resolve_time_range
from loglens.query.translator import translate
from loglens.query.validator import PatternValidator, sanitize_for_logging

if TYPE_CHECKING:
    from loglens.transport.base import LogTransport

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[Any]]


class CancellationToken:
    """Flag a caller sets to stop polling; checked before every poll."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class QueryRun:
    """Observable state of one query invocation."""

    source: str
    state: ExecutionState = ExecutionState.SUBMITTING
    job_id: str | None = None
    poll_count: int = 0
    last_status: JobStatus | None = None


class QueryHandle:
    """
    Handle to a query running as an asyncio task.

    ``cancel()`` stops polling at the next check. The backend job is not
    stopped and may keep running remotely.
    """

    def __init__(
        self, task: "asyncio.Task[QueryResult]", token: CancellationToken, run: QueryRun
    ) -> None:
        self._task = task
        self._token = token
        self._run = run

    @property
    def state(self) -> ExecutionState:
        return self._run.state

    @property
    def job_id(self) -> str | None:
        return self._run.job_id

    @property
    def poll_count(self) -> int:
        return self._run.poll_count

    def cancel(self) -> None:
        self._token.cancel()

    def done(self) -> bool:
        return self._task.done()

    async def result(self) -> QueryResult:
        """Wait for the query and return its result (or raise its error)."""
        return await self._task


def shape_rows(raw_rows: list[list[dict[str, Any]]] | None) -> list[ResultRow]:
    """
    Turn backend rows of {field, value} pairs into column -> value mappings.

    Every row is shaped on its own, so rows may end up with different
    columns. Pairs without a field name are dropped; a missing value becomes
    an empty string.
    """
    rows: list[ResultRow] = []
    for raw_row in raw_rows or []:
        row: ResultRow = {}
        for item in raw_row or []:
            field = item.get("field")
            if not field:
                continue
            value = item.get("value")
            row[field] = "" if value is None else str(value)
        rows.append(row)
    return rows


class QueryExecutor:
    """
    Run SQL-subset queries against an asynchronous analytics backend.

    The run moves through SUBMITTING and POLLING to one of COMPLETED, FAILED,
    ABANDONED (caller cancelled) or TIMED_OUT (caller deadline). Polling has no
    built-in iteration cap; bound it with ``timeout_seconds`` or a
    CancellationToken.

    Features:
    - SQL translation to the pipeline dialect
    - Fixed delay between status polls
    - Cancellation checked before every poll
    - Optional deadline via asyncio.wait_for
    - Query metrics logging

    Usage:
        executor = QueryExecutor(transport)
        result = await executor.run_query(
            source="/aws/lambda/api",
            sql="SELECT count(*) FROM x GROUP BY @logStream",
            selector=Relative("1h"),
            now_ms=now_ms,
        )
    """

    def __init__(
        self,
        transport: "LogTransport",
        poll_interval_seconds: float = 1.0,
        sleep: SleepFunc | None = None,
        validator: PatternValidator | None = None,
    ) -> None:
        """
        Initialize query executor.

        Args:
            transport: Backend transport providing submit_query and poll_query
            poll_interval_seconds: Delay before each status poll
            sleep: Awaitable sleep function (asyncio.sleep if not provided)
            validator: Pattern validator used for query hashing
        """
        self.transport = transport
        self.poll_interval_seconds = poll_interval_seconds
        self._sleep = sleep or asyncio.sleep
        self.validator = validator or PatternValidator()

    async def run_query(
        self,
        source: str,
        sql: str,
        selector: TimeSelector,
        now_ms: int,
        cancel_token: CancellationToken | None = None,
        timeout_seconds: float | None = None,
        tz: tzinfo | None = None,
        run: QueryRun | None = None,
    ) -> QueryResult:
        """
        Translate, submit and poll a query until it reaches a terminal status.

        Args:
            source: Log source (log group) name
            sql: SQL-subset query text
            selector: Time selector for the window
            now_ms: Current time in epoch milliseconds
            cancel_token: Token the caller sets to stop polling
            timeout_seconds: Optional deadline for the whole run
            tz: Zone for naive custom bounds
            run: State record to update (created if not provided)

        Returns:
            QueryResult with shaped rows

        Raises:
            InvalidTimeRangeError: If the selector cannot be resolved
            SubmitFailedError: If the backend rejects the query
            PollFailedError: If a status poll fails
            JobFailedError: If the job ends Failed, Cancelled, Timeout or Unknown
            QueryCancelledError: If the caller cancelled polling
            QueryTimeoutError: If the deadline expired
        """
        run = run or QueryRun(source=source)
        token = cancel_token or CancellationToken()
        start_time = time.time()
        query_hash = self.validator.hash_query(sql)

        logger.info(
            "Executing query",
            extra={
                "source": source,
                "query_hash": query_hash,
                "timeout_seconds": timeout_seconds,
                "query": sanitize_for_logging(sql),
            },
        )

        try:
            if timeout_seconds is None:
                result = await self._execute(run, token, source, sql, selector, now_ms, tz)
            else:
                result = await asyncio.wait_for(
                    self._execute(run, token, source, sql, selector, now_ms, tz),
                    timeout=timeout_seconds,
                )

            result.execution_time_seconds = time.time() - start_time
            self._log_metrics(
                source=source,
                query_hash=query_hash,
                execution_time=result.execution_time_seconds,
                poll_count=run.poll_count,
                row_count=result.row_count,
                success=True,
            )

            logger.info(
                "Query executed successfully",
                extra={
                    "source": source,
                    "query_hash": query_hash,
                    "job_id": run.job_id,
                    "row_count": result.row_count,
                    "execution_time": result.execution_time_seconds,
                },
            )

            return result

        except asyncio.TimeoutError:
            run.state = ExecutionState.TIMED_OUT
            self._log_metrics(
                source=source,
                query_hash=query_hash,
                execution_time=time.time() - start_time,
                poll_count=run.poll_count,
                row_count=0,
                success=False,
                error_type="timeout",
            )

            logger.error(
                "Query timeout",
                extra={
                    "source": source,
                    "query_hash": query_hash,
                    "job_id": run.job_id,
                    "timeout_seconds": timeout_seconds,
                },
            )
            raise QueryTimeoutError(timeout_seconds)

        except Exception as e:
            self._log_metrics(
                source=source,
                query_hash=query_hash,
                execution_time=time.time() - start_time,
                poll_count=run.poll_count,
                row_count=0,
                success=False,
                error_type=type(e).__name__,
            )

            logger.error(
                f"Query execution failed: {e}",
                extra={
                    "source": source,
                    "query_hash": query_hash,
                    "job_id": run.job_id,
                    "error": str(e),
                },
            )
            raise

    def start_query(
        self,
        source: str,
        sql: str,
        selector: TimeSelector,
        now_ms: int,
        timeout_seconds: float | None = None,
        tz: tzinfo | None = None,
    ) -> QueryHandle:
        """
        Run a query in the background and return a cancellable handle.

        Must be called from a running event loop.
        """
        token = CancellationToken()
        run = QueryRun(source=source)
        task = asyncio.create_task(
            self.run_query(
                source,
                sql,
                selector,
                now_ms,
                cancel_token=token,
                timeout_seconds=timeout_seconds,
                tz=tz,
                run=run,
            )
        )
        return QueryHandle(task, token, run)

    async def _execute(
        self,
        run: QueryRun,
        token: CancellationToken,
        source: str,
        sql: str,
        selector: TimeSelector,
        now_ms: int,
        tz: tzinfo | None,
    ) -> QueryResult:
        """
        Drive one run through its states.

        Raises:
            See run_query
        """
        run.state = ExecutionState.SUBMITTING

        try:
            time_range = resolve_time_range(selector, now_ms, tz)
        except TimeError as e:
            run.state = ExecutionState.FAILED
            raise InvalidTimeRangeError(e.message) from e

        query_text = translate(sql).render()

        if token.cancelled:
            run.state = ExecutionState.ABANDONED
            raise QueryCancelledError()

        try:
            job_id = await self.transport.submit_query(
                source, query_text, time_range.start_seconds, time_range.end_seconds
            )
        except Exception as e:
            run.state = ExecutionState.FAILED
            message = e.message if isinstance(e, TransportError) else str(e)
            raise SubmitFailedError(message, query=query_text) from e

        run.job_id = job_id
        run.state = ExecutionState.POLLING
        logger.debug(
            f"Submitted query {job_id}",
            extra={"source": source, "job_id": job_id, "query": query_text},
        )

        while True:
            await self._sleep(self.poll_interval_seconds)

            if token.cancelled:
                run.state = ExecutionState.ABANDONED
                logger.info(
                    "Query polling cancelled",
                    extra={"source": source, "job_id": job_id, "poll_count": run.poll_count},
                )
                raise QueryCancelledError(job_id)

            try:
                observation = await self.transport.poll_query(job_id)
            except Exception as e:
                run.state = ExecutionState.FAILED
                message = e.message if isinstance(e, TransportError) else str(e)
                raise PollFailedError(message, job_id=job_id) from e

            run.poll_count += 1
            status = JobStatus.parse(observation.status)
            run.last_status = status

            logger.debug(
                f"Query {job_id} status {status.value}",
                extra={"job_id": job_id, "status": status.value, "poll_count": run.poll_count},
            )

            if status.is_pending:
                continue

            if status is JobStatus.COMPLETE:
                run.state = ExecutionState.COMPLETED
                return QueryResult(
                    rows=shape_rows(observation.rows),
                    query=query_text,
                    source=source,
                    job_id=job_id,
                    time_range=time_range,
                    poll_count=run.poll_count,
                    execution_time_seconds=0,
                )

            run.state = ExecutionState.FAILED
            raise JobFailedError(status.value, job_id=job_id)

    def _log_metrics(
        self,
        source: str,
        query_hash: str,
        execution_time: float,
        poll_count: int,
        row_count: int,
        success: bool,
        error_type: str | None = None,
    ) -> None:
        """
        Log query metrics.

        Args:
            source: Log source queried
            query_hash: Hash of query
            execution_time: Execution time in seconds
            poll_count: Status polls issued
            row_count: Number of rows returned
            success: Whether query succeeded
            error_type: Type of error if failed
        """
        metrics = QueryMetrics(
            source=source,
            query_hash=query_hash,
            execution_time_seconds=execution_time,
            poll_count=poll_count,
            row_count=row_count,
            success=success,
            error_type=error_type,
        )

        logger.info(
            "Query metrics",
            extra={"metrics": metrics.to_dict()},
        )
