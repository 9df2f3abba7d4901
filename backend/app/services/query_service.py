"""
Query Service — runs one natural-language question through the pipeline:
translate → sanitize → execute → summarize, then records it in history.
"""

import enum
import json
import logging
import time
from app.config import get_settings
from app.database import RecordStore
from app.exceptions import ExecutionError, QueryPipelineError
from app.models import DataStatus, QueryHistory, QueryHistoryCreate, QueryResponse, Row
from app.services.ai_service import AIService
from app.services.query_engine import count_tables
from app.services.sql_sanitizer import clean_sql_response
from app.utils import utcnow

logger = logging.getLogger(__name__)
settings = get_settings()


class QueryStage(str, enum.Enum):
    RECEIVED = "received"
    TRANSLATING = "translating"
    SANITIZING = "sanitizing"
    EXECUTING = "executing"
    SUMMARIZING = "summarizing"
    COMPLETED = "completed"
    FAILED = "failed"


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class QueryService:
    def __init__(self, store: RecordStore, ai: AIService):
        self.store = store
        self.ai = ai

    def _run_sql(self, sql: str) -> list[Row]:
        try:
            return self.store.execute_raw_query(sql)
        except Exception as e:
            raise ExecutionError(f"Failed to execute query: {e}") from e

    async def execute_query(self, question: str) -> QueryResponse:
        """
        Answer ``question``. Pipeline failures come back as success=False
        responses rather than exceptions; only successful runs are written
        to history.
        """
        started = time.perf_counter()
        stage = QueryStage.RECEIVED
        try:
            stage = QueryStage.TRANSLATING
            raw_sql = await self.ai.convert_to_sql(question)

            stage = QueryStage.SANITIZING
            sql = clean_sql_response(raw_sql)
            if not sql:
                logger.warning(f"No usable SQL in model output for question {question!r}")

            stage = QueryStage.EXECUTING
            rows = self._run_sql(sql)
            result = json.dumps(rows, default=str)

            stage = QueryStage.SUMMARIZING
            answer = await self.ai.generate_summary(rows, question)
        except QueryPipelineError as e:
            logger.error(f"Query {stage.value} -> {QueryStage.FAILED.value}: {e}")
            return QueryResponse(
                question=question,
                sql="",
                result="",
                answer=f"Error: {e}",
                execution_time=_elapsed_ms(started),
                tables_queried=0,
                success=False,
                timestamp=utcnow().isoformat(),
            )

        response = QueryResponse(
            question=question,
            sql=sql,
            result=result,
            answer=answer,
            execution_time=_elapsed_ms(started),
            tables_queried=count_tables(sql),
            success=True,
            timestamp=utcnow().isoformat(),
        )
        self.store.create_query_history(QueryHistoryCreate(question=question, sql=sql, result=result))
        logger.debug(f"Query {stage.value} -> {QueryStage.COMPLETED.value} in {response.execution_time}ms")
        return response

    def get_query_history(self, limit: int | None = None) -> list[QueryHistory]:
        return self.store.get_query_history(limit or settings.history_default_limit)

    def clear_history(self) -> None:
        self.store.clear_query_history()
        logger.info("Query history cleared")

    def get_data_status(self) -> DataStatus:
        return self.store.get_data_counts()
