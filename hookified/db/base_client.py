from typing import Any, Dict, List

from sqlalchemy import text
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from hookified.constants import DATABASE_URL


class BaseDBClient:
    def __init__(self):
        self.engine = create_async_engine(DATABASE_URL)
        self.async_session = async_sessionmaker(
            bind=self.engine, expire_on_commit=False
        )

    async def execute_raw_query(
        self, query: str, params: Dict[str, Any] = None
    ) -> List[Dict[str, Any]]:
        """
        Execute a raw SQL statement and return results as a list of dictionaries.

        The statement is committed, so this can also be used for statements
        with side effects (e.g. scheduler commands issued as SELECTs).

        Args:
            query: The SQL query to execute
            params: Optional dictionary of bound parameters

        Returns:
            List of dictionaries containing the returned rows
        """
        async with self.async_session() as session:
            result = await session.execute(text(query), params or {})
            rows = result.fetchall() if result.returns_rows else []
            columns = list(result.keys()) if result.returns_rows else []
            await session.commit()
            return [dict(zip(columns, row)) for row in rows]
