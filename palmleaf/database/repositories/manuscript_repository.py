from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from palmleaf.database.connection import get_connection
from palmleaf.database.models import ManuscriptRecord, NewManuscriptRecord
from palmleaf.inference.exceptions import AnalysisValidationError
from palmleaf.inference.validator import serialize_analysis, validate_and_build
from palmleaf.processor.exceptions import StoreError

_SELECT_COLUMNS = "id, timestamp, original_image, restored_image, analysis"


class ManuscriptRepository:
    """Database operations for the manuscripts table.

    Records are append-only: there is no update statement, a stored record
    can only be removed as a whole.
    """

    def create(self, record: NewManuscriptRecord) -> int:
        """Insert a record and return its database-assigned id.

        Raises:
            StoreError: if the insert fails.
        """
        analysis = (
            Jsonb(serialize_analysis(record.analysis)) if record.analysis is not None else None
        )
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO manuscripts
                        (timestamp, original_image, restored_image, analysis)
                        VALUES (%s, %s, %s, %s)
                        RETURNING id
                        """,
                        (
                            record.timestamp,
                            record.original_image,
                            record.restored_image,
                            analysis,
                        ),
                    )
                    row = cur.fetchone()
                conn.commit()
        except psycopg.Error as exc:
            raise StoreError(f"Failed to save manuscript: {exc}") from exc

        if row is None:
            raise StoreError("Insert returned no id")
        return int(row[0])

    def list_all(self) -> list[ManuscriptRecord]:
        """Return every record, newest first.

        Raises:
            StoreError: if the query fails.
        """
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        f"""
                        SELECT {_SELECT_COLUMNS}
                        FROM manuscripts
                        ORDER BY timestamp DESC, id DESC
                        """
                    )
                    rows = cur.fetchall()
        except psycopg.Error as exc:
            raise StoreError(f"Failed to fetch manuscripts: {exc}") from exc

        return [self._to_record(row) for row in rows]

    def find_by_id(self, record_id: int) -> ManuscriptRecord | None:
        """Find a record by ID. Returns None if it does not exist.

        Raises:
            StoreError: if the query fails.
        """
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        f"SELECT {_SELECT_COLUMNS} FROM manuscripts WHERE id = %s",
                        (record_id,),
                    )
                    row = cur.fetchone()
        except psycopg.Error as exc:
            raise StoreError(f"Failed to fetch manuscript {record_id}: {exc}") from exc

        if row is None:
            return None
        return self._to_record(row)

    def delete(self, record_id: int) -> bool:
        """Delete a record. Returns False when no record had that id.

        Raises:
            StoreError: if the delete fails.
        """
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("DELETE FROM manuscripts WHERE id = %s", (record_id,))
                    deleted = cur.rowcount > 0
                conn.commit()
        except psycopg.Error as exc:
            raise StoreError(f"Failed to delete manuscript {record_id}: {exc}") from exc
        return deleted

    @staticmethod
    def _to_record(row: dict[str, Any]) -> ManuscriptRecord:
        raw_analysis = row["analysis"]
        try:
            analysis = validate_and_build(raw_analysis) if raw_analysis is not None else None
        except AnalysisValidationError as exc:
            raise StoreError(f"Manuscript {row['id']} has a corrupt analysis: {exc}") from exc
        return ManuscriptRecord(
            id=row["id"],
            timestamp=row["timestamp"],
            original_image=row["original_image"],
            restored_image=row["restored_image"],
            analysis=analysis,
        )
