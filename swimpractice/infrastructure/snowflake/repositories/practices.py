"""
Snowflake repository for structured practices.

A practice's sets live in practice_sets and their items in
practice_set_items. The notation editor always saves a practice as a
whole, so the write path is replace-all: delete every stored row for the
practice, then insert the freshly parsed tree, inside one transaction.

Callers only hand this repository sets from a successful parse. Storing a
partial practice would silently lose the lines the coach has yet to fix.
"""

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import UUID, uuid4

from swimpractice.core.practice.models import (
    Equipment,
    Intensity,
    PracticeItem,
    PracticeSet,
    SetType,
    Stroke,
)


logger = logging.getLogger(__name__)


class SnowflakeConnection(Protocol):
    """
    Protocol for Snowflake connections.

    Tests and mock mode provide an in-memory implementation without
    importing snowflake-connector-python.
    """

    def cursor(self): ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...


@dataclass
class SnowflakeConfig:
    """Configuration for Snowflake connection."""
    account: str
    user: str
    password: Optional[str] = None
    private_key_path: Optional[str] = None
    private_key_base64: Optional[str] = None
    database: str = "SWIMPRACTICE"
    schema: str = "PRACTICES"
    warehouse: str = "COMPUTE_WH"
    role: Optional[str] = None


class PracticeRepository:
    """
    Repository for practice set/item persistence.

    - replace_practice_sets: store a parsed practice, replacing what was there
    - get_practice_sets: load a practice's sets in order
    - ping: cheap round trip for readiness checks
    """

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

    def replace_practice_sets(
        self,
        practice_id: UUID,
        sets: Sequence[PracticeSet],
    ) -> None:
        """
        Replace every stored set and item of a practice.

        Runs in a single transaction; on any failure the previous
        practice is left intact and the error is re-raised.
        """
        cursor = self._conn.cursor()

        try:
            cursor.execute("BEGIN")
            self._delete_practice(cursor, practice_id)

            for practice_set in sets:
                set_id = uuid4()
                self._insert_set(cursor, practice_id, set_id, practice_set)
                for item in practice_set.items:
                    self._insert_item(cursor, set_id, item)

            self._conn.commit()

            logger.info(
                "Saved practice sets",
                extra={
                    "practice_id": str(practice_id),
                    "set_count": len(sets),
                    "item_count": sum(len(s.items) for s in sets),
                },
            )

        except Exception as e:
            logger.error(
                "Failed to save practice sets",
                extra={"practice_id": str(practice_id), "error": str(e)},
            )
            self._conn.rollback()
            raise
        finally:
            cursor.close()

    def get_practice_sets(self, practice_id: UUID) -> list[PracticeSet]:
        """
        Load a practice's sets and items, both ordered by order_index.

        A practice with nothing stored yields an empty list.
        """
        cursor = self._conn.cursor()

        try:
            cursor.execute("""
                SELECT
                    s.set_id,
                    s.name,
                    s.set_type,
                    s.order_index,
                    i.order_index AS item_order_index,
                    i.reps,
                    i.distance,
                    i.stroke,
                    i.interval_text,
                    i.description,
                    i.intensity,
                    i.equipment
                FROM practice_sets s
                LEFT JOIN practice_set_items i ON i.set_id = s.set_id
                WHERE s.practice_id = %s
                ORDER BY s.order_index, i.order_index
            """, (str(practice_id),))

            rows = cursor.fetchall()
            return self._build_sets_from_rows(rows)

        finally:
            cursor.close()

    def ping(self) -> bool:
        cursor = self._conn.cursor()
        try:
            cursor.execute("SELECT 1")
            return True
        finally:
            cursor.close()

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    def _delete_practice(self, cursor, practice_id: UUID) -> None:
        """Remove items first, then the sets that own them."""
        cursor.execute("""
            DELETE FROM practice_set_items
            WHERE set_id IN (
                SELECT set_id FROM practice_sets WHERE practice_id = %s
            )
        """, (str(practice_id),))

        cursor.execute("""
            DELETE FROM practice_sets WHERE practice_id = %s
        """, (str(practice_id),))

    def _insert_set(
        self,
        cursor,
        practice_id: UUID,
        set_id: UUID,
        practice_set: PracticeSet,
    ) -> None:
        cursor.execute("""
            INSERT INTO practice_sets (set_id, practice_id, name, set_type, order_index)
            VALUES (%s, %s, %s, %s, %s)
        """, (
            str(set_id),
            str(practice_id),
            practice_set.name,
            practice_set.set_type.value,
            practice_set.order_index,
        ))

    def _insert_item(self, cursor, set_id: UUID, item: PracticeItem) -> None:
        # PARSE_JSON is not allowed in a VALUES clause, hence INSERT ... SELECT
        equipment_json = json.dumps([e.value for e in item.equipment])

        cursor.execute("""
            INSERT INTO practice_set_items (
                item_id, set_id, order_index, reps, distance, stroke,
                interval_text, description, intensity, equipment
            )
            SELECT %s, %s, %s, %s, %s, %s, %s, %s, %s, PARSE_JSON(%s)
        """, (
            str(uuid4()),
            str(set_id),
            item.order_index,
            item.reps,
            item.distance,
            item.stroke.value,
            item.interval,
            item.description,
            item.intensity.value if item.intensity else None,
            equipment_json,
        ))

    def _build_sets_from_rows(self, rows: list) -> list[PracticeSet]:
        """
        Group joined set/item rows into PracticeSets.

        Rows arrive ordered by set then item; a set without items comes
        back as a single row whose item columns are all NULL.
        """
        grouped: dict[str, dict] = {}

        for row in rows:
            set_id = row[0]
            entry = grouped.setdefault(set_id, {
                "name": row[1],
                "set_type": SetType(row[2]),
                "order_index": row[3],
                "items": [],
            })

            if row[4] is None:
                continue

            entry["items"].append(PracticeItem(
                order_index=row[4],
                reps=row[5],
                distance=row[6],
                stroke=Stroke(row[7]),
                interval=row[8],
                description=row[9],
                intensity=Intensity(row[10]) if row[10] else None,
                equipment=tuple(Equipment(e) for e in self._parse_variant_json(row[11]) or []),
            ))

        return [
            PracticeSet(
                name=entry["name"],
                set_type=entry["set_type"],
                order_index=entry["order_index"],
                items=tuple(entry["items"]),
            )
            for entry in grouped.values()
        ]

    def _parse_variant_json(self, variant_data):
        """
        Parse Snowflake VARIANT data that might be a string or already parsed.

        snowflake-connector-python returns VARIANT columns as JSON strings;
        other drivers and the mock may hand back the list itself.
        """
        if not variant_data:
            return None

        if isinstance(variant_data, str):
            try:
                return json.loads(variant_data)
            except json.JSONDecodeError as e:
                logger.error(
                    "Failed to parse VARIANT JSON string",
                    extra={"variant_data": variant_data[:100], "error": str(e)},
                )
                return None

        return variant_data
