"""PostgreSQL policy store using psycopg 3."""

import logging
from datetime import datetime
from typing import Any, Iterable

from stone_river.exceptions import EntityNotFoundError, StoreError
from stone_river.models.policy import Customer, Participant, Payment, PolicyStatus
from stone_river.models.policy.records import (
    CUSTOMER_COLUMNS,
    customer_from_row,
    customer_to_row,
    participant_from_dict,
    payment_from_row,
)

logger = logging.getLogger(__name__)

DDL = """
CREATE TABLE IF NOT EXISTS customers (
    id SERIAL PRIMARY KEY,
    policy_number VARCHAR(50) NOT NULL UNIQUE,
    first_name VARCHAR(100),
    surname VARCHAR(100),
    id_number VARCHAR(30),
    date_of_birth DATE,
    gender VARCHAR(10),
    phone VARCHAR(30),
    email VARCHAR(200),
    street_address VARCHAR(200),
    town VARCHAR(100),
    postal_address VARCHAR(200),
    funeral_package VARCHAR(50),
    status VARCHAR(20) NOT NULL DEFAULT 'Active',
    inception_date VARCHAR(40),
    cover_date DATE,
    premium_period VARCHAR(20) DEFAULT 'Monthly',
    total_premium NUMERIC(12,2) DEFAULT 0,
    policy_premium NUMERIC(12,2) DEFAULT 0,
    addon_premium NUMERIC(12,2) DEFAULT 0,
    assigned_agent_id INTEGER,
    latest_receipt_date DATE,
    date_created TIMESTAMPTZ DEFAULT now(),
    last_updated TIMESTAMPTZ
);

CREATE TABLE IF NOT EXISTS participants (
    id SERIAL PRIMARY KEY,
    customer_id INTEGER NOT NULL REFERENCES customers(id) ON DELETE CASCADE,
    sort_key INTEGER NOT NULL,
    uuid VARCHAR(36),
    first_name VARCHAR(100),
    surname VARCHAR(100),
    relationship VARCHAR(30),
    date_of_birth DATE,
    id_number VARCHAR(30),
    gender VARCHAR(10),
    suffix CHAR(3),
    medical_package VARCHAR(50),
    cash_back_addon VARCHAR(20),
    is_student BOOLEAN DEFAULT FALSE,
    phone VARCHAR(30),
    email VARCHAR(200),
    street_address VARCHAR(200),
    town VARCHAR(100),
    postal_address VARCHAR(200),
    UNIQUE (customer_id, sort_key)
);

CREATE TABLE IF NOT EXISTS payments (
    id SERIAL PRIMARY KEY,
    customer_id INTEGER NOT NULL REFERENCES customers(id) ON DELETE CASCADE,
    policy_number VARCHAR(50) NOT NULL,
    payment_amount NUMERIC(12,2) NOT NULL,
    payment_method VARCHAR(20),
    payment_period VARCHAR(20),
    payment_date DATE,
    receipt_filename VARCHAR(200),
    recorded_by_agent_id INTEGER,
    is_legacy_receipt BOOLEAN DEFAULT FALSE,
    legacy_receipt_notes TEXT
);

CREATE INDEX IF NOT EXISTS idx_customers_id_number ON customers(id_number);
CREATE INDEX IF NOT EXISTS idx_participants_customer ON participants(customer_id, sort_key);
CREATE INDEX IF NOT EXISTS idx_payments_customer ON payments(customer_id);
"""


class PostgresStore:
    """Read and write policy data in PostgreSQL.

    Every write commits on success and rolls back on failure. Driver
    errors surface as ``StoreError`` so batch jobs can record them and
    move on to the next customer.
    """

    PARTICIPANT_COLUMNS = [
        "customer_id", "sort_key", "uuid", "first_name", "surname",
        "relationship", "date_of_birth", "id_number", "gender", "suffix",
        "medical_package", "cash_back_addon", "is_student", "phone", "email",
        "street_address", "town", "postal_address",
    ]

    PAYMENT_COLUMNS = [
        "customer_id", "policy_number", "payment_amount", "payment_method",
        "payment_period", "payment_date", "receipt_filename",
        "recorded_by_agent_id", "is_legacy_receipt", "legacy_receipt_notes",
    ]

    def __init__(self, conn_str: str) -> None:
        try:
            import psycopg
        except ImportError as e:
            raise ImportError("psycopg is required: pip install 'psycopg[binary]'") from e

        self._psycopg = psycopg
        try:
            self.conn = psycopg.connect(conn_str)
        except psycopg.Error as e:
            raise StoreError(f"Could not connect to database: {e}") from e
        logger.info("Connected to PostgreSQL")

    def create_tables(self) -> None:
        """Create customers, participants and payments tables if missing."""
        with self.conn.cursor() as cur:
            cur.execute(DDL)
        self.conn.commit()
        logger.info("Created tables")

    def _fetch(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        try:
            with self.conn.cursor() as cur:
                cur.execute(sql, params)
                columns = [d.name for d in cur.description]
                return [dict(zip(columns, row)) for row in cur.fetchall()]
        except self._psycopg.Error as e:
            raise StoreError(f"Query failed: {e}") from e

    def _write(self, sql: str, params: tuple, customer_id: int | None = None) -> int:
        try:
            with self.conn.cursor() as cur:
                cur.execute(sql, params)
                rowcount = cur.rowcount
            self.conn.commit()
        except self._psycopg.Error as e:
            self.conn.rollback()
            raise StoreError(f"Write failed: {e}") from e
        if customer_id is not None and rowcount == 0:
            raise EntityNotFoundError(f"Customer {customer_id} not found")
        return rowcount

    def load_customers(self) -> list[Customer]:
        """Load all customers with their participants in canonical order."""
        rows = self._fetch("SELECT * FROM customers ORDER BY policy_number, id")
        participant_rows = self._fetch(
            "SELECT * FROM participants ORDER BY customer_id, sort_key"
        )

        by_customer: dict[int, list[dict[str, Any]]] = {}
        for row in participant_rows:
            row = dict(row)
            row["participant_id"] = row.pop("id")
            by_customer.setdefault(row["customer_id"], []).append(row)

        customers = []
        for row in rows:
            customer = customer_from_row(row)
            customer.participants = [
                participant_from_dict(p) for p in by_customer.get(customer.customer_id, [])
            ]
            customers.append(customer)

        logger.info("Loaded %d customers", len(customers))
        return customers

    def load_payments(self) -> list[Payment]:
        rows = self._fetch("SELECT * FROM payments ORDER BY payment_date DESC, id")
        logger.info("Loaded %d payments", len(rows))
        return [payment_from_row(row) for row in rows]

    def existing_id_numbers(self) -> set[str]:
        rows = self._fetch("SELECT id_number FROM customers WHERE id_number IS NOT NULL")
        return {row["id_number"] for row in rows if row["id_number"]}

    def update_status(self, customer_id: int, status: PolicyStatus, updated_at: datetime) -> None:
        self._write(
            "UPDATE customers SET status = %s, last_updated = %s WHERE id = %s",
            (status.value, updated_at, customer_id),
            customer_id=customer_id,
        )

    def replace_participants(
        self,
        customer_id: int,
        participants: list[Participant],
        updated_at: datetime,
    ) -> None:
        """Replace a customer's participants in a single transaction."""
        placeholders = ", ".join(["%s"] * len(self.PARTICIPANT_COLUMNS))
        insert = (
            f"INSERT INTO participants ({', '.join(self.PARTICIPANT_COLUMNS)}) "
            f"VALUES ({placeholders})"
        )
        rows = [self._participant_row(customer_id, p) for p in participants]

        try:
            with self.conn.cursor() as cur:
                cur.execute(
                    "UPDATE customers SET last_updated = %s WHERE id = %s",
                    (updated_at, customer_id),
                )
                if cur.rowcount == 0:
                    raise EntityNotFoundError(f"Customer {customer_id} not found")
                cur.execute("DELETE FROM participants WHERE customer_id = %s", (customer_id,))
                if rows:
                    cur.executemany(insert, rows)
            self.conn.commit()
        except EntityNotFoundError:
            self.conn.rollback()
            raise
        except self._psycopg.Error as e:
            self.conn.rollback()
            raise StoreError(f"Participant update failed: {e}") from e

    def update_inception_date(self, customer_id: int, value: str) -> None:
        self._write(
            "UPDATE customers SET inception_date = %s WHERE id = %s",
            (value, customer_id),
            customer_id=customer_id,
        )

    def delete_customer(self, customer_id: int) -> None:
        """Delete a customer; participants and payments cascade."""
        self._write("DELETE FROM customers WHERE id = %s", (customer_id,), customer_id=customer_id)

    def add_customers(self, customers: Iterable[Customer]) -> int:
        """Insert customers with their participants (used to seed a database)."""
        columns = CUSTOMER_COLUMNS
        customer_sql = (
            f"INSERT INTO customers ({', '.join(columns)}) "
            f"VALUES ({', '.join(['%s'] * len(columns))})"
        )
        participant_sql = (
            f"INSERT INTO participants ({', '.join(self.PARTICIPANT_COLUMNS)}) "
            f"VALUES ({', '.join(['%s'] * len(self.PARTICIPANT_COLUMNS))})"
        )

        customer_rows = []
        participant_rows = []
        for customer in customers:
            row = customer_to_row(customer, embed_participants=False)
            customer_rows.append(tuple(row[col] for col in columns))
            participant_rows.extend(
                self._participant_row(customer.customer_id, p) for p in customer.participants
            )
        if not customer_rows:
            return 0

        try:
            with self.conn.cursor() as cur:
                cur.executemany(customer_sql, customer_rows)
                if participant_rows:
                    cur.executemany(participant_sql, participant_rows)
                # Explicit ids bypass the sequence; move it past them
                cur.execute(
                    "SELECT setval(pg_get_serial_sequence('customers', 'id'), "
                    "(SELECT MAX(id) FROM customers))"
                )
            self.conn.commit()
        except self._psycopg.Error as e:
            self.conn.rollback()
            raise StoreError(f"Customer insert failed: {e}") from e

        logger.info(
            "Inserted %d customers with %d participants", len(customer_rows), len(participant_rows)
        )
        return len(customer_rows)

    def add_payments(self, payments: Iterable[Payment], chunk_size: int = 100) -> int:
        """Insert payments in chunks; each chunk commits on its own."""
        placeholders = ", ".join(["%s"] * len(self.PAYMENT_COLUMNS))
        sql = (
            f"INSERT INTO payments ({', '.join(self.PAYMENT_COLUMNS)}) "
            f"VALUES ({placeholders})"
        )
        rows = [self._payment_row(p) for p in payments]
        if not rows:
            return 0

        inserted = 0
        for start in range(0, len(rows), chunk_size):
            chunk = rows[start:start + chunk_size]
            try:
                with self.conn.cursor() as cur:
                    cur.executemany(sql, chunk)
                self.conn.commit()
            except self._psycopg.Error as e:
                self.conn.rollback()
                raise StoreError(
                    f"Payment insert failed after {inserted} rows: {e}"
                ) from e
            inserted += len(chunk)
            logger.debug("Inserted %d/%d payments", inserted, len(rows))

        return inserted

    def _participant_row(self, customer_id: int, participant: Participant) -> tuple:
        values = {
            "customer_id": customer_id,
            "sort_key": participant.sort_key,
            "uuid": participant.uuid,
            "first_name": participant.first_name,
            "surname": participant.surname,
            "relationship": participant.relationship,
            "date_of_birth": participant.date_of_birth or None,
            "id_number": participant.id_number,
            "gender": participant.gender,
            "suffix": participant.suffix,
            "medical_package": participant.medical_package,
            "cash_back_addon": participant.cash_back_addon,
            "is_student": participant.is_student,
            "phone": participant.phone,
            "email": participant.email,
            "street_address": participant.street_address,
            "town": participant.town,
            "postal_address": participant.postal_address,
        }
        return tuple(values[col] for col in self.PARTICIPANT_COLUMNS)

    def _payment_row(self, payment: Payment) -> tuple:
        return tuple(getattr(payment, col) for col in self.PAYMENT_COLUMNS)

    def close(self) -> None:
        self.conn.close()
        logger.info("Closed PostgreSQL connection")
