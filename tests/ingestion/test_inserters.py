"""Tests for the in-memory and SQLAlchemy record inserters."""

from datetime import date

import pytest
from sqlalchemy import Boolean, Date, Float, MetaData, String, create_engine, select
from sqlalchemy.exc import IntegrityError

from suite_config import get_entity_schema
from suite_config.schema import ImportSettings
from suite_ingestion.inserters import InMemoryInserter, RecordInserter, SqlTableInserter, build_entity_table
from suite_ingestion.services import ImportService


@pytest.fixture
def engine():
    eng = create_engine("sqlite://")
    yield eng
    eng.dispose()


class TestInMemoryInserter:
    def test_batches_are_copied(self):
        inserter = InMemoryInserter()
        record = {"a": 1}
        inserter.insert([record])
        record["a"] = 2
        assert inserter.records == [{"a": 1}]

    def test_records_flatten_batches(self):
        inserter = InMemoryInserter()
        inserter.insert([{"a": 1}])
        inserter.insert([{"a": 2}, {"a": 3}])
        assert len(inserter.calls) == 2
        assert [r["a"] for r in inserter.records] == [1, 2, 3]


class TestBuildEntityTable:
    def test_columns_follow_field_kinds(self, expense_schema):
        table = build_entity_table(MetaData(), expense_schema)
        assert table.name == "imported_expenses"
        assert list(table.c.keys()) == ["id", "date", "amount", "vendorName", "recurring"]
        assert isinstance(table.c.date.type, Date)
        assert isinstance(table.c.amount.type, Float)
        assert isinstance(table.c.vendorName.type, String)
        assert isinstance(table.c.recurring.type, Boolean)

    def test_field_columns_are_nullable(self, expense_schema):
        table = build_entity_table(MetaData(), expense_schema)
        assert all(table.c[fd.key].nullable for fd in expense_schema.fields)
        assert table.c.id.primary_key

    def test_custom_table_name(self, contact_schema):
        table = build_entity_table(MetaData(), contact_schema, table_name="contacts")
        assert table.name == "contacts"


class TestSqlTableInserter:
    def test_satisfies_protocol(self, engine, contact_schema):
        table = build_entity_table(MetaData(), contact_schema)
        assert isinstance(SqlTableInserter(engine, table), RecordInserter)

    def test_insert_widens_partial_records(self, engine, contact_schema):
        metadata = MetaData()
        table = build_entity_table(metadata, contact_schema)
        metadata.create_all(engine)

        SqlTableInserter(engine, table).insert([
            {"name": "Jane", "email": "j@x.com", "type": "customer"},
            {"name": "Bob", "email": "b@x.com", "outstandingBalance": 12.5},
        ])

        with engine.connect() as conn:
            rows = conn.execute(select(table).order_by(table.c.id)).mappings().all()
        assert [(r["name"], r["type"], r["outstandingBalance"]) for r in rows] == [
            ("Jane", "customer", None),
            ("Bob", None, 12.5),
        ]

    def test_empty_batch_is_a_no_op(self, engine, contact_schema, captured_logs):
        metadata = MetaData()
        table = build_entity_table(metadata, contact_schema)
        metadata.create_all(engine)
        SqlTableInserter(engine, table).insert([])
        with engine.connect() as conn:
            assert conn.execute(select(table)).all() == []
        assert any(r["message"] == "sql_insert_skipped" for r in captured_logs())

    def test_unknown_column_rejected(self, engine, contact_schema):
        table = build_entity_table(MetaData(), contact_schema)
        with pytest.raises(ValueError, match="nickname"):
            SqlTableInserter(engine, table).insert([{"name": "Jane", "nickname": "J"}])

    def test_record_missing_required_field_is_stored(self, engine, contact_schema):
        metadata = MetaData()
        table = build_entity_table(metadata, contact_schema)
        metadata.create_all(engine)

        SqlTableInserter(engine, table).insert([
            {"name": "Jane", "email": "j@x.com", "type": "customer", "outstandingBalance": 10.0},
            {"name": "No Mail", "type": "customer", "outstandingBalance": 5.0},
        ])

        with engine.connect() as conn:
            rows = conn.execute(select(table.c.name, table.c.email).order_by(table.c.id)).all()
        assert [tuple(r) for r in rows] == [("Jane", "j@x.com"), ("No Mail", None)]

    def test_failed_batch_is_rolled_back(self, engine, contact_schema):
        metadata = MetaData()
        table = build_entity_table(metadata, contact_schema)
        metadata.create_all(engine)
        with pytest.raises(IntegrityError):
            SqlTableInserter(engine, table).insert([
                {"id": 1, "name": "Jane", "email": "j@x.com"},
                {"id": 1, "name": "Bob", "email": "b@x.com"},
            ])
        with engine.connect() as conn:
            assert conn.execute(select(table)).all() == []


class TestSessionToDatabase:
    def test_committed_rows_land_in_table(self, engine):
        schema = get_entity_schema("expense")
        metadata = MetaData()
        table = build_entity_table(metadata, schema)
        metadata.create_all(engine)

        text = (
            "Date,Amount,Payee,Recurring\n"
            "2025-01-15,250.00,Office Depot,no\n"
            "2025-01-20,not much,AWS,yes\n"
        )
        session = ImportService(ImportSettings()).run(
            "expense", text, "expenses.csv", SqlTableInserter(engine, table)
        )
        assert session.imported_count == 1

        with engine.connect() as conn:
            rows = conn.execute(select(table)).mappings().all()
        assert len(rows) == 1
        assert rows[0]["date"] == date(2025, 1, 15)
        assert rows[0]["amount"] == 250.0
        assert rows[0]["vendorName"] == "Office Depot"
        assert rows[0]["categoryId"] == "other"
        assert rows[0]["recurring"] is False

    def test_invalid_rows_committed_when_included(self, engine):
        schema = get_entity_schema("contact")
        metadata = MetaData()
        table = build_entity_table(metadata, schema)
        metadata.create_all(engine)

        text = "Full Name,E-mail,Balance\nJane,jane@x.com,10\nNo Mail,,5\n"
        session = ImportService(ImportSettings()).run(
            "contact", text, "contacts.csv", SqlTableInserter(engine, table), include_invalid_rows=True
        )
        assert session.imported_count == 2

        with engine.connect() as conn:
            rows = conn.execute(select(table).order_by(table.c.id)).mappings().all()
        assert [(r["name"], r["email"], r["outstandingBalance"]) for r in rows] == [
            ("Jane", "jane@x.com", 10.0),
            ("No Mail", None, 5.0),
        ]
