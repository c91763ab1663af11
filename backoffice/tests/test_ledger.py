"""Tests for the ledger service."""

from datetime import date
from uuid import uuid4

import pytest

from backoffice.models import CategoryInput, TagInput, TransactionCreate, TransactionUpdate
from backoffice.services import ledger
from backoffice.services.export import export_month_csv, transactions_to_dataframe
from backoffice.services.ledger import DEFAULT_CATEGORIES, NotFoundError


def add_entry(description: str = "Office rent", amount: float = -1200.0, txn_date: date = date(2025, 6, 1)):
    return ledger.add_manual_transaction(TransactionCreate(date=txn_date, description=description, amount=amount))


class TestManualEntry:
    """Test hand-typed transactions."""

    def test_creates_manual_entry(self, database):
        txn = add_entry()

        assert txn.bank_name == "Manual Entry"
        assert txn.month == "2025-06"
        assert ledger.get_transaction(txn.id).description == "Office rent"

    def test_requires_description(self, database):
        with pytest.raises(ValueError, match="fill in all transaction fields"):
            add_entry(description="   ")

    def test_rejects_zero_amount(self, database):
        with pytest.raises(ValueError):
            add_entry(amount=0)

    def test_manual_entries_are_not_deduplicated(self, database):
        add_entry()
        add_entry()
        assert len(ledger.list_transactions("2025-06")) == 2


class TestListTransactions:
    def test_ordered_by_date_ascending(self, database):
        add_entry("Late", txn_date=date(2025, 6, 28))
        add_entry("Early", txn_date=date(2025, 6, 2))
        add_entry("Other month", txn_date=date(2025, 7, 1))

        assert [t.description for t in ledger.list_transactions("2025-06")] == ["Early", "Late"]

    def test_category_filter(self, database):
        category = ledger.create_category(CategoryInput(name="Rent"))
        rent = add_entry("Office rent")
        add_entry("Coffee", amount=-4.5)
        ledger.set_transaction_category(rent.id, str(category.id))

        assert [t.description for t in ledger.list_transactions("2025-06", str(category.id))] == ["Office rent"]

    def test_rejects_bad_month(self, database):
        with pytest.raises(ValueError, match="YYYY-MM"):
            ledger.list_transactions("2025-13")


class TestUpdateTransaction:
    """Test editing stored transactions."""

    def test_month_follows_new_date(self, database):
        txn = add_entry()
        updated = ledger.update_transaction(
            txn.id,
            TransactionUpdate(date=date(2025, 7, 3), description="Office rent July", amount=-1250.0),
        )

        assert updated.month == "2025-07"
        assert ledger.list_transactions("2025-06") == []
        assert [t.id for t in ledger.list_transactions("2025-07")] == [txn.id]

    def test_resolves_category_name_and_writes_tags(self, database):
        category = ledger.create_category(CategoryInput(name="Rent"))
        tag = ledger.create_tag(TagInput(name="Office"))
        txn = add_entry()

        updated = ledger.update_transaction(
            txn.id,
            TransactionUpdate(
                date=txn.date,
                description=txn.description,
                amount=txn.amount,
                category_id=str(category.id),
                tag_ids=[str(tag.id)],
                notes="Paid by cheque",
            ),
        )
        assert updated.category_name == "Rent"
        assert updated.tag_ids == [str(tag.id)]
        assert updated.notes == "Paid by cheque"

        cleared = ledger.update_transaction(
            txn.id,
            TransactionUpdate(date=txn.date, description=txn.description, amount=txn.amount),
        )
        assert cleared.tag_ids == []
        assert cleared.category_name == "Rent"

    def test_empty_notes_clear_and_missing_notes_keep(self, database):
        txn = add_entry()
        fields = dict(date=txn.date, description=txn.description, amount=txn.amount)

        noted = ledger.update_transaction(txn.id, TransactionUpdate(**fields, notes="Paid by cheque"))
        assert noted.notes == "Paid by cheque"

        kept = ledger.update_transaction(txn.id, TransactionUpdate(**fields))
        assert kept.notes == "Paid by cheque"

        cleared = ledger.update_transaction(txn.id, TransactionUpdate(**fields, notes=""))
        assert cleared.notes is None

    def test_missing_transaction(self, database):
        with pytest.raises(NotFoundError):
            ledger.update_transaction(
                uuid4(), TransactionUpdate(date=date(2025, 6, 1), description="x", amount=1.0)
            )


class TestDeleteTransaction:
    def test_deletes(self, database):
        txn = add_entry()
        ledger.delete_transaction(txn.id)
        with pytest.raises(NotFoundError):
            ledger.get_transaction(txn.id)

    def test_missing(self, database):
        with pytest.raises(NotFoundError):
            ledger.delete_transaction(uuid4())


class TestCategories:
    """Test category management."""

    def test_seeds_defaults_once(self, database):
        categories = ledger.list_categories()
        assert len(categories) == len(DEFAULT_CATEGORIES)
        assert {c.name for c in categories if c.type == "income"} == {"Salary", "Freelance", "Investment"}
        assert len(ledger.list_categories()) == len(DEFAULT_CATEGORIES)

    def test_no_seeding_when_categories_exist(self, database):
        ledger.create_category(CategoryInput(name="Rent"))
        assert [c.name for c in ledger.list_categories()] == ["Rent"]

    def test_update_category(self, database):
        category = ledger.create_category(CategoryInput(name="Rent"))
        updated = ledger.update_category(category.id, CategoryInput(name="Lease", type="expense", color="#000000"))
        assert updated.name == "Lease"
        assert database.get_category(str(category.id)).color == "#000000"

    def test_update_missing_category(self, database):
        with pytest.raises(NotFoundError):
            ledger.update_category(uuid4(), CategoryInput(name="Lease"))

    def test_blank_name_rejected(self, database):
        with pytest.raises(ValueError, match="category name"):
            ledger.create_category(CategoryInput(name=" "))

    def test_delete_clears_transactions(self, database):
        category = ledger.create_category(CategoryInput(name="Rent"))
        txn = add_entry()
        ledger.set_transaction_category(txn.id, str(category.id))

        assert ledger.delete_category(category.id) == 1
        stored = ledger.get_transaction(txn.id)
        assert stored.category_id is None
        assert stored.category_name is None


class TestTags:
    """Test tag management."""

    def test_create_and_list(self, database):
        tag = ledger.create_tag(TagInput(name="Client A", description="Billable"))
        assert [(t.name, t.description) for t in ledger.list_tags()] == [("Client A", "Billable")]
        assert tag.color == "#10b981"

    def test_update_tag(self, database):
        tag = ledger.create_tag(TagInput(name="Client A"))
        ledger.update_tag(tag.id, TagInput(name="Client B", color="#ffffff"))
        assert ledger.list_tags()[0].name == "Client B"

    def test_delete_removes_from_transactions(self, database):
        keep = ledger.create_tag(TagInput(name="Keep"))
        drop = ledger.create_tag(TagInput(name="Drop"))
        txn = add_entry()
        ledger.update_transaction(
            txn.id,
            TransactionUpdate(
                date=txn.date,
                description=txn.description,
                amount=txn.amount,
                tag_ids=[str(keep.id), str(drop.id)],
            ),
        )

        assert ledger.delete_tag(drop.id) == 1
        assert ledger.get_transaction(txn.id).tag_ids == [str(keep.id)]

    def test_delete_missing_tag(self, database):
        with pytest.raises(NotFoundError):
            ledger.delete_tag(uuid4())


class TestExport:
    """Test CSV export."""

    def test_dataframe_uses_tag_names(self, database):
        tag = ledger.create_tag(TagInput(name="Office"))
        txn = add_entry()
        updated = ledger.update_transaction(
            txn.id,
            TransactionUpdate(date=txn.date, description=txn.description, amount=txn.amount, tag_ids=[str(tag.id)]),
        )

        df = transactions_to_dataframe([updated])
        assert df.loc[0, "tags"] == "Office"
        assert df.loc[0, "amount"] == -1200.0

    def test_export_month_csv(self, database):
        add_entry()
        csv_text = export_month_csv("2025-06")

        lines = csv_text.strip().splitlines()
        assert lines[0] == "date,description,amount,balance,bank_name,account_number,category,tags,notes"
        assert lines[1].startswith("2025-06-01,Office rent,-1200.0,")

    def test_empty_month(self, database):
        csv_text = export_month_csv("2025-01")
        assert csv_text.strip().splitlines() == [
            "date,description,amount,balance,bank_name,account_number,category,tags,notes"
        ]
