"""Tests for the administrative batch jobs."""

import json
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from stone_river.exceptions import InputFileError, SinkError, StoreError
from stone_river.jobs import (
    DeduplicationJob,
    InceptionDateJob,
    SuffixAssignmentJob,
    SuffixVerificationJob,
    SuspensionJob,
    UploadValidationJob,
    load_upload_file,
)
from stone_river.models.policy import ComplianceModel, PolicyStatus


@pytest.fixture
def clock(fixed_now):
    return lambda: fixed_now


@pytest.fixture
def audit() -> MagicMock:
    return MagicMock()


class TestBatchJobEvents:
    """Tests for audit emission shared by all jobs."""

    def test_sink_errors_do_not_abort(self, store, make_customer, make_participant, clock) -> None:
        """Test a failing audit sink is logged and the run completes."""
        store.add_customer(make_customer(participants=[make_participant("Kid", "Child")]))
        audit = MagicMock()
        audit.publish.side_effect = SinkError("broker down")

        report = SuffixAssignmentJob(store, audit=audit, clock=clock).run()

        assert report.updated == 1
        audit.publish.assert_called_once()

    def test_dry_run_emits_nothing(self, store, make_customer, make_participant, audit) -> None:
        store.add_customer(make_customer(participants=[make_participant("Kid", "Child")]))
        SuffixAssignmentJob(store, audit=audit, dry_run=True).run()
        audit.publish.assert_not_called()


class TestSuffixAssignmentJob:
    """Tests for SuffixAssignmentJob."""

    def _populate(self, store, make_customer, make_participant) -> None:
        store.add_customer(make_customer(1, participants=[
            make_participant("Wife", "Spouse"),
            make_participant("Kid", "Child", "150"),
        ]))
        store.add_customer(make_customer(2, participants=[
            make_participant("Me", "Self", "000"),
            make_participant("Wife", "Spouse", "101"),
        ]))
        store.add_customer(make_customer(3, participants=[]))

    def test_assigns_and_skips(self, store, make_customer, make_participant, clock, audit, fixed_now) -> None:
        self._populate(store, make_customer, make_participant)

        report = SuffixAssignmentJob(store, audit=audit, clock=clock).run()

        assert report.total == 3
        assert report.updated == 2
        assert report.skipped == 1
        assert report.principals_added == 2
        assert report.failed == 0
        first = store.get_customer(1)
        assert [(p.relationship, p.suffix) for p in first.participants] == [
            ("Self", "000"),
            ("Spouse", "101"),
            ("Child", "201"),
        ]
        assert first.last_updated == fixed_now
        assert [p.suffix for p in store.get_customer(3).participants] == ["000"]
        assert audit.publish.call_count == 2
        event = audit.publish.call_args_list[0][0][0]
        assert event.event_type == "customer.suffixes_assigned"
        assert event.source == "suffix-assignment"
        assert event.subject == "SR000001"

    def test_second_run_is_noop(self, store, make_customer, make_participant, clock) -> None:
        """Test running twice changes nothing the second time."""
        self._populate(store, make_customer, make_participant)
        SuffixAssignmentJob(store, clock=clock).run()
        snapshot = {c.customer_id: c.participants for c in store.load_customers()}

        report = SuffixAssignmentJob(store, clock=clock).run()

        assert report.updated == 0
        assert report.skipped == 3
        assert {c.customer_id: c.participants for c in store.load_customers()} == snapshot

    def test_dry_run_writes_nothing(self, store, make_customer, make_participant) -> None:
        self._populate(store, make_customer, make_participant)

        report = SuffixAssignmentJob(store, dry_run=True).run()

        assert report.dry_run is True
        assert report.updated == 2
        assert [p.suffix for p in store.get_customer(1).participants] == [None, "150"]

    def test_failure_does_not_abort(self, store, make_customer, make_participant, clock) -> None:
        self._populate(store, make_customer, make_participant)
        original = store.replace_participants

        def flaky(customer_id, participants, updated_at):
            if customer_id == 1:
                raise StoreError("connection reset")
            return original(customer_id, participants, updated_at)

        with patch.object(store, "replace_participants", side_effect=flaky):
            report = SuffixAssignmentJob(store, clock=clock).run()

        assert report.failed == 1
        assert report.updated == 1
        assert report.failures == [{"record": "SR000001", "error": "connection reset"}]

    def test_report_to_dict(self, store, make_customer, make_participant) -> None:
        self._populate(store, make_customer, make_participant)
        data = SuffixAssignmentJob(store, dry_run=True).run().to_dict()
        assert data["changes"][0]["policy_number"] == "SR000001"
        assert data["changes"][0]["changes"][0] == "Tendai Moyo: principal member added -> 000"


class TestSuffixVerificationJob:
    """Tests for SuffixVerificationJob."""

    def test_counts(self, store, make_customer, make_participant) -> None:
        store.add_customer(make_customer(1, participants=[
            make_participant("Me", "Self", "000"),
            make_participant("Kid", "Child", "201"),
        ]))
        store.add_customer(make_customer(2, participants=[
            make_participant("Wife", "Spouse", "101"),
            make_participant("Mum", "Parent", "150"),
        ]))

        report = SuffixVerificationJob(store).run()

        assert report.total_customers == 2
        assert report.total_participants == 4
        assert report.compliant == 1
        assert report.non_compliant == 1
        assert report.compliance_rate == 50.0
        assert report.by_category == {"Principal": 1, "Spouse": 1, "Child": 1, "Dependent": 1}
        assert report.issues[0] == "SR000002: Missing principal member"
        assert len(report.issues) == 2

    def test_empty_store(self, store) -> None:
        report = SuffixVerificationJob(store).run()
        assert report.compliance_rate == 100.0
        assert report.to_dict()["compliance_rate"] == 100.0


class TestSuspensionJob:
    """Tests for SuspensionJob."""

    def _populate(self, store, make_customer, make_payment) -> None:
        behind = make_customer(1)
        overdue = make_customer(2)
        paid = make_customer(3, status=PolicyStatus.SUSPENDED)
        cancelled = make_customer(4, status=PolicyStatus.CANCELLED)
        undated = make_customer(5, inception_date=None)
        future = make_customer(6, inception_date="2024-09-01")
        for customer in (behind, overdue, paid, cancelled, undated, future):
            store.add_customer(customer)
        store.add_payment(make_payment(behind, "2024-01-05"))
        for month in (1, 2):
            store.add_payment(make_payment(overdue, f"2024-0{month}-05"))
        for month in (1, 2, 3):
            store.add_payment(make_payment(paid, f"2024-0{month}-05"))

    def test_applies_status_changes(self, store, make_customer, make_payment, clock, audit, today) -> None:
        self._populate(store, make_customer, make_payment)

        report = SuspensionJob(store, audit=audit, clock=clock, today=today).run()

        assert store.get_customer(1).status is PolicyStatus.SUSPENDED
        assert store.get_customer(2).status is PolicyStatus.OVERDUE
        assert store.get_customer(3).status is PolicyStatus.ACTIVE
        assert store.get_customer(4).status is PolicyStatus.CANCELLED
        assert store.get_customer(5).status is PolicyStatus.ACTIVE
        assert store.get_customer(6).status is PolicyStatus.ACTIVE
        assert report.updated == 3
        assert report.unchanged == 3
        assert report.issues == ["SR000005: Missing or invalid inception date"]
        assert [q["policy_number"] for q in report.suspension_queue] == ["SR000001", "SR000002"]
        assert report.summary.total_outstanding == Decimal("30.00")
        assert audit.publish.call_count == 3

    def test_second_run_is_noop(self, store, make_customer, make_payment, clock, today) -> None:
        self._populate(store, make_customer, make_payment)
        SuspensionJob(store, clock=clock, today=today).run()

        report = SuspensionJob(store, clock=clock, today=today).run()

        assert report.updated == 0
        assert report.suspension_queue == []

    def test_dry_run(self, store, make_customer, make_payment, today) -> None:
        self._populate(store, make_customer, make_payment)

        report = SuspensionJob(store, dry_run=True, today=today).run()

        assert report.updated == 3
        assert store.get_customer(1).status is PolicyStatus.ACTIVE

    def test_grace_period_model(self, store, make_customer, make_payment, clock, today) -> None:
        customer = make_customer(1, inception_date="2023-01-01")
        store.add_customer(customer)
        store.add_payment(make_payment(customer, "2024-02-15"))

        report = SuspensionJob(
            store, clock=clock, model=ComplianceModel.GRACE_PERIOD, today=today
        ).run()

        assert report.model is ComplianceModel.GRACE_PERIOD
        assert store.get_customer(1).status is PolicyStatus.GRACE_PERIOD
        assert report.to_dict()["model"] == "grace_period"

    def test_failure_does_not_abort(self, store, make_customer, make_payment, clock, today) -> None:
        self._populate(store, make_customer, make_payment)

        with patch.object(store, "update_status", side_effect=StoreError("timeout")):
            report = SuspensionJob(store, clock=clock, today=today).run()

        assert report.failed == 3
        assert report.updated == 0
        assert len(report.failures) == 3

    def test_report_to_dict(self, store, make_customer, make_payment, today) -> None:
        self._populate(store, make_customer, make_payment)
        data = SuspensionJob(store, dry_run=True, today=today).run().to_dict()

        assert data["evaluated_on"] == "2024-04-01"
        assert data["summary"]["arrears_tiers"] == {"critical": 0, "moderate": 1, "minor": 1}
        assert data["status_changes"][0] == {
            "policy_number": "SR000001",
            "from": "Active",
            "to": "Suspended",
            "reason": "2 months behind - requires immediate payment",
        }


class TestDeduplicationJob:
    """Tests for DeduplicationJob."""

    def _populate(self, store, make_customer, make_payment) -> None:
        stale = make_customer(1, id_number="63-123456A78")
        fresh = make_customer(
            2, id_number="63123456A78", last_updated=datetime(2024, 3, 1, tzinfo=timezone.utc)
        )
        other = make_customer(3, id_number="70-111111B22")
        for customer in (stale, fresh, other):
            store.add_customer(customer)
        store.add_payment(make_payment(stale, "2024-01-05"))

    def test_deletes_and_verifies(self, store, make_customer, make_payment, audit) -> None:
        self._populate(store, make_customer, make_payment)

        report = DeduplicationJob(store, audit=audit).run()

        assert report.duplicate_groups == 1
        assert report.records_to_delete == 1
        assert report.deleted == 1
        assert report.remaining_groups == 0
        assert report.verification_passed is True
        assert sorted(store.customers) == [2, 3]
        assert store.load_payments() == []
        event = audit.publish.call_args[0][0]
        assert event.event_type == "customer.duplicate_deleted"
        assert event.data["kept_customer_id"] == 2

    def test_dry_run(self, store, make_customer, make_payment) -> None:
        self._populate(store, make_customer, make_payment)

        report = DeduplicationJob(store, dry_run=True).run()

        assert report.records_to_delete == 1
        assert report.deleted == 0
        assert report.verification_passed is None
        assert sorted(store.customers) == [1, 2, 3]
        assert report.resolutions[0]["keep"]["id"] == 2

    def test_failed_delete_fails_verification(self, store, make_customer, make_payment) -> None:
        self._populate(store, make_customer, make_payment)

        with patch.object(store, "delete_customer", side_effect=StoreError("locked")):
            report = DeduplicationJob(store).run()

        assert report.failed == 1
        assert report.remaining_groups == 1
        assert report.verification_passed is False
        assert report.to_dict()["verification_passed"] is False


class TestInceptionDateJob:
    """Tests for InceptionDateJob."""

    def test_standardizes(self, store, make_customer, audit, today) -> None:
        store.add_customer(make_customer(1, inception_date="2024-01-01"))
        store.add_customer(make_customer(2, inception_date="01/15/2024"))
        store.add_customer(make_customer(3, inception_date="March 3, 2023"))
        store.add_customer(make_customer(4, inception_date="whenever"))
        store.add_customer(make_customer(5, inception_date=None))
        store.add_customer(make_customer(6, inception_date="12-12-2024"))

        report = InceptionDateJob(store, audit=audit).run(today=today)

        assert report.already_standard == 1
        assert report.converted == 3
        assert report.invalid == 1
        assert report.missing == 1
        assert report.future_dates == 1
        assert store.get_customer(2).inception_date == "2024-01-15"
        assert store.get_customer(3).inception_date == "2023-03-03"
        assert store.get_customer(4).inception_date == "whenever"
        assert report.formats == {
            "YYYY-MM-DD (already standard)": 1,
            "MM/DD/YYYY": 1,
            "Text/Natural language": 1,
            "DD-MM-YYYY": 1,
        }
        assert "Future date detected: 2024-12-12 for policy SR000006" in report.issues
        assert audit.publish.call_count == 3

    def test_second_run_is_noop(self, store, make_customer, today) -> None:
        store.add_customer(make_customer(1, inception_date="01/15/2024"))
        InceptionDateJob(store).run(today=today)

        report = InceptionDateJob(store).run(today=today)

        assert report.converted == 0
        assert report.already_standard == 1

    def test_dry_run(self, store, make_customer, today) -> None:
        store.add_customer(make_customer(1, inception_date="01/15/2024"))
        report = InceptionDateJob(store, dry_run=True).run(today=today)
        assert report.converted == 1
        assert store.get_customer(1).inception_date == "01/15/2024"


class TestUploadValidation:
    """Tests for upload file loading and validation."""

    def test_load_csv(self, tmp_path) -> None:
        path = tmp_path / "upload.csv"
        path.write_text("\ufeffFirst Name,ID Number\nTendai,63-1A78\nRudo,\n", encoding="utf-8")

        assert load_upload_file(path) == [
            {"First Name": "Tendai", "ID Number": "63-1A78"},
            {"First Name": "Rudo", "ID Number": ""},
        ]

    def test_load_json(self, tmp_path) -> None:
        path = tmp_path / "upload.json"
        path.write_text(json.dumps([{"idNumber": "63-1A78"}]))
        assert load_upload_file(path) == [{"idNumber": "63-1A78"}]

    @pytest.mark.parametrize(
        "name,content",
        [("upload.json", '{"idNumber": "x"}'), ("upload.json", "{not json"), ("upload.xlsx", "")],
    )
    def test_bad_files(self, tmp_path, name, content) -> None:
        path = tmp_path / name
        path.write_text(content)
        with pytest.raises(InputFileError):
            load_upload_file(path)

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(InputFileError):
            load_upload_file(tmp_path / "nope.csv")

    def test_validates_against_store(self, store, make_customer) -> None:
        store.add_customer(make_customer(1, id_number="63-1A78"))
        records = [{"ID Number": "631A78"}, {"ID Number": "70-2B22"}, {"ID Number": ""}]

        report = UploadValidationJob(store).run(records)

        assert report.duplicates_with_database == [
            {"policy_holder_id": "631A78", "record_number": 1}
        ]
        assert report.other_errors == [{"record_number": 3, "error": "Missing Policy Holder ID"}]
        assert report.valid_records == 1
        assert report.can_proceed is False

    def test_uses_store_id_lookup(self) -> None:
        """Test the job asks the store for id numbers instead of loading customers."""
        store = MagicMock()
        store.existing_id_numbers.return_value = {"63-1A78"}

        report = UploadValidationJob(store).run([{"ID Number": "63-1A78"}])

        store.existing_id_numbers.assert_called_once_with()
        store.load_customers.assert_not_called()
        assert report.duplicates_with_database[0]["record_number"] == 1
