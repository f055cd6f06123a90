from datetime import date, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from claimflow.errors import ClaimConflictError, ClaimNotFoundError
from claimflow.models.claim import Claim, ClaimStatus, utcnow
from claimflow.rules import SubmissionPolicy
from claimflow.schemas.claim import ClaimCreate
from claimflow.services.claims import ClaimWorkflowService
from claimflow.state_machine import ACTION_TRANSITIONS, ClaimAction
from claimflow.storage.memory import InMemoryStorage


def _claim_data(**overrides):
    data = {
        "lecturer_name": "test@example.com",
        "claim_period": date(2025, 10, 1),
        "hours_worked": Decimal("50"),
        "hourly_rate": Decimal("250.00"),
    }
    data.update(overrides)
    return ClaimCreate(**data)


def _set_status(db, claim, status):
    claim.status = status.value
    db.commit()
    db.refresh(claim)
    return claim


class TestClaimAmount:
    def test_amount_is_hours_times_rate(self):
        claim = Claim(hours_worked=Decimal("50"), hourly_rate=Decimal("250.00"))
        assert claim.amount == Decimal("12500.00")

    def test_amount_follows_field_changes(self):
        claim = Claim(hours_worked=Decimal("10"), hourly_rate=Decimal("100.00"))
        assert claim.amount == Decimal("1000")
        claim.hours_worked = Decimal("12.5")
        assert claim.amount == Decimal("1250")
        claim.hourly_rate = Decimal("80.00")
        assert claim.amount == Decimal("1000")

    def test_new_draft_factory(self):
        claim = Claim.new_draft("lecturer", date(2025, 1, 1), Decimal("1"), Decimal("2.00"))
        assert claim.status == ClaimStatus.DRAFT.value
        assert isinstance(claim.created_at, datetime)


class TestCreateClaim:
    def test_creates_claim_in_draft_status(self, db, service):
        claim = service.create_claim(db, _claim_data())

        assert claim.id is not None
        assert claim.status == ClaimStatus.DRAFT.value
        assert claim.lecturer_name == "test@example.com"

        saved = db.query(Claim).filter(Claim.id == claim.id).first()
        assert saved.amount == Decimal("12500.00")

    def test_status_in_payload_is_ignored(self, db, service):
        data = ClaimCreate.model_validate({
            "lecturer_name": "x@example.com",
            "claim_period": "2025-10-01",
            "hours_worked": "10",
            "hourly_rate": "100",
            "status": "Approved",
        })
        claim = service.create_claim(db, data)
        assert claim.status == ClaimStatus.DRAFT.value

    def test_created_at_is_set(self, db, service):
        before = utcnow().replace(microsecond=0)
        claim = service.create_claim(db, _claim_data())
        assert claim.created_at >= before

    def test_initial_notes_are_kept(self, db, service):
        claim = service.create_claim(db, _claim_data(notes="Semester 2 tutorials"))
        assert claim.notes == "Semester 2 tutorials"


class TestSubmitForReview:
    def test_sets_status_to_pending(self, db, service):
        claim = service.create_claim(db, _claim_data(hours_worked=Decimal("40"), hourly_rate=Decimal("200.00")))

        submitted = service.submit_for_review(db, claim.id)

        assert submitted.status == ClaimStatus.PENDING.value
        assert submitted.notes is None

    def test_example_claim_moves_to_pending_without_notes(self, db, service):
        claim = service.create_claim(db, _claim_data())
        assert claim.amount == Decimal("12500.00")

        submitted = service.submit_for_review(db, claim.id)
        assert submitted.status == ClaimStatus.PENDING.value
        assert submitted.notes is None

    def test_auto_rejects_on_zero_hours(self, db, service):
        claim = service.create_claim(db, _claim_data(hours_worked=Decimal("0"), hourly_rate=Decimal("999.00")))

        rejected = service.submit_for_review(db, claim.id)

        assert rejected.status == ClaimStatus.REJECTED.value
        assert "System Auto-Rejection: Zero hours submitted." in rejected.notes
        assert "Automation Report" not in rejected.notes

    def test_auto_rejects_negative_hours(self, db, service):
        claim = service.create_claim(db, _claim_data())
        claim.hours_worked = Decimal("-1")
        db.commit()

        rejected = service.submit_for_review(db, claim.id)
        assert rejected.status == ClaimStatus.REJECTED.value

    def test_flags_excessive_hours(self, db, service):
        claim = service.create_claim(db, _claim_data(hours_worked=Decimal("120")))

        submitted = service.submit_for_review(db, claim.id)

        assert submitted.status == ClaimStatus.PENDING.value
        assert submitted.notes == (
            "-- Automation Report --\n"
            "System Flag: Hours exceed typical limit (100h). Review required."
        )

    def test_flags_high_rate(self, db, service):
        claim = service.create_claim(db, _claim_data(hourly_rate=Decimal("350.00")))

        submitted = service.submit_for_review(db, claim.id)

        assert submitted.status == ClaimStatus.PENDING.value
        assert "Hourly rate is above standard threshold (R300)" in submitted.notes

    def test_both_flags_share_one_header(self, db, service):
        claim = service.create_claim(db, _claim_data(
            hours_worked=Decimal("150"), hourly_rate=Decimal("400.00"), notes="Exam marking",
        ))

        submitted = service.submit_for_review(db, claim.id)

        lines = submitted.notes.split("\n")
        assert lines[0] == "Exam marking"
        assert lines[1] == "-- Automation Report --"
        assert "Hours exceed typical limit" in lines[2]
        assert "Hourly rate is above standard threshold" in lines[3]
        assert submitted.notes.count("-- Automation Report --") == 1

    @pytest.mark.parametrize("status", [
        ClaimStatus.PENDING,
        ClaimStatus.APPROVED,
        ClaimStatus.REJECTED,
        ClaimStatus.VERIFIED,
        ClaimStatus.SETTLED,
    ])
    def test_non_draft_is_noop(self, db, service, status):
        claim = service.create_claim(db, _claim_data(hours_worked=Decimal("0"), notes="original"))
        claim = _set_status(db, claim, status)

        result = service.submit_for_review(db, claim.id)

        assert result.status == status.value
        assert result.notes == "original"

    def test_second_submit_is_noop(self, db, service):
        claim = service.create_claim(db, _claim_data(hours_worked=Decimal("120")))
        first = service.submit_for_review(db, claim.id)
        notes = first.notes

        second = service.submit_for_review(db, claim.id)
        assert second.status == ClaimStatus.PENDING.value
        assert second.notes == notes

    def test_missing_claim_raises(self, db, service):
        with pytest.raises(ClaimNotFoundError) as exc_info:
            service.submit_for_review(db, 999)
        assert exc_info.value.claim_id == 999

    def test_uses_injected_policy(self, db):
        service = ClaimWorkflowService(
            storage=InMemoryStorage(),
            submission_policy=SubmissionPolicy(hours_review_threshold=Decimal("20")),
        )
        claim = service.create_claim(db, _claim_data(hours_worked=Decimal("30")))
        submitted = service.submit_for_review(db, claim.id)
        assert "typical limit (20h)" in submitted.notes


class TestApprove:
    def test_approves_pending_claim(self, db, service):
        claim = service.create_claim(db, _claim_data())
        service.submit_for_review(db, claim.id)

        approved = service.approve(db, claim.id, "hod@example.com")

        assert approved.status == ClaimStatus.APPROVED.value
        assert "Approved by hod@example.com on " in approved.notes

    @pytest.mark.parametrize("status", [
        ClaimStatus.DRAFT,
        ClaimStatus.APPROVED,
        ClaimStatus.REJECTED,
        ClaimStatus.VERIFIED,
        ClaimStatus.SETTLED,
    ])
    def test_non_pending_is_noop(self, db, service, status):
        claim = service.create_claim(db, _claim_data())
        claim = _set_status(db, claim, status)

        result = service.approve(db, claim.id, "hod@example.com")

        assert result.status == status.value
        assert result.notes is None

    def test_missing_claim_raises(self, db, service):
        with pytest.raises(ClaimNotFoundError):
            service.approve(db, 42, "hod@example.com")


class TestReject:
    def test_rejects_pending_claim(self, db, service):
        claim = service.create_claim(db, _claim_data())
        service.submit_for_review(db, claim.id)

        rejected = service.reject(db, claim.id, "coordinator", "Hours not on timetable")

        assert rejected.status == ClaimStatus.REJECTED.value
        assert "Rejected by coordinator" in rejected.notes
        assert "Hours not on timetable" in rejected.notes

    def test_reject_after_approve_is_noop(self, db, service):
        claim = service.create_claim(db, _claim_data())
        service.submit_for_review(db, claim.id)
        approved = service.approve(db, claim.id, "hod")
        notes = approved.notes

        result = service.reject(db, claim.id, "coordinator", "Too late")

        assert result.status == ClaimStatus.APPROVED.value
        assert result.notes == notes

    def test_reject_draft_is_noop(self, db, service):
        claim = service.create_claim(db, _claim_data())
        result = service.reject(db, claim.id, "coordinator", "No")
        assert result.status == ClaimStatus.DRAFT.value
        assert result.notes is None

    def test_missing_claim_raises(self, db, service):
        with pytest.raises(ClaimNotFoundError):
            service.reject(db, 42, "coordinator", "No")


class TestReadQueries:
    def _create_at(self, db, service, created_at, **overrides):
        claim = service.create_claim(db, _claim_data(**overrides))
        claim.created_at = created_at
        db.commit()
        return claim

    def test_get_claim_returns_none_when_missing(self, db, service):
        assert service.get_claim(db, 123) is None

    def test_get_claim_includes_attachments(self, db, service):
        claim = service.create_claim(db, _claim_data())
        service.add_attachment(db, claim.id, "timesheet.pdf", b"%PDF-1.4", "lecturer")

        loaded = service.get_claim(db, claim.id)
        assert len(loaded.attachments) == 1
        assert loaded.attachments[0].file_name == "timesheet.pdf"

    def test_list_for_lecturer_newest_first(self, db, service):
        old = self._create_at(db, service, datetime(2025, 1, 1), lecturer_name="a@example.com")
        new = self._create_at(db, service, datetime(2025, 3, 1), lecturer_name="a@example.com")
        self._create_at(db, service, datetime(2025, 2, 1), lecturer_name="b@example.com")

        claims = service.list_claims_for_lecturer(db, "a@example.com")
        assert [c.id for c in claims] == [new.id, old.id]

    def test_list_for_lecturer_is_exact_match(self, db, service):
        service.create_claim(db, _claim_data(lecturer_name="a@example.com"))
        assert service.list_claims_for_lecturer(db, "A@example.com") == []
        assert service.list_claims_for_lecturer(db, "a@example") == []

    def test_list_claims_newest_first(self, db, service):
        first = self._create_at(db, service, datetime(2025, 1, 1))
        third = self._create_at(db, service, datetime(2025, 3, 1), lecturer_name="b@example.com")
        second = self._create_at(db, service, datetime(2025, 2, 1))

        claims = service.list_claims(db)
        assert [c.id for c in claims] == [third.id, second.id, first.id]

    def test_list_pending_oldest_period_first(self, db, service):
        october = service.create_claim(db, _claim_data(claim_period=date(2025, 10, 1)))
        august = service.create_claim(db, _claim_data(claim_period=date(2025, 8, 1)))
        draft = service.create_claim(db, _claim_data(claim_period=date(2025, 7, 1)))
        rejected = service.create_claim(db, _claim_data(claim_period=date(2025, 6, 1), hours_worked=Decimal("0")))
        for claim in (october, august, rejected):
            service.submit_for_review(db, claim.id)

        pending = service.list_pending_claims(db)
        assert [c.id for c in pending] == [august.id, october.id]
        assert draft.id not in [c.id for c in pending]

    def test_get_valid_transitions(self, db, service):
        claim = service.create_claim(db, _claim_data())
        assert service.get_valid_transitions(claim) == frozenset({ClaimStatus.PENDING, ClaimStatus.REJECTED})


class TestConcurrentUpdates:
    def test_stale_update_raises_conflict(self, session_factory, service):
        db_a = session_factory()
        db_b = session_factory()
        try:
            claim = service.create_claim(db_a, _claim_data())
            claim_id = claim.id

            # Session A holds the Draft version while session B submits it
            db_a.query(Claim).filter(Claim.id == claim_id).first()
            service.submit_for_review(db_b, claim_id)

            with pytest.raises(ClaimConflictError) as exc_info:
                service.submit_for_review(db_a, claim_id)
            assert exc_info.value.claim_id == claim_id
        finally:
            db_a.close()
            db_b.close()

        db = session_factory()
        try:
            stored = db.query(Claim).filter(Claim.id == claim_id).first()
            assert stored.status == ClaimStatus.PENDING.value
            assert stored.version_id == 2
        finally:
            db.close()


class TestHoursPrecision:
    @pytest.mark.parametrize("hours", ["0.004", "100.004", "12.345"])
    def test_more_than_two_decimal_places_rejected(self, hours):
        with pytest.raises(ValidationError):
            _claim_data(hours_worked=Decimal(hours))

    def test_smallest_positive_hours_go_to_pending(self, db, service):
        claim = service.create_claim(db, _claim_data(hours_worked=Decimal("0.01")))
        assert claim.hours_worked == Decimal("0.01")

        submitted = service.submit_for_review(db, claim.id)
        assert submitted.status == ClaimStatus.PENDING.value
        assert submitted.notes is None

    def test_just_over_limit_is_flagged_after_storage(self, db, service):
        claim = service.create_claim(db, _claim_data(hours_worked=Decimal("100.01")))
        assert claim.hours_worked == Decimal("100.01")

        submitted = service.submit_for_review(db, claim.id)
        assert submitted.status == ClaimStatus.PENDING.value
        assert "Hours exceed typical limit (100h)" in submitted.notes


class TestTransitionTableDecides:
    def test_engine_follows_transition_table(self, db, service, monkeypatch):
        claim = service.create_claim(db, _claim_data())
        assert service.approve(db, claim.id, "hod").status == ClaimStatus.DRAFT.value

        monkeypatch.setitem(
            ACTION_TRANSITIONS,
            ClaimAction.APPROVE,
            {ClaimStatus.DRAFT: frozenset({ClaimStatus.APPROVED})},
        )

        approved = service.approve(db, claim.id, "hod")
        assert approved.status == ClaimStatus.APPROVED.value
        assert "Approved by hod" in approved.notes

    def test_submit_blocked_when_table_has_no_entry(self, db, service, monkeypatch):
        claim = service.create_claim(db, _claim_data())
        monkeypatch.setitem(ACTION_TRANSITIONS, ClaimAction.SUBMIT, {})

        result = service.submit_for_review(db, claim.id)
        assert result.status == ClaimStatus.DRAFT.value
        assert result.notes is None
