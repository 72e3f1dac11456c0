"""Tests for the request ledger."""

import uuid
from datetime import datetime

import pytest

from changerawr.core.errors import DuplicateRequestError, NotFoundError, ValidationError
from changerawr.core.requests import RequestLedger, RequestStatus, RequestType
from changerawr.db.models import ChangelogRequest, ChangelogTag

from tests.factories import create_entry, create_project, create_request, create_tag, create_user


def pending_for_entry(session, entry):
    return session.query(ChangelogRequest).filter(
        ChangelogRequest.changelog_entry_id == entry.id,
        ChangelogRequest.status == "PENDING",
    ).count()


class TestSubmitRequest:
    """Test queuing new requests."""

    def test_creates_pending_request(self, db_session, staff, project):
        entry = create_entry(db_session, project=project)

        request = RequestLedger(db_session).submit_request(
            RequestType.ALLOW_PUBLISH, entry.id, project.id, staff.id
        )

        assert request.id is not None
        assert request.status == "PENDING"
        assert request.type == "ALLOW_PUBLISH"
        assert request.changelog_entry_id == entry.id
        assert request.staff_id == staff.id
        assert request.admin_id is None

    def test_duplicate_same_type_rejected(self, db_session, staff, project):
        """Test a second pending publish request for the same entry is refused."""
        entry = create_entry(db_session, project=project)
        ledger = RequestLedger(db_session)
        first = ledger.submit_request(RequestType.ALLOW_PUBLISH, entry.id, project.id, staff.id)

        with pytest.raises(DuplicateRequestError) as exc_info:
            ledger.submit_request(RequestType.ALLOW_PUBLISH, entry.id, project.id, staff.id)

        assert exc_info.value.status_code == 400
        assert exc_info.value.existing_request_id == first.id
        assert exc_info.value.message == "A publish request for this entry is already pending"

    def test_resolved_request_does_not_block(self, db_session, staff, project):
        """Test only PENDING requests count as duplicates."""
        entry = create_entry(db_session, project=project)
        create_request(db_session, staff=staff, project=project, entry=entry, status="REJECTED")

        request = RequestLedger(db_session).submit_request(
            RequestType.ALLOW_PUBLISH, entry.id, project.id, staff.id
        )
        assert request.status == "PENDING"

    def test_other_entry_does_not_block(self, db_session, staff, project):
        first = create_entry(db_session, project=project)
        second = create_entry(db_session, project=project)
        ledger = RequestLedger(db_session)
        ledger.submit_request(RequestType.ALLOW_PUBLISH, first.id, project.id, staff.id)

        assert ledger.submit_request(RequestType.ALLOW_PUBLISH, second.id, project.id, staff.id)


class TestDuplicateScope:
    """Test the entry-wide and per-type duplicate policies."""

    def test_entry_scope_blocks_across_types(self, db_session, staff, project):
        """Test a pending publish request blocks a delete request by default."""
        entry = create_entry(db_session, project=project)
        ledger = RequestLedger(db_session, duplicate_scope="entry")
        ledger.submit_request(RequestType.ALLOW_PUBLISH, entry.id, project.id, staff.id)

        with pytest.raises(DuplicateRequestError) as exc_info:
            ledger.submit_request(RequestType.DELETE_ENTRY, entry.id, project.id, staff.id)
        assert "ALLOW_PUBLISH" in exc_info.value.message

    def test_type_scope_allows_other_types(self, db_session, staff, project):
        """Test per-type scope lets a delete request sit next to a publish request."""
        entry = create_entry(db_session, project=project)
        ledger = RequestLedger(db_session, duplicate_scope="type")
        ledger.submit_request(RequestType.ALLOW_PUBLISH, entry.id, project.id, staff.id)

        request = ledger.submit_request(RequestType.DELETE_ENTRY, entry.id, project.id, staff.id)
        assert request.type == "DELETE_ENTRY"

    def test_type_scope_still_blocks_same_type(self, db_session, staff, project):
        entry = create_entry(db_session, project=project)
        ledger = RequestLedger(db_session, duplicate_scope="type")
        ledger.submit_request(RequestType.DELETE_ENTRY, entry.id, project.id, staff.id)

        with pytest.raises(DuplicateRequestError):
            ledger.submit_request(RequestType.DELETE_ENTRY, entry.id, project.id, staff.id)

    def test_scope_defaults_to_settings(self, db_session):
        assert RequestLedger(db_session).duplicate_scope == "entry"

    def test_unknown_scope(self, db_session):
        with pytest.raises(ValueError):
            RequestLedger(db_session, duplicate_scope="project")

    def test_tag_requests_deduplicated(self, db_session, staff, project):
        """Test a tag may only have one pending deletion request."""
        tag = create_tag(db_session)
        ledger = RequestLedger(db_session)
        ledger.submit_request(RequestType.DELETE_TAG, None, project.id, staff.id, tag_id=tag.id)

        with pytest.raises(DuplicateRequestError) as exc_info:
            ledger.submit_request(RequestType.DELETE_TAG, None, project.id, staff.id, tag_id=tag.id)
        assert exc_info.value.message == "A deletion request for this tag is already pending"


    def test_entry_scope_writes_shared_key(self, db_session, staff, project):
        entry = create_entry(db_session, project=project)

        request = RequestLedger(db_session, duplicate_scope="entry").submit_request(
            RequestType.DELETE_ENTRY, entry.id, project.id, staff.id
        )

        assert request.pending_key == "ENTRY"

    def test_type_scope_writes_type_key(self, db_session, staff, project):
        entry = create_entry(db_session, project=project)

        request = RequestLedger(db_session, duplicate_scope="type").submit_request(
            RequestType.DELETE_ENTRY, entry.id, project.id, staff.id
        )

        assert request.pending_key == "DELETE_ENTRY"


class TestConcurrentSubmission:
    """Test the unique indexes reject a request that slipped past the duplicate check."""

    @pytest.fixture()
    def racing_ledger(self, db_session, monkeypatch):
        def _ledger(scope="entry"):
            ledger = RequestLedger(db_session, duplicate_scope=scope)
            monkeypatch.setattr(ledger, "find_pending", lambda *args, **kwargs: None)
            return ledger
        return _ledger

    def test_entry_scope_cross_type_race(self, db_session, staff, project, racing_ledger):
        """Test a concurrent delete request next to a pending publish request is refused."""
        entry = create_entry(db_session, project=project)
        RequestLedger(db_session, duplicate_scope="entry").submit_request(
            RequestType.ALLOW_PUBLISH, entry.id, project.id, staff.id
        )

        with pytest.raises(DuplicateRequestError) as exc_info:
            racing_ledger("entry").submit_request(RequestType.DELETE_ENTRY, entry.id, project.id, staff.id)

        assert exc_info.value.status_code == 400
        assert exc_info.value.existing_request_id is None
        assert pending_for_entry(db_session, entry) == 1

    def test_type_scope_same_type_race(self, db_session, staff, project, racing_ledger):
        entry = create_entry(db_session, project=project)
        RequestLedger(db_session, duplicate_scope="type").submit_request(
            RequestType.DELETE_ENTRY, entry.id, project.id, staff.id
        )

        with pytest.raises(DuplicateRequestError):
            racing_ledger("type").submit_request(RequestType.DELETE_ENTRY, entry.id, project.id, staff.id)

        assert pending_for_entry(db_session, entry) == 1

    def test_tag_race(self, db_session, staff, project, racing_ledger):
        tag = create_tag(db_session)
        RequestLedger(db_session).submit_request(RequestType.DELETE_TAG, None, project.id, staff.id, tag_id=tag.id)

        with pytest.raises(DuplicateRequestError):
            racing_ledger().submit_request(RequestType.DELETE_TAG, None, project.id, staff.id, tag_id=tag.id)

    def test_project_deletion_race(self, db_session, staff, project, racing_ledger):
        RequestLedger(db_session).submit_request(RequestType.DELETE_PROJECT, None, project.id, staff.id)

        with pytest.raises(DuplicateRequestError):
            racing_ledger().submit_request(RequestType.DELETE_PROJECT, None, project.id, staff.id)

    def test_rejected_race_keeps_caller_transaction(self, db_session, staff, project, racing_ledger):
        """Test only the failed insert is rolled back, not the caller's earlier work."""
        entry = create_entry(db_session, project=project)
        RequestLedger(db_session).submit_request(RequestType.ALLOW_PUBLISH, entry.id, project.id, staff.id)
        db_session.add(ChangelogTag(name="Added before the race"))

        with pytest.raises(DuplicateRequestError):
            racing_ledger().submit_request(RequestType.ALLOW_PUBLISH, entry.id, project.id, staff.id)
        db_session.commit()

        assert db_session.query(ChangelogTag).filter(ChangelogTag.name == "Added before the race").count() == 1
        assert pending_for_entry(db_session, entry) == 1


class TestProjectDeletionRequests:
    def test_one_pending_per_project(self, db_session, staff, project):
        ledger = RequestLedger(db_session)
        ledger.submit_request(RequestType.DELETE_PROJECT, None, project.id, staff.id)

        with pytest.raises(DuplicateRequestError) as exc_info:
            ledger.submit_request(RequestType.DELETE_PROJECT, None, project.id, staff.id)
        assert exc_info.value.message == "A deletion request for this project is already pending"

    def test_other_project_does_not_block(self, db_session, staff, project):
        ledger = RequestLedger(db_session)
        ledger.submit_request(RequestType.DELETE_PROJECT, None, project.id, staff.id)

        other = create_project(db_session)
        assert ledger.submit_request(RequestType.DELETE_PROJECT, None, other.id, staff.id).project_id == other.id


class TestOpenRequest:
    """Test requests filed directly against a target id."""

    def test_entry_target(self, db_session, staff, project):
        entry = create_entry(db_session, project=project)

        request = RequestLedger(db_session).open_request(RequestType.ALLOW_PUBLISH, project.id, staff.id, entry.id)

        assert request.changelog_entry_id == entry.id
        assert request.changelog_tag_id is None

    def test_entry_from_other_project(self, db_session, staff, project):
        entry = create_entry(db_session, project=create_project(db_session))

        with pytest.raises(NotFoundError) as exc_info:
            RequestLedger(db_session).open_request(RequestType.DELETE_ENTRY, project.id, staff.id, entry.id)
        assert exc_info.value.message == "Entry not found"

    def test_tag_target(self, db_session, staff, project):
        tag = create_tag(db_session)

        request = RequestLedger(db_session).open_request(RequestType.DELETE_TAG, project.id, staff.id, tag.id)

        assert request.changelog_tag_id == tag.id
        assert request.changelog_entry_id is None

    def test_missing_tag(self, db_session, staff, project):
        with pytest.raises(NotFoundError):
            RequestLedger(db_session).open_request(RequestType.DELETE_TAG, project.id, staff.id, uuid.uuid4())

    def test_project_deletion_needs_no_target(self, db_session, staff, project):
        request = RequestLedger(db_session).open_request("DELETE_PROJECT", project.id, staff.id)

        assert request.type == "DELETE_PROJECT"
        assert request.changelog_entry_id is None

    def test_target_required(self, db_session, staff, project):
        with pytest.raises(ValidationError) as exc_info:
            RequestLedger(db_session).open_request(RequestType.ALLOW_PUBLISH, project.id, staff.id)
        assert exc_info.value.details[0]["field"] == "targetId"

    def test_missing_project(self, db_session, staff):
        with pytest.raises(NotFoundError):
            RequestLedger(db_session).open_request(RequestType.DELETE_PROJECT, uuid.uuid4(), staff.id)


class TestGetRequest:
    def test_found(self, db_session, staff, project):
        request = create_request(db_session, staff=staff, project=project)
        assert RequestLedger(db_session).get_request(request.id) is request

    def test_missing(self, db_session):
        with pytest.raises(NotFoundError):
            RequestLedger(db_session).get_request(uuid.uuid4())


class TestListRequests:
    """Test request visibility and ordering."""

    def test_staff_only_sees_own(self, db_session, staff, project):
        other_staff = create_user(db_session, role="STAFF")
        own = create_request(db_session, staff=staff, project=project)
        create_request(db_session, staff=other_staff, project=project)

        requests = RequestLedger(db_session).list_requests(staff)

        assert [r.id for r in requests] == [own.id]

    def test_admin_sees_all_newest_first(self, db_session, admin, staff, project):
        older = create_request(db_session, staff=staff, project=project, created_at=datetime(2024, 1, 1))
        newer = create_request(db_session, staff=staff, project=project, created_at=datetime(2024, 2, 1))

        requests = RequestLedger(db_session).list_requests(admin)

        assert [r.id for r in requests] == [newer.id, older.id]

    def test_status_filter(self, db_session, admin, staff, project):
        """Test the default lists PENDING only and None lists everything."""
        pending = create_request(db_session, staff=staff, project=project)
        approved = create_request(db_session, staff=staff, project=project, status="APPROVED")
        ledger = RequestLedger(db_session)

        assert [r.id for r in ledger.list_requests(admin)] == [pending.id]
        assert [r.id for r in ledger.list_requests(admin, status=RequestStatus.APPROVED)] == [approved.id]
        assert len(ledger.list_requests(admin, status=None)) == 2

    def test_project_filter(self, db_session, admin, staff, project):
        other = create_project(db_session)
        create_request(db_session, staff=staff, project=other)
        mine = create_request(db_session, staff=staff, project=project)

        requests = RequestLedger(db_session).list_requests(admin, project_id=project.id)
        assert [r.id for r in requests] == [mine.id]
