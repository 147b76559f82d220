"""
Unit tests for ProjectRepository.

Exercises the RLS flow with a mocked database: creator grant on insert,
capability checks on update/delete, reader-scoped reads.
"""

from unittest.mock import MagicMock

import pytest
from bson import ObjectId

from mdb_docs.documents.project import ProjectStatus
from mdb_docs.exceptions import DocumentModificationAccessError
from mdb_docs.repositories import ProjectRepository, ProjectScope


@pytest.fixture
def repo(mock_mongo_client, mock_mongo_database):
    return ProjectRepository(mock_mongo_client, mock_mongo_database)


@pytest.fixture
def projects(mock_mongo_database):
    return mock_mongo_database["projects"]


@pytest.fixture
def readers(mock_mongo_database):
    return mock_mongo_database["projects_readers"]


def grant_row(reader, can_edit=False, can_delete=False):
    return {"entity_id": ObjectId(), "reader": reader, "can_edit": can_edit, "can_delete": can_delete}


class TestInsert:
    async def test_creator_gets_full_grant_in_same_transaction(
        self, repo, projects, readers, mock_session, sample_project, principal
    ):
        new_id = ObjectId()
        projects.insert_one.return_value = MagicMock(inserted_id=new_id)

        result = await repo.insert(sample_project, principal)

        assert result == str(new_id)
        args, kwargs = readers.update_one.await_args
        assert args[0] == {"entity_id": new_id, "reader": principal}
        assert args[1]["$set"] == {"can_edit": True, "can_delete": True}
        assert kwargs["upsert"] is True
        assert kwargs["session"] is mock_session
        assert projects.insert_one.await_args.kwargs["session"] is mock_session
        assert mock_session.committed == 1


class TestUpdate:
    async def test_principal_without_record_is_denied(
        self, repo, projects, readers, mock_session, sample_project, other_principal
    ):
        readers.find_one.return_value = None

        with pytest.raises(DocumentModificationAccessError):
            await repo.update(str(ObjectId()), sample_project, other_principal)

        projects.update_one.assert_not_called()
        assert mock_session.aborted == 1

    async def test_reader_without_edit_flag_is_denied(
        self, repo, readers, sample_project, other_principal
    ):
        readers.find_one.return_value = grant_row(other_principal)

        with pytest.raises(DocumentModificationAccessError) as exc_info:
            await repo.update(str(ObjectId()), sample_project, other_principal)
        assert exc_info.value.capability == "edit"

    async def test_editor_updates(self, repo, projects, readers, sample_project, principal):
        readers.find_one.return_value = grant_row(principal, can_edit=True)
        sample_project.status = ProjectStatus.DONE

        assert await repo.update(str(ObjectId()), sample_project, principal) == 1

        fields = projects.update_one.await_args.args[1]["$set"]
        assert fields["status"] == "DONE"
        assert fields["last_mod_user"] == principal
        assert "author" not in fields

    async def test_absent_document_returns_zero_without_gate(
        self, repo, projects, readers, sample_project, principal
    ):
        projects.count_documents.return_value = 0

        assert await repo.update(str(ObjectId()), sample_project, principal) == 0
        readers.find_one.assert_not_called()


class TestDelete:
    async def test_deleter_removes_document_and_records(self, repo, projects, readers, principal):
        oid = ObjectId()
        readers.find_one.return_value = grant_row(principal, can_edit=True, can_delete=True)

        assert await repo.delete(str(oid), principal) == 1

        projects.delete_one.assert_awaited_once()
        assert readers.delete_many.await_args.args[0] == {"entity_id": oid}

    async def test_editor_cannot_delete(self, repo, projects, readers, principal):
        readers.find_one.return_value = grant_row(principal, can_edit=True)

        with pytest.raises(DocumentModificationAccessError):
            await repo.delete(str(ObjectId()), principal)
        projects.delete_one.assert_not_called()

    async def test_deleting_absent_document_is_idempotent(self, repo, projects, principal):
        projects.count_documents.return_value = 0

        assert await repo.delete(str(ObjectId()), principal) == 0
        assert await repo.delete("not-an-id", principal) == 0
        projects.delete_one.assert_not_called()


class TestReads:
    async def test_list_is_joined_with_readers(self, repo, projects, principal):
        [p async for p in repo.list(10, 0, principal, ProjectScope(status="ACTIVE"))]

        pipeline = projects.aggregate.call_args.args[0]
        assert pipeline[0] == {"$match": {"status": "ACTIVE"}}
        assert pipeline[1]["$lookup"]["from"] == "projects_readers"

    async def test_find_by_id_refreshes_reading_time(
        self, repo, projects, readers, principal, fake_cursor
    ):
        oid = ObjectId()
        projects.aggregate = MagicMock(
            return_value=fake_cursor([{"_id": oid, "name": "proj-1", "status": "ACTIVE"}])
        )

        project = await repo.find_by_id(str(oid), principal)

        assert project.name == "proj-1"
        assert readers.update_one.await_args.args[0] == {"entity_id": oid, "reader": principal}

    async def test_find_by_id_invisible(self, repo, readers, principal):
        assert await repo.find_by_id(str(ObjectId()), principal) is None
        readers.update_one.assert_not_called()

    async def test_count(self, repo, projects, principal, fake_cursor):
        projects.aggregate = MagicMock(return_value=fake_cursor([{"count": 2}]))
        assert await repo.count(principal) == 2
        assert projects.aggregate.call_args.args[0][-1] == {"$count": "count"}


class TestAccessRecords:
    async def test_grant_requires_document(self, repo, projects, readers):
        projects.count_documents.return_value = 0
        assert await repo.grant_access(str(ObjectId()), 5, can_edit=True) is False
        readers.update_one.assert_not_called()

    async def test_grant(self, repo, readers):
        oid = ObjectId()
        assert await repo.grant_access(str(oid), 5, can_edit=True) is True
        assert readers.update_one.await_args.args[1]["$set"] == {
            "can_edit": True,
            "can_delete": False,
        }

    async def test_get_all_readers(self, repo, readers, fake_cursor):
        readers.find = MagicMock(return_value=fake_cursor([grant_row(1, True, True)]))
        records = await repo.get_all_readers(str(ObjectId()))
        assert records[0].reader == 1

    async def test_get_all_readers_invalid_id(self, repo):
        assert await repo.get_all_readers("bogus") == []

    async def test_revoke(self, repo, readers):
        assert await repo.revoke_access(str(ObjectId()), 5) == 1
