"""
Tests for the MongoDB repositories in renfort.data.repositories.

The pymongo collection is replaced by a recording stub, so these check the
queries and documents the repositories produce without a server.
"""

from datetime import date, datetime, timezone
from types import SimpleNamespace

import pytest
from bson import ObjectId
from bson.errors import InvalidId

from renfort.core.geo import BoundingBox
from renfort.data.models import AvailabilitySlot, CandidateProfile, Mission, User
from renfort.data.repositories import (
    ApplicationRepository,
    MissionRepository,
    TalentRepository,
)
from renfort.utils.constants import MissionStatus

BOX = BoundingBox(min_lat=48.7, max_lat=49.0, min_lng=2.2, max_lng=2.5)


class StubCursor:
    def __init__(self, documents, calls):
        self._documents = documents
        self._calls = calls

    def skip(self, n):
        self._calls["skip"] = n
        return self

    def limit(self, n):
        self._calls["limit"] = n
        return self

    def sort(self, key, direction):
        self._calls["sort"] = (key, direction)
        return self

    def __iter__(self):
        return iter(self._documents)


class StubCollection:
    """Records what a repository sends to MongoDB."""

    def __init__(self, documents=None):
        self.documents = list(documents or [])
        self.inserted = []
        self.updates = []
        self.find_calls = []

    def insert_one(self, document):
        document = dict(document)
        document.setdefault("_id", ObjectId())
        self.inserted.append(document)
        self.documents.append(document)
        return SimpleNamespace(inserted_id=document["_id"])

    def find(self, query):
        calls = {"query": query}
        self.find_calls.append(calls)
        return StubCursor(self.documents, calls)

    def find_one(self, query):
        self.find_calls.append({"query": query})
        for document in self.documents:
            if all(document.get(k) == v for k, v in query.items()):
                return document
        return None

    def update_one(self, query, update):
        self.updates.append((query, update))
        for document in self.documents:
            if document["_id"] == query["_id"]:
                document.update(update["$set"])
                return SimpleNamespace(matched_count=1)
        return SimpleNamespace(matched_count=0)


def with_collection(repository, collection, monkeypatch):
    monkeypatch.setattr(repository, "_get_collection", lambda: collection)
    return repository


def mission_document(**overrides):
    document = {
        "_id": ObjectId(),
        "client_id": ObjectId(),
        "title": "Renfort - Aide-soignant",
        "job_title": "Aide-soignant",
        "hourly_rate": 24.0,
        "start_date": datetime(2026, 10, 19, 8, tzinfo=timezone.utc),
        "end_date": datetime(2026, 10, 19, 16, tzinfo=timezone.utc),
        "city": "Paris",
        "postal_code": "75011",
        "address": "Paris",
        "status": "OPEN",
    }
    document.update(overrides)
    return document


# ── TalentRepository ─────────────────────────────────────────────────────────


class TestBuildCandidateQuery:
    def test_without_skills(self):
        query = TalentRepository.build_candidate_query(BOX, [])
        assert query == {
            "role": "talent",
            "status": "verified",
            "profile": {"$ne": None},
            "profile.latitude": {"$gte": 48.7, "$lte": 49.0},
            "profile.longitude": {"$gte": 2.2, "$lte": 2.5},
        }

    def test_with_skills(self):
        query = TalentRepository.build_candidate_query(BOX, ["Gériatrie", "PSC1"])
        assert query["profile.specialties"] == {"$all": ["Gériatrie", "PSC1"]}


class TestTalentRepository:
    def test_find_passes_limit(self, monkeypatch):
        profile = CandidateProfile(first_name="Léa", last_name="Durand", latitude=48.86, longitude=2.34)
        user = User(id=ObjectId(), email="lea@renfort.fr", status="verified", profile=profile)
        collection = StubCollection([user.model_dump_mongo()])
        repo = with_collection(TalentRepository(), collection, monkeypatch)

        talents = repo.find_by_bounding_box_and_skills(BOX, ["Gériatrie"], limit=30)

        assert [t.id for t in talents] == [user.id]
        assert collection.find_calls[0]["limit"] == 30
        assert collection.find_calls[0]["query"]["profile.specialties"] == {"$all": ["Gériatrie"]}

    def test_get_email(self, monkeypatch):
        user = User(id=ObjectId(), email="direction@ehpad.fr", role="client")
        repo = with_collection(TalentRepository(), StubCollection([user.model_dump_mongo()]), monkeypatch)

        assert repo.get_email(str(user.id)) == "direction@ehpad.fr"
        assert repo.get_email(ObjectId()) is None
        assert repo.get_email("not-an-id") is None

    def test_dated_slot_stored_as_datetime(self):
        profile = CandidateProfile(
            first_name="Léa",
            last_name="Durand",
            availability_slots=[AvailabilitySlot(specific_date=date(2026, 12, 24))],
        )
        document = User(email="lea@renfort.fr", profile=profile).model_dump_mongo()
        slot = document["profile"]["availability_slots"][0]
        assert slot["specific_date"] == datetime(2026, 12, 24)

    def test_dated_slot_read_back_as_date(self):
        profile = {
            "first_name": "Léa",
            "last_name": "Durand",
            "availability_slots": [{"specific_date": datetime(2026, 12, 24), "start_time": "08:00"}],
        }
        user = User.model_validate({"_id": ObjectId(), "email": "lea@renfort.fr", "profile": profile})
        assert user.profile.availability_slots[0].specific_date == date(2026, 12, 24)


# ── MissionRepository ────────────────────────────────────────────────────────


class TestMissionRepository:
    def test_create_sets_id_and_timestamps(self, monkeypatch):
        collection = StubCollection()
        repo = with_collection(MissionRepository(), collection, monkeypatch)
        document = mission_document()
        document.pop("_id")

        mission = repo.create(Mission.model_validate(document))

        assert mission.id == collection.inserted[0]["_id"]
        assert "_id" in collection.inserted[0]
        assert collection.inserted[0]["created_at"] == mission.created_at

    def test_get_by_id_malformed(self, monkeypatch):
        collection = StubCollection()
        repo = with_collection(MissionRepository(), collection, monkeypatch)

        assert repo.get_by_id("mission-1") is None
        assert collection.find_calls == []

    def test_update_status_with_assignee(self, monkeypatch):
        document = mission_document()
        collection = StubCollection([document])
        repo = with_collection(MissionRepository(), collection, monkeypatch)
        talent_id = ObjectId()

        mission = repo.update_status(
            str(document["_id"]), MissionStatus.ASSIGNED, {"assigned_talent_id": talent_id}
        )

        query, update = collection.updates[0]
        assert query == {"_id": document["_id"]}
        assert update["$set"]["status"] == "ASSIGNED"
        assert update["$set"]["assigned_talent_id"] == talent_id
        assert "updated_at" in update["$set"]
        assert mission.status == MissionStatus.ASSIGNED
        assert mission.assigned_talent_id == talent_id

    def test_update_status_missing(self, monkeypatch):
        repo = with_collection(MissionRepository(), StubCollection(), monkeypatch)
        assert repo.update_status(ObjectId(), MissionStatus.CANCELLED) is None


# ── ApplicationRepository ────────────────────────────────────────────────────


class TestApplicationRepository:
    def test_lookup_uses_object_ids(self, monkeypatch):
        collection = StubCollection()
        repo = with_collection(ApplicationRepository(), collection, monkeypatch)
        mission_id, talent_id = ObjectId(), ObjectId()

        assert repo.get_by_mission_and_talent(str(mission_id), str(talent_id)) is None
        assert collection.find_calls[0]["query"] == {"mission_id": mission_id, "talent_id": talent_id}

    def test_get_by_mission_unbounded_newest_first(self, monkeypatch):
        collection = StubCollection()
        repo = with_collection(ApplicationRepository(), collection, monkeypatch)
        mission_id = ObjectId()

        repo.get_by_mission(mission_id)

        assert collection.find_calls[0]["query"] == {"mission_id": mission_id}
        assert collection.find_calls[0]["sort"] == ("created_at", -1)
        assert collection.find_calls[0]["limit"] == 0

    @pytest.mark.parametrize("bad_id", ["", "xyz"])
    def test_malformed_lookup_raises(self, monkeypatch, bad_id):
        repo = with_collection(ApplicationRepository(), StubCollection(), monkeypatch)
        with pytest.raises(InvalidId):
            repo.get_by_mission_and_talent(bad_id, ObjectId())
