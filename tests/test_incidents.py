"""Incident service: shared records with free status movement."""

import uuid

import pytest

from app.core.exceptions import NotFoundError
from app.services import incidents, projects

STATUSES = ["open", "investigating", "resolved", "closed"]


async def test_create_incident_defaults_to_open(db, alice):
    project = await projects.create_project(db, {"name": "Web App Security"}, alice.id)

    incident = await incidents.create_incident(
        db, {"title": "Data Breach Attempt", "project_id": project.id}
    )

    assert incident.status == "open"
    assert incident.project_id == project.id
    assert incident.project.name == "Web App Security"


async def test_create_incident_without_project(db):
    incident = await incidents.create_incident(db, {"title": "Stray alert"})
    assert incident.project_id is None
    assert incident.project is None


async def test_list_incidents_newest_first_with_project_view(db, alice):
    project = await projects.create_project(db, {"name": "Perimeter"}, alice.id)
    first = await incidents.create_incident(db, {"title": "first", "project_id": project.id})
    second = await incidents.create_incident(db, {"title": "second"})

    listed = await incidents.list_incidents(db)

    assert [i.id for i in listed] == [second.id, first.id]
    assert listed[1].project.id == project.id
    assert listed[1].project.name == "Perimeter"
    assert listed[0].project is None


async def test_get_missing_incident_is_not_found(db):
    with pytest.raises(NotFoundError, match="Incident not found"):
        await incidents.get_incident(db, uuid.uuid4())
    with pytest.raises(NotFoundError):
        await incidents.get_incident(db, "not-a-uuid")


async def test_every_status_is_reachable_from_every_status(db):
    incident = await incidents.create_incident(db, {"title": "Ping-pong"})

    for source in STATUSES:
        for target in STATUSES:
            await incidents.update_incident_status(db, incident.id, source)
            updated = await incidents.update_incident_status(db, incident.id, target)
            assert updated.status == target


async def test_closed_incident_can_be_reopened(db):
    incident = await incidents.create_incident(db, {"title": "Reopened"})
    await incidents.update_incident_status(db, incident.id, "closed")

    reopened = await incidents.update_incident_status(db, incident.id, "open")

    assert reopened.status == "open"


async def test_update_status_of_missing_incident_is_not_found(db):
    with pytest.raises(NotFoundError):
        await incidents.update_incident_status(db, uuid.uuid4(), "resolved")


async def test_delete_incident(db):
    incident = await incidents.create_incident(db, {"title": "Short lived"})

    assert await incidents.delete_incident(db, incident.id) == {
        "message": "Incident deleted successfully"
    }
    with pytest.raises(NotFoundError):
        await incidents.get_incident(db, incident.id)
    with pytest.raises(NotFoundError):
        await incidents.delete_incident(db, incident.id)
