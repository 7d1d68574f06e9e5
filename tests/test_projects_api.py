"""Tests for client dashboard project endpoints"""

from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest
from httpx import AsyncClient
from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from atelier.models import Milestone, Notification, Project, ProjectFile, ProjectStatus
from atelier.services.query_cache import INVALIDATE_HEADER

from conftest import create_project


PROJECT_REQUEST = {
    "name": "Bakery webshop",
    "type": "ecommerce",
    "description": "Online ordering for bread and pastries",
    "budget": "5000-10000",
    "meta_data": {"services": ["design", "development"], "has_domain": True},
}


def invalidated(response):
    return [key.strip() for key in response.headers[INVALIDATE_HEADER].split(",")]


@pytest.mark.asyncio
class TestCreateProject:
    """POST /api/dashboard/projects"""

    async def test_create_project(self, async_client: AsyncClient, alice, alice_headers):
        response = await async_client.post(
            "/api/dashboard/projects", headers=alice_headers, json=PROJECT_REQUEST
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["name"] == "Bakery webshop"
        assert data["user_id"] == alice.id
        assert data["status"] == "pending"
        assert data["meta_data"]["services"] == ["design", "development"]

    async def test_supplied_status_is_ignored(self, async_client: AsyncClient, alice_headers):
        response = await async_client.post(
            "/api/dashboard/projects",
            headers=alice_headers,
            json={**PROJECT_REQUEST, "status": "approved"},
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["status"] == "pending"

    async def test_meta_data_as_json_string(self, async_client: AsyncClient, alice_headers):
        response = await async_client.post(
            "/api/dashboard/projects",
            headers=alice_headers,
            json={**PROJECT_REQUEST, "meta_data": '{"has_logo": false}'},
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["meta_data"] == {"has_logo": False}

    async def test_notifies_every_admin(
        self, async_client: AsyncClient, alice_headers, admin, db_session: AsyncSession
    ):
        response = await async_client.post(
            "/api/dashboard/projects", headers=alice_headers, json=PROJECT_REQUEST
        )
        assert response.status_code == status.HTTP_201_CREATED

        result = await db_session.execute(
            select(Notification).where(Notification.user_id == admin.id)
        )
        notifications = result.scalars().all()
        assert len(notifications) == 1
        assert "Bakery webshop" in notifications[0].message

    async def test_invalidates_both_project_lists(self, async_client: AsyncClient, alice_headers):
        response = await async_client.post(
            "/api/dashboard/projects", headers=alice_headers, json=PROJECT_REQUEST
        )

        keys = invalidated(response)
        assert "/api/dashboard/projects" in keys
        assert "/api/admin/projects" in keys
        assert f"/api/dashboard/projects/{response.json()['id']}" in keys

    @pytest.mark.parametrize(
        "field,value",
        [("name", "ab"), ("description", "too short"), ("type", "")],
    )
    async def test_validation(self, async_client: AsyncClient, alice_headers, field, value):
        response = await async_client.post(
            "/api/dashboard/projects",
            headers=alice_headers,
            json={**PROJECT_REQUEST, field: value},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"][0]["field"] == field

    async def test_notification_failure_does_not_fail_request(
        self, async_client: AsyncClient, alice_headers, admin, db_session: AsyncSession
    ):
        # A non-mapped object makes the notification insert fail
        with patch("atelier.services.notification_service.Notification", lambda **kwargs: object()):
            response = await async_client.post(
                "/api/dashboard/projects", headers=alice_headers, json=PROJECT_REQUEST
            )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["status"] == "pending"

        result = await db_session.execute(select(Project))
        assert len(result.scalars().all()) == 1
        result = await db_session.execute(select(Notification))
        assert result.scalars().all() == []


@pytest.mark.asyncio
class TestListProjects:
    """GET /api/dashboard/projects"""

    async def test_lists_only_own_projects(
        self, async_client: AsyncClient, db_session, alice, bob, alice_headers
    ):
        first = await create_project(db_session, alice, name="First project")
        second = await create_project(db_session, alice, name="Second project")
        await create_project(db_session, bob, name="Bob's project")

        response = await async_client.get("/api/dashboard/projects", headers=alice_headers)

        assert response.status_code == status.HTTP_200_OK
        assert [p["id"] for p in response.json()] == [first.id, second.id]

    async def test_revalidation_with_etag(
        self, async_client: AsyncClient, alice_project, alice_headers
    ):
        response = await async_client.get("/api/dashboard/projects", headers=alice_headers)
        etag = response.headers["etag"]
        assert etag.startswith('W/"')
        assert response.headers["cache-control"] == "private, no-cache"

        response = await async_client.get(
            "/api/dashboard/projects", headers={**alice_headers, "If-None-Match": etag}
        )
        assert response.status_code == status.HTTP_304_NOT_MODIFIED

    async def test_etag_changes_after_status_change(
        self, async_client: AsyncClient, alice_project, alice_headers, admin_headers
    ):
        response = await async_client.get("/api/dashboard/projects", headers=alice_headers)
        etag = response.headers["etag"]

        response = await async_client.post(
            f"/api/admin/projects/{alice_project.id}/approve", headers=admin_headers
        )
        assert response.status_code == status.HTTP_200_OK

        response = await async_client.get(
            "/api/dashboard/projects", headers={**alice_headers, "If-None-Match": etag}
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()[0]["status"] == "approved"

    async def test_legacy_status_is_normalized(
        self, async_client: AsyncClient, db_session, alice, alice_headers
    ):
        await create_project(db_session, alice, status="in-progress")

        response = await async_client.get("/api/dashboard/projects", headers=alice_headers)

        assert response.json()[0]["status"] == "in_progress"


@pytest.mark.asyncio
class TestProjectAccess:
    """Ownership rules on single-project routes"""

    async def test_owner_gets_detail_with_progress(
        self, async_client: AsyncClient, db_session, alice_project, alice_headers
    ):
        db_session.add_all([
            Milestone(project_id=alice_project.id, title="Design", status="completed", order=1),
            Milestone(project_id=alice_project.id, title="Build", status="in-progress", order=2),
            Milestone(project_id=alice_project.id, title="Launch", order=3),
            Milestone(project_id=alice_project.id, title="Handover", order=4),
        ])
        await db_session.commit()

        response = await async_client.get(
            f"/api/dashboard/projects/{alice_project.id}", headers=alice_headers
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["milestone_count"] == 4
        assert data["completed_milestones"] == 1
        assert data["progress"] == 25

    async def test_other_client_is_forbidden(
        self, async_client: AsyncClient, alice_project, bob_headers
    ):
        response = await async_client.get(
            f"/api/dashboard/projects/{alice_project.id}", headers=bob_headers
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

        response = await async_client.put(
            f"/api/dashboard/projects/{alice_project.id}",
            headers=bob_headers,
            json={"name": "Hijacked"},
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

        response = await async_client.delete(
            f"/api/dashboard/projects/{alice_project.id}", headers=bob_headers
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_admin_can_read_any_project(
        self, async_client: AsyncClient, alice_project, admin_headers
    ):
        response = await async_client.get(
            f"/api/dashboard/projects/{alice_project.id}", headers=admin_headers
        )

        assert response.status_code == status.HTTP_200_OK

    async def test_unknown_project(self, async_client: AsyncClient, alice_headers):
        response = await async_client.get("/api/dashboard/projects/9999", headers=alice_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["type"].endswith("/not_found")

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/dashboard/projects"),
            ("POST", "/api/dashboard/projects"),
            ("GET", "/api/dashboard/projects/1"),
            ("PUT", "/api/dashboard/projects/1"),
            ("DELETE", "/api/dashboard/projects/1"),
            ("GET", "/api/dashboard/projects/1/milestones"),
            ("GET", "/api/dashboard/projects/1/files"),
            ("GET", "/api/dashboard/notifications"),
            ("GET", "/api/dashboard/notifications/unread/count"),
            ("POST", "/api/dashboard/notifications/read-all"),
            ("GET", "/api/admin/projects"),
            ("POST", "/api/admin/projects/1/approve"),
            ("GET", "/api/admin/clients"),
            ("GET", "/api/admin/contacts"),
        ],
    )
    async def test_requires_session(self, async_client: AsyncClient, method, path):
        response = await async_client.request(method, path, json=PROJECT_REQUEST)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
class TestUpdateProject:
    """PUT /api/dashboard/projects/{id}"""

    async def test_owner_updates_details(
        self, async_client: AsyncClient, alice_project, alice_headers
    ):
        response = await async_client.put(
            f"/api/dashboard/projects/{alice_project.id}",
            headers=alice_headers,
            json={"name": "Renamed website", "budget": "2500"},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["name"] == "Renamed website"
        assert data["budget"] == "2500"
        assert data["description"] == alice_project.description
        assert "/api/admin/projects" in invalidated(response)

    async def test_null_clears_optional_details(
        self, async_client: AsyncClient, db_session, alice, alice_headers
    ):
        project = await create_project(
            db_session, alice, budget="5000-10000", end_date=datetime(2026, 12, 1)
        )

        response = await async_client.put(
            f"/api/dashboard/projects/{project.id}",
            headers=alice_headers,
            json={"budget": None, "end_date": None, "name": None},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["budget"] is None
        assert data["end_date"] is None
        assert data["name"] == "Company website"

        await db_session.refresh(project)
        assert project.budget is None
        assert project.end_date is None
        assert project.name == "Company website"

    async def test_client_cannot_change_status(
        self, async_client: AsyncClient, alice_project, alice_headers, db_session
    ):
        response = await async_client.put(
            f"/api/dashboard/projects/{alice_project.id}",
            headers=alice_headers,
            json={"name": "Sneaky rename", "status": "approved"},
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

        await db_session.refresh(alice_project)
        assert alice_project.status == "pending"
        assert alice_project.name == "Company website"

    async def test_unchanged_status_is_not_a_transition(
        self, async_client: AsyncClient, alice_project, alice_headers
    ):
        response = await async_client.put(
            f"/api/dashboard/projects/{alice_project.id}",
            headers=alice_headers,
            json={"name": "Same status", "status": "pending"},
        )

        assert response.status_code == status.HTTP_200_OK

    async def test_unknown_status(self, async_client: AsyncClient, alice_project, admin_headers):
        response = await async_client.put(
            f"/api/dashboard/projects/{alice_project.id}",
            headers=admin_headers,
            json={"status": "shipped"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
class TestDeleteProject:
    """DELETE /api/dashboard/projects/{id}"""

    async def test_delete_cascades(
        self, async_client: AsyncClient, db_session, alice, alice_project, alice_headers
    ):
        db_session.add(Milestone(project_id=alice_project.id, title="Design"))
        db_session.add(ProjectFile(
            project_id=alice_project.id,
            name="brief.pdf",
            file_url="https://example.com/brief.pdf",
            file_key="projects/1/brief.pdf",
            file_type="application/pdf",
            file_size=1234,
            uploaded_by=alice.id,
        ))
        await db_session.commit()

        with patch("atelier.api.projects.S3Service") as mock_s3:
            response = await async_client.delete(
                f"/api/dashboard/projects/{alice_project.id}", headers=alice_headers
            )

        assert response.status_code == status.HTTP_200_OK
        assert "/api/admin/projects" in invalidated(response)
        mock_s3.return_value.delete_object.assert_called_once_with("projects/1/brief.pdf")

        assert (await db_session.execute(select(Project))).scalars().all() == []
        assert (await db_session.execute(select(Milestone))).scalars().all() == []
        assert (await db_session.execute(select(ProjectFile))).scalars().all() == []

    async def test_admin_cannot_delete_on_dashboard_route(
        self, async_client: AsyncClient, alice_project, admin_headers
    ):
        response = await async_client.delete(
            f"/api/dashboard/projects/{alice_project.id}", headers=admin_headers
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
