"""Tests for project file endpoints"""

from unittest.mock import patch

import pytest
from httpx import AsyncClient
from fastapi import status
from sqlalchemy import select

from atelier.models import Notification, ProjectFile
from atelier.services.s3_service import (
    S3ConnectionError,
    InvalidFileTypeError,
    FileTooLargeError,
)


@pytest.fixture
def mock_s3():
    """S3Service as seen by the files router"""
    with patch("atelier.api.files.S3Service") as mock_class:
        instance = mock_class.return_value
        instance.generate_s3_key.return_value = "projects/1/2026/10/19/abc123.pdf"
        instance.upload_bytes.return_value = (
            "https://atelier-project-files.s3.eu-west-1.amazonaws.com/projects/1/2026/10/19/abc123.pdf"
        )
        yield instance


def pdf_upload(content: bytes = b"%PDF-1.4 project brief"):
    return {"file": ("brief.pdf", content, "application/pdf")}


@pytest.mark.asyncio
class TestUploadFile:
    """POST /api/dashboard/projects/{id}/files"""

    async def test_upload_stores_metadata(
        self, async_client: AsyncClient, alice, alice_project, alice_headers, mock_s3
    ):
        content = b"%PDF-1.4 project brief"
        response = await async_client.post(
            f"/api/dashboard/projects/{alice_project.id}/files",
            headers=alice_headers,
            files=pdf_upload(content),
            data={"description": "Project brief"},
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["name"] == "brief.pdf"
        assert data["file_size"] == len(content)
        assert data["file_type"] == "application/pdf"
        assert data["description"] == "Project brief"
        assert data["uploaded_by"] == alice.id
        assert data["file_url"].endswith("abc123.pdf")
        assert "/api/admin/projects" in response.headers["X-Invalidate-Queries"]

        mock_s3.validate_file.assert_called_once_with(len(content), "application/pdf")
        mock_s3.upload_bytes.assert_called_once_with(
            content, "projects/1/2026/10/19/abc123.pdf", "application/pdf"
        )

        response = await async_client.get(
            f"/api/dashboard/projects/{alice_project.id}/files", headers=alice_headers
        )
        listed = response.json()
        assert len(listed) == 1
        assert (listed[0]["name"], listed[0]["file_size"], listed[0]["file_type"]) == (
            "brief.pdf", len(content), "application/pdf"
        )

    async def test_upload_notifies_admins_when_asked(
        self, async_client: AsyncClient, db_session, admin, alice_project, alice_headers, mock_s3
    ):
        response = await async_client.post(
            f"/api/dashboard/projects/{alice_project.id}/files",
            headers=alice_headers,
            files=pdf_upload(),
            data={"notify_admin": "true"},
        )
        assert response.status_code == status.HTTP_201_CREATED

        result = await db_session.execute(
            select(Notification).where(Notification.user_id == admin.id)
        )
        notification = result.scalar_one()
        assert "brief.pdf" in notification.message

    async def test_upload_without_notify_flag(
        self, async_client: AsyncClient, db_session, admin, alice_project, alice_headers, mock_s3
    ):
        await async_client.post(
            f"/api/dashboard/projects/{alice_project.id}/files",
            headers=alice_headers,
            files=pdf_upload(),
        )

        result = await db_session.execute(select(Notification))
        assert result.scalars().all() == []

    @pytest.mark.parametrize(
        "error",
        [FileTooLargeError("File is empty"), InvalidFileTypeError("File type application/x-msdownload is not allowed")],
    )
    async def test_rejected_file(
        self, async_client: AsyncClient, db_session, alice_project, alice_headers, mock_s3, error
    ):
        mock_s3.validate_file.side_effect = error

        response = await async_client.post(
            f"/api/dashboard/projects/{alice_project.id}/files",
            headers=alice_headers,
            files=pdf_upload(),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        mock_s3.upload_bytes.assert_not_called()
        result = await db_session.execute(select(ProjectFile))
        assert result.scalars().all() == []

    async def test_storage_unavailable(
        self, async_client: AsyncClient, db_session, alice_project, alice_headers, mock_s3
    ):
        mock_s3.upload_bytes.side_effect = S3ConnectionError("Failed to upload file: AccessDenied")

        response = await async_client.post(
            f"/api/dashboard/projects/{alice_project.id}/files",
            headers=alice_headers,
            files=pdf_upload(),
        )

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        result = await db_session.execute(select(ProjectFile))
        assert result.scalars().all() == []

    async def test_other_client_cannot_upload(
        self, async_client: AsyncClient, alice_project, bob_headers, mock_s3
    ):
        response = await async_client.post(
            f"/api/dashboard/projects/{alice_project.id}/files",
            headers=bob_headers,
            files=pdf_upload(),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        mock_s3.upload_bytes.assert_not_called()


@pytest.mark.asyncio
class TestDeleteFile:
    """DELETE /api/dashboard/projects/{id}/files/{file_id}"""

    async def add_file(self, db_session, project, user):
        record = ProjectFile(
            project_id=project.id,
            name="logo.png",
            file_url="https://example.com/logo.png",
            file_key="projects/1/logo.png",
            file_type="image/png",
            file_size=2048,
            uploaded_by=user.id,
        )
        db_session.add(record)
        await db_session.commit()
        return record

    async def test_delete_file(
        self, async_client: AsyncClient, db_session, alice, alice_project, alice_headers, mock_s3
    ):
        record = await self.add_file(db_session, alice_project, alice)

        response = await async_client.delete(
            f"/api/dashboard/projects/{alice_project.id}/files/{record.id}",
            headers=alice_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        mock_s3.delete_object.assert_called_once_with("projects/1/logo.png")
        result = await db_session.execute(select(ProjectFile))
        assert result.scalars().all() == []

    async def test_storage_failure_still_deletes_row(
        self, async_client: AsyncClient, db_session, alice, alice_project, alice_headers, mock_s3
    ):
        record = await self.add_file(db_session, alice_project, alice)
        mock_s3.delete_object.side_effect = S3ConnectionError("Failed to delete object")

        response = await async_client.delete(
            f"/api/dashboard/projects/{alice_project.id}/files/{record.id}",
            headers=alice_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        result = await db_session.execute(select(ProjectFile))
        assert result.scalars().all() == []

    async def test_delete_unknown_file(
        self, async_client: AsyncClient, alice_project, alice_headers, mock_s3
    ):
        response = await async_client.delete(
            f"/api/dashboard/projects/{alice_project.id}/files/9999",
            headers=alice_headers,
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
