"""API tests for issue reporting, listing, statistics and admin actions"""

import asyncio
import csv
import io

from sqlalchemy import func, select

from app.core.config import settings
from app.db.session import SessionLocal
from app.models import Comment


def count_comments(issue_id):
    async def _count():
        async with SessionLocal() as session:
            return await session.scalar(
                select(func.count(Comment.id)).filter(Comment.issue_id == issue_id)
            )

    return asyncio.run(_count())


def test_create_issue_without_photo(client):
    response = client.post(
        "/api/issues",
        data={
            "title": "Pothole",
            "description": "deep hole",
            "category": "Roads",
            "location": "5th Ave",
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Issue reported successfully"
    issue = body["issue"]
    assert isinstance(issue["id"], int)
    assert issue["status"] == "Pending"
    assert issue["photoUrl"] is None
    assert issue["lastAdminView"] is None


def test_create_issue_with_reporter_contact(client):
    response = client.post(
        "/api/issues",
        data={
            "title": "No water",
            "description": "Tap dry since morning",
            "category": "Water",
            "location": "Sector 5",
            "reporterName": "Dana",
            "reporterEmail": "dana@example.com",
            "reporterPhone": "",
        },
    )
    assert response.status_code == 201
    issue = response.json()["issue"]
    assert issue["reporterName"] == "Dana"
    assert issue["reporterEmail"] == "dana@example.com"
    assert issue["reporterPhone"] is None


def test_create_issue_with_invalid_category_persists_nothing(client):
    before = client.get("/api/issues/stats").json()

    response = client.post(
        "/api/issues",
        data={
            "title": "Glow",
            "description": "Strange glow",
            "category": "Nuclear",
            "location": "Plant",
        },
    )
    assert response.status_code == 400
    assert "Invalid category" in response.json()["detail"]
    assert client.get("/api/issues/stats").json() == before
    assert client.get("/api/issues").json() == []


def test_create_issue_missing_fields(client):
    response = client.post("/api/issues", data={"title": "Pothole", "category": "Roads"})
    assert response.status_code == 400
    assert "required" in response.json()["detail"]


def test_create_issue_with_photo(client, storage):
    response = client.post(
        "/api/issues",
        data={"title": "Broken lamp", "description": "Dark street", "category": "Electricity", "location": "Main St"},
        files={"photo": ("lamp.jpg", b"\xff\xd8\xff-jpeg-bytes", "image/jpeg")},
    )
    assert response.status_code == 201
    photo_url = response.json()["issue"]["photoUrl"]
    assert photo_url in storage.uploads
    assert storage.uploads[photo_url] == (b"\xff\xd8\xff-jpeg-bytes", "image/jpeg")


def test_create_issue_rejects_non_image(client, storage):
    response = client.post(
        "/api/issues",
        data={"title": "Broken lamp", "description": "Dark street", "category": "Electricity", "location": "Main St"},
        files={"photo": ("notes.txt", b"hello", "text/plain")},
    )
    assert response.status_code == 400
    assert storage.uploads == {}
    assert client.get("/api/issues").json() == []


def test_create_issue_accepts_photo_at_size_limit(client, storage, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 16)
    response = client.post(
        "/api/issues",
        data={"title": "Broken lamp", "description": "Dark street", "category": "Electricity", "location": "Main St"},
        files={"photo": ("lamp.png", b"x" * 16, "image/png")},
    )
    assert response.status_code == 201
    assert response.json()["issue"]["photoUrl"] in storage.uploads


def test_create_issue_rejects_oversized_photo(client, storage, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 16)
    response = client.post(
        "/api/issues",
        data={"title": "Broken lamp", "description": "Dark street", "category": "Electricity", "location": "Main St"},
        files={"photo": ("lamp.png", b"x" * 17, "image/png")},
    )
    assert response.status_code == 400
    assert storage.uploads == {}
    assert client.get("/api/issues").json() == []


def test_photo_upload_failure_aborts_creation(client, storage):
    storage.fail_uploads = True
    response = client.post(
        "/api/issues",
        data={"title": "Broken lamp", "description": "Dark street", "category": "Electricity", "location": "Main St"},
        files={"photo": ("lamp.jpg", b"jpeg", "image/jpeg")},
    )
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to upload photo"
    assert client.get("/api/issues").json() == []


def test_failed_insert_removes_uploaded_photo(client, storage, monkeypatch):
    async def broken_create_issue(*args, **kwargs):
        raise RuntimeError("database down")

    monkeypatch.setattr("app.routers.issues.create_issue", broken_create_issue)
    response = client.post(
        "/api/issues",
        data={"title": "Broken lamp", "description": "Dark street", "category": "Electricity", "location": "Main St"},
        files={"photo": ("lamp.jpg", b"jpeg", "image/jpeg")},
    )
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to create issue"
    assert "database down" not in response.text
    assert len(storage.removed) == 1
    assert storage.uploads == {}


def test_list_issues_newest_first(client, create_issue):
    first = create_issue(title="First")
    second = create_issue(title="Second")
    ids = [issue["id"] for issue in client.get("/api/issues").json()]
    assert ids == [second["id"], first["id"]]


def test_list_issues_filters_are_combined(client, create_issue, admin_headers):
    water_resolved = create_issue(title="Leak", category="Water")
    create_issue(title="Dry tap", category="Water")
    roads_resolved = create_issue(title="Pothole", category="Roads")
    for issue in (water_resolved, roads_resolved):
        client.patch(
            f"/api/issues/{issue['id']}/status", json={"status": "Resolved"}, headers=admin_headers
        )

    response = client.get("/api/issues", params={"category": "Water", "status": "Resolved"})
    assert response.status_code == 200
    assert [i["id"] for i in response.json()] == [water_resolved["id"]]

    response = client.get("/api/issues", params={"category": "Safety", "status": "Resolved"})
    assert response.status_code == 200
    assert response.json() == []


def test_list_issues_rejects_unknown_filter_value(client):
    response = client.get("/api/issues", params={"status": "Closed"})
    assert response.status_code == 400


def test_search_is_case_insensitive_across_fields(client, create_issue):
    by_title = create_issue(title="Broken STREETLIGHT", description="dark", location="Elm")
    by_description = create_issue(title="Lamp", description="The streetlight flickers", location="Oak")
    by_location = create_issue(title="Wires", description="hanging", location="Streetlight corner")
    create_issue(title="Pothole", description="deep hole", location="5th Ave")

    response = client.get("/api/issues", params={"search": "streetlight"})
    ids = {i["id"] for i in response.json()}
    assert ids == {by_title["id"], by_description["id"], by_location["id"]}


def test_search_treats_wildcards_literally(client, create_issue):
    create_issue(title="Pothole")
    discount = create_issue(title="100% blocked drain", category="Water")
    response = client.get("/api/issues", params={"search": "%"})
    assert [i["id"] for i in response.json()] == [discount["id"]]


def test_blank_search_returns_everything(client, create_issue):
    create_issue()
    create_issue()
    assert len(client.get("/api/issues", params={"search": "   "}).json()) == 2


def test_get_issue_detail_and_not_found(client, create_issue):
    issue = create_issue()
    response = client.get(f"/api/issues/{issue['id']}")
    assert response.status_code == 200
    assert response.json()["title"] == "Pothole"
    assert response.json()["comments"] == []

    response = client.get("/api/issues/9999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Issue not found"


def test_update_status_requires_admin(client, create_issue):
    issue = create_issue()
    response = client.patch(f"/api/issues/{issue['id']}/status", json={"status": "Resolved"})
    assert response.status_code == 401

    response = client.patch(
        f"/api/issues/{issue['id']}/status",
        json={"status": "Resolved"},
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == 401
    assert client.get(f"/api/issues/{issue['id']}").json()["status"] == "Pending"


def test_update_status(client, create_issue, admin_headers):
    issue = create_issue()
    response = client.patch(
        f"/api/issues/{issue['id']}/status", json={"status": "In-Progress"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["issue"]["status"] == "In-Progress"
    assert client.get(f"/api/issues/{issue['id']}").json()["status"] == "In-Progress"


def test_update_status_rejects_unknown_value(client, create_issue, admin_headers):
    issue = create_issue()
    response = client.patch(
        f"/api/issues/{issue['id']}/status", json={"status": "Closed"}, headers=admin_headers
    )
    assert response.status_code == 400
    assert client.get(f"/api/issues/{issue['id']}").json()["status"] == "Pending"


def test_update_status_not_found(client, admin_headers):
    response = client.patch("/api/issues/9999/status", json={"status": "Resolved"}, headers=admin_headers)
    assert response.status_code == 404


def test_delete_issue_cascades_to_comments(client, create_issue, admin_headers):
    issue = create_issue()
    client.post(
        f"/api/issues/{issue['id']}/comments",
        json={"content": "Any news?", "authorName": "Dana", "authorType": "reporter"},
    )
    client.post(
        f"/api/issues/{issue['id']}/comments",
        json={"content": "Crew is on the way", "authorName": "System Admin", "authorType": "admin"},
    )
    other = create_issue(title="Other")
    client.post(
        f"/api/issues/{other['id']}/comments",
        json={"content": "Same here", "authorName": "Sam", "authorType": "reporter"},
    )
    assert count_comments(issue["id"]) == 2

    assert client.delete(f"/api/issues/{issue['id']}").status_code == 401

    response = client.delete(f"/api/issues/{issue['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Issue deleted successfully"
    assert client.get(f"/api/issues/{issue['id']}").status_code == 404
    assert client.get(f"/api/issues/{issue['id']}/comments").status_code == 404
    assert count_comments(issue["id"]) == 0
    assert count_comments(other["id"]) == 1

    assert client.delete(f"/api/issues/{issue['id']}", headers=admin_headers).status_code == 404


def test_statistics(client, create_issue, admin_headers):
    create_issue(category="Roads")
    create_issue(category="Roads")
    water = create_issue(category="Water")
    client.patch(f"/api/issues/{water['id']}/status", json={"status": "Resolved"}, headers=admin_headers)

    stats = client.get("/api/issues/stats").json()
    assert stats["total"] == 3
    assert stats["pending"] == 2
    assert stats["inProgress"] == 0
    assert stats["resolved"] == 1
    by_category = {entry["category"]: entry["count"] for entry in stats["byCategory"]}
    assert by_category == {"Roads": 2, "Water": 1}


def test_statistics_empty(client):
    stats = client.get("/api/issues/stats").json()
    assert stats == {"total": 0, "pending": 0, "inProgress": 0, "resolved": 0, "byCategory": []}


def test_export_csv(client, create_issue, admin_headers):
    create_issue(title='Leak, "Main" St', category="Water")
    create_issue(title="Pothole")

    assert client.get("/api/issues/export/csv").status_code == 401

    response = client.get("/api/issues/export/csv", headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=issues-export.csv" in response.headers["content-disposition"]

    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0][0] == "ID"
    assert [row[1] for row in rows[1:]] == ["Pothole", 'Leak, "Main" St']
    assert rows[1][6].endswith("Z")


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"
    assert client.get("/api/health").json()["status"] == "ok"


def test_out_of_range_issue_id_is_not_found(client, admin_headers):
    huge = "99999999999999999999"
    assert client.get(f"/api/issues/{huge}").status_code == 404
    assert client.get(f"/api/issues/{huge}/comments").status_code == 404
    assert client.get(f"/api/issues/{2**31}").status_code == 404
    assert client.get("/api/issues/0").status_code == 404
    assert client.get("/api/issues/-5").status_code == 404

    response = client.post(f"/api/issues/{huge}/mark-viewed", json={"viewerType": "admin"})
    assert response.status_code == 404
    response = client.post(
        f"/api/issues/{huge}/comments",
        json={"content": "hello", "authorName": "Dana", "authorType": "reporter"},
    )
    assert response.status_code == 404
    response = client.patch(
        f"/api/issues/{huge}/status", json={"status": "Resolved"}, headers=admin_headers
    )
    assert response.status_code == 404
    assert client.delete(f"/api/issues/{huge}", headers=admin_headers).status_code == 404


def test_blank_status_and_category_filters_are_ignored(client, create_issue):
    create_issue(category="Roads")
    create_issue(category="Water")

    response = client.get("/api/issues", params={"status": "", "category": ""})
    assert response.status_code == 200
    assert len(response.json()) == 2

    response = client.get("/api/issues", params={"status": "", "category": "Water"})
    assert response.status_code == 200
    assert [i["category"] for i in response.json()] == ["Water"]


def test_unknown_category_filter_is_rejected(client):
    response = client.get("/api/issues", params={"category": "Nuclear"})
    assert response.status_code == 400
    assert "Invalid category" in response.json()["detail"]
