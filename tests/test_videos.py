import os

from config import settings
from models import VideoCategory


def _upload(client, headers, **data):
    files = {
        "video": ("clip.mp4", b"fake-video-bytes", "video/mp4"),
        "thumbnail": ("thumb.png", b"fake-image-bytes", "image/png"),
    }
    form = {"title": "My clip", "description": "Shot on a phone", "category": "music", "tags": "live, guitar"}
    form.update(data)
    return client.post("/videos", headers=headers, data=form, files=files)


def test_upload_video(client, create_user, auth_headers):
    user = create_user()

    response = _upload(client, auth_headers(user))

    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "My clip"
    assert data["category"] == "music"
    assert data["tags"] == ["live", "guitar"]
    assert (data["likes"], data["dislikes"], data["views"]) == (0, 0, 0)
    assert data["user"]["id"] == user.id
    assert data["video_url"].startswith("/uploads/videos/video-")
    stored = os.path.join(settings.UPLOAD_ROOT, data["video_url"][len("/uploads/"):])
    assert os.path.exists(stored)


def test_upload_rejects_wrong_type(client, create_user, auth_headers):
    files = {
        "video": ("clip.txt", b"text", "text/plain"),
        "thumbnail": ("thumb.png", b"img", "image/png"),
    }
    response = client.post("/videos", headers=auth_headers(create_user()), data={"title": "x"}, files=files)

    assert response.status_code == 400
    assert response.json()["message"] == "Only video files are allowed!"


def test_upload_requires_files(client, create_user, auth_headers):
    response = client.post("/videos", headers=auth_headers(create_user()), data={"title": "x"})

    assert response.status_code == 400
    assert response.json()["message"] == "Video and thumbnail are required"


def test_upload_requires_auth(client):
    response = _upload(client, {})
    assert response.status_code == 401


def test_get_video_counts_views(client, create_video):
    video = create_video()

    client.get(f"/videos/{video.id}")
    response = client.get(f"/videos/{video.id}")

    assert response.status_code == 200
    assert response.json()["views"] == 2


def test_get_missing_video(client):
    response = client.get("/videos/999")
    assert response.status_code == 404
    assert response.json() == {"message": "Video not found"}


def test_list_videos_paginated(client, create_video):
    for i in range(3):
        create_video(title=f"Video {i}")

    response = client.get("/videos", params={"page": 1, "limit": 2})
    assert response.status_code == 200
    assert [v["title"] for v in response.json()] == ["Video 2", "Video 1"]

    response = client.get("/videos", params={"page": 2, "limit": 2})
    assert [v["title"] for v in response.json()] == ["Video 0"]


def test_user_videos(client, create_user, create_video):
    owner = create_user()
    create_video(user_id=owner.id, title="Mine")
    create_video(title="Theirs")

    response = client.get(f"/videos/user/{owner.id}")
    assert [v["title"] for v in response.json()] == ["Mine"]


def test_search_requires_query(client):
    response = client.get("/videos/search")
    assert response.status_code == 400
    assert response.json()["message"] == "Search query is required"


def test_search_relevance(client, create_video):
    create_video(title="Cooking pasta", description="guitar in the background")
    create_video(title="Guitar lesson", tags=["music"])
    create_video(title="Unrelated", description="nothing here")

    response = client.get("/videos/search", params={"q": "guitar"})

    assert response.status_code == 200
    assert [v["title"] for v in response.json()] == ["Guitar lesson", "Cooking pasta"]


def test_search_sort_by_views(client, create_video):
    create_video(title="Cat one", views=5)
    create_video(title="Cat two", views=50)

    response = client.get("/videos/search", params={"q": "cat", "sort": "views"})
    assert [v["title"] for v in response.json()] == ["Cat two", "Cat one"]


def test_recommended(client, create_video):
    base = create_video(category=VideoCategory.GAMING, tags=["speedrun"])
    create_video(title="Same category", category=VideoCategory.GAMING, views=3)
    create_video(title="Shared tag", category=VideoCategory.MUSIC, tags=["speedrun"], views=7)
    create_video(title="Unrelated", category=VideoCategory.NEWS)

    response = client.get(f"/videos/{base.id}/recommended")

    assert [v["title"] for v in response.json()] == ["Shared tag", "Same category"]


def test_comments_and_replies(client, create_user, create_video, auth_headers):
    headers = auth_headers(create_user())
    video = create_video()

    response = client.post(f"/videos/{video.id}/comments", headers=headers, json={"content": "  Nice!  "})
    assert response.status_code == 201
    comment = response.json()
    assert comment["content"] == "Nice!"
    assert comment["is_reply"] is False

    response = client.post(f"/comments/{comment['id']}/replies", headers=headers, json={"content": "Thanks"})
    assert response.status_code == 201
    reply = response.json()
    assert reply["is_reply"] is True
    assert reply["parent_id"] == comment["id"]
    assert reply["video_id"] == video.id

    response = client.get(f"/videos/{video.id}/comments")
    assert [c["id"] for c in response.json()] == [comment["id"]]

    response = client.get(f"/comments/{comment['id']}/replies")
    assert [r["id"] for r in response.json()] == [reply["id"]]


def test_blank_comment_rejected(client, create_user, create_video, auth_headers):
    video = create_video()

    response = client.post(f"/videos/{video.id}/comments", headers=auth_headers(create_user()), json={"content": "   "})

    assert response.status_code == 400
    assert "Comment content is required" in response.json()["message"]


def test_upload_too_large(client, create_user, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 4)
    videos_dir = os.path.join(settings.UPLOAD_ROOT, "videos")
    os.makedirs(videos_dir, exist_ok=True)
    before = set(os.listdir(videos_dir))

    response = _upload(client, auth_headers(create_user()))

    assert response.status_code == 413
    assert response.json()["message"].startswith("File too large")
    assert set(os.listdir(videos_dir)) == before
    assert client.get("/videos").json() == []
