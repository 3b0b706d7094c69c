def test_like_video(client, create_user, create_video, auth_headers):
    user = create_user()
    video = create_video()

    response = client.post(f"/videos/{video.id}/like", headers=auth_headers(user))

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Video liked"
    assert data["video"]["id"] == video.id
    assert data["video"]["likes"] == 1
    assert data["video"]["dislikes"] == 0
    assert data["video"]["user"]["id"] == video.user_id


def test_video_reaction_sequence(client, create_user, create_video, auth_headers):
    headers = auth_headers(create_user())
    video = create_video()

    response = client.post(f"/videos/{video.id}/like", headers=headers)
    assert response.json()["message"] == "Video liked"

    response = client.post(f"/videos/{video.id}/dislike", headers=headers)
    assert response.json()["message"] == "Changed like to dislike"
    assert (response.json()["video"]["likes"], response.json()["video"]["dislikes"]) == (0, 1)

    response = client.post(f"/videos/{video.id}/dislike", headers=headers)
    assert response.json()["message"] == "Dislike removed"
    assert (response.json()["video"]["likes"], response.json()["video"]["dislikes"]) == (0, 0)


def test_like_requires_auth(client, create_video):
    video = create_video()

    response = client.post(f"/videos/{video.id}/like")
    assert response.status_code == 401
    assert response.json()["message"] == "Could not validate credentials"

    response = client.post(f"/videos/{video.id}/like", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_like_missing_video(client, create_user, auth_headers):
    response = client.post("/videos/999/like", headers=auth_headers(create_user()))

    assert response.status_code == 404
    assert response.json() == {"message": "Video not found"}


def test_video_like_status(client, create_user, create_video, auth_headers):
    headers = auth_headers(create_user())
    video = create_video()

    response = client.get(f"/videos/{video.id}/like-status", headers=headers)
    assert response.json() == {"liked": False, "disliked": False}

    client.post(f"/videos/{video.id}/dislike", headers=headers)
    response = client.get(f"/videos/{video.id}/like-status", headers=headers)
    assert response.json() == {"liked": False, "disliked": True}

    client.post(f"/videos/{video.id}/like", headers=headers)
    response = client.get(f"/videos/{video.id}/like-status", headers=headers)
    assert response.json() == {"liked": True, "disliked": False}


def test_like_status_missing_video(client, create_user, auth_headers):
    response = client.get("/videos/999/like-status", headers=auth_headers(create_user()))
    assert response.status_code == 404


def test_comment_reactions(client, create_user, create_comment, auth_headers):
    headers = auth_headers(create_user())
    comment = create_comment()

    response = client.post(f"/comments/{comment.id}/dislike", headers=headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Comment disliked"
    assert response.json()["comment"]["dislikes"] == 1

    response = client.post(f"/comments/{comment.id}/like", headers=headers)
    assert response.json()["message"] == "Changed dislike to like"
    assert (response.json()["comment"]["likes"], response.json()["comment"]["dislikes"]) == (1, 0)

    response = client.get(f"/comments/{comment.id}/like-status", headers=headers)
    assert response.json() == {"liked": True, "disliked": False}

    response = client.post(f"/comments/{comment.id}/like", headers=headers)
    assert response.json()["message"] == "Like removed"


def test_comment_reaction_missing_comment(client, create_user, auth_headers):
    response = client.post("/comments/999/like", headers=auth_headers(create_user()))

    assert response.status_code == 404
    assert response.json() == {"message": "Comment not found"}


def test_reactions_from_two_users(client, create_user, create_video, auth_headers):
    video = create_video()
    alice, bob = create_user(), create_user()

    client.post(f"/videos/{video.id}/like", headers=auth_headers(alice))
    response = client.post(f"/videos/{video.id}/dislike", headers=auth_headers(bob))

    assert response.json()["video"]["likes"] == 1
    assert response.json()["video"]["dislikes"] == 1

    response = client.get(f"/videos/{video.id}/like-status", headers=auth_headers(bob))
    assert response.json() == {"liked": False, "disliked": True}
