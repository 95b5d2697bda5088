"""Tests for the /api/users endpoints."""

JPEG = b"\xff\xd8\xff\xe0fake-jpeg"


class TestOwnProfile:
    async def test_get_me(self, client, user_with_token):
        account, headers = user_with_token

        response = await client.get("/api/users/me", headers=headers)

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["id"] == account.id
        assert user["phone"].startswith("+56 9 ")

    async def test_requires_token(self, client):
        response = await client.get("/api/users/me")

        assert response.status_code == 401

    async def test_update_me(self, client, user_with_token):
        _, headers = user_with_token

        response = await client.put(
            "/api/users/me",
            headers=headers,
            json={"city": "Valparaiso", "phone": "912345678", "bio": "Busco pieza"},
        )

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["city"] == "Valparaiso"
        assert user["phone"] == "+56 9 1234 5678"
        assert user["bio"] == "Busco pieza"

    async def test_update_cannot_change_email_or_role(self, client, user_with_token):
        account, headers = user_with_token

        response = await client.put(
            "/api/users/me",
            headers=headers,
            json={"email": "new@roomhub.cl", "role": "admin", "bio": "Hola"},
        )

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["email"] == account.email
        assert user["role"] == "seeker"

    async def test_update_invalid_name(self, client, user_with_token):
        _, headers = user_with_token

        response = await client.put("/api/users/me", headers=headers, json={"name": "A"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_update_to_taken_phone(self, client, create_user, user_with_token):
        create_user(phone="912345678")
        _, headers = user_with_token

        response = await client.put("/api/users/me", headers=headers, json={"phone": "912345678"})

        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_PHONE"


class TestProfilePhoto:
    async def test_upload(self, client, user_with_token, image_storage):
        _, headers = user_with_token

        response = await client.post(
            "/api/users/me/photo",
            headers=headers,
            files={"profile_photo": ("me.jpg", JPEG, "image/jpeg")},
        )

        assert response.status_code == 200
        url = response.json()["user"]["profile_photo"]
        assert image_storage.stored[url] == JPEG

    async def test_replace_deletes_previous(self, client, user_with_token, image_storage):
        _, headers = user_with_token
        files = {"profile_photo": ("me.png", JPEG, "image/png")}
        first = await client.post("/api/users/me/photo", headers=headers, files=files)

        await client.post("/api/users/me/photo", headers=headers, files=files)

        assert image_storage.deleted == [first.json()["user"]["profile_photo"]]

    async def test_rejects_wrong_type(self, client, user_with_token):
        _, headers = user_with_token

        response = await client.post(
            "/api/users/me/photo",
            headers=headers,
            files={"profile_photo": ("me.gif", b"GIF89a", "image/gif")},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "UPLOAD_ERROR"

    async def test_missing_file(self, client, user_with_token):
        _, headers = user_with_token

        response = await client.post("/api/users/me/photo", headers=headers)

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_delete(self, client, user_with_token, image_storage):
        _, headers = user_with_token
        uploaded = await client.post(
            "/api/users/me/photo",
            headers=headers,
            files={"profile_photo": ("me.jpg", JPEG, "image/jpeg")},
        )

        response = await client.delete("/api/users/me/photo", headers=headers)

        assert response.status_code == 200
        assert response.json()["user"]["profile_photo"] == ""
        assert image_storage.deleted == [uploaded.json()["user"]["profile_photo"]]


class TestPublicProfile:
    async def test_public_fields_only(self, client, create_user, user_with_token):
        other = create_user(bio="Anfitrion tranquilo")
        _, headers = user_with_token

        response = await client.get(f"/api/users/{other.id}", headers=headers)

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["id"] == other.id
        assert user["bio"] == "Anfitrion tranquilo"
        assert "email" not in user
        assert "phone" not in user

    async def test_requires_verified_email(self, client, create_user, auth_headers):
        other = create_user()
        viewer = create_user(verified=False)

        response = await client.get(f"/api/users/{other.id}", headers=auth_headers(viewer))

        assert response.status_code == 403
        body = response.json()
        assert body["code"] == "FORBIDDEN"
        assert body["details"] == [{"requires_email_verification": True}]

    async def test_unknown_account(self, client, user_with_token):
        _, headers = user_with_token

        response = await client.get("/api/users/9999", headers=headers)

        assert response.status_code == 404
