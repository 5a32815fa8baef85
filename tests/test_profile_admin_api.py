"""API tests for profile, notifications, admin stats, health and the error envelope."""

import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from designhub.models import Notification, RefreshToken, User

from api_support import ApiTestCase, bearer


class TestProfile(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = self.register("me@example.com", name="Me")
        self.headers = bearer(self.user["accessToken"])

    def test_profile_counts(self) -> None:
        user_id = self.user["user"]["id"]
        self.create_contest(user_id)
        self.create_contest(user_id)
        self.create_practice(user_id=user_id)

        response = self.client.get("/api/user/profile", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["email"], "me@example.com")
        self.assertEqual(data["_count"], {"contests": 2, "proposals": 0, "practiceRequests": 1})
        self.assertNotIn("passwordHash", data)

    def test_partial_update(self) -> None:
        response = self.client.put(
            "/api/user/profile",
            headers=self.headers,
            json={"name": "Renamed", "bio": "Architect", "phone": "+39 333"},
        )
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["name"], "Renamed")

        cleared = self.client.put("/api/user/profile", headers=self.headers, json={"bio": None})
        data = cleared.json()
        self.assertIsNone(data["bio"])
        self.assertEqual(data["phone"], "+39 333")
        self.assertEqual(data["name"], "Renamed")

    def test_password_change(self) -> None:
        self.client.put("/api/user/profile", headers=self.headers, json={"password": "n3w-pass"})
        old = self.client.post(
            "/api/auth/login", json={"email": "me@example.com", "password": "correct-horse-battery"}
        )
        new = self.client.post(
            "/api/auth/login", json={"email": "me@example.com", "password": "n3w-pass"}
        )
        self.assertEqual(old.status_code, 401)
        self.assertEqual(new.status_code, 200)

    def test_deleted_account(self) -> None:
        with self.session() as db:
            db.query(RefreshToken).delete()
            db.query(User).delete()
            db.commit()
        response = self.client.get("/api/user/profile", headers=self.headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "User not found"})


class TestNotifications(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = self.register("inbox@example.com")
        self.other = self.register("other@example.com")
        self.headers = bearer(self.user["accessToken"])
        with self.session() as db:
            for i, read in enumerate((False, False, True)):
                db.add(
                    Notification(
                        user_id=self.user["user"]["id"],
                        type="CONTEST_NEW_PROPOSAL",
                        title=f"Note {i}",
                        message="m",
                        read=read,
                    )
                )
            db.add(
                Notification(
                    user_id=self.other["user"]["id"],
                    type="PRACTICE_CLAIMED",
                    title="Not yours",
                    message="m",
                )
            )
            db.commit()

    def _action(self, **body):
        return self.client.put("/api/user/notifications", headers=self.headers, json=body)

    def _own_ids(self, *, unread: bool = False) -> list[int]:
        data = self.client.get("/api/user/notifications", headers=self.headers).json()
        return [n["id"] for n in data["notifications"] if not (unread and n["read"])]

    def test_list(self) -> None:
        data = self.client.get("/api/user/notifications", headers=self.headers).json()
        self.assertEqual(data["total"], 3)
        self.assertEqual(data["unreadCount"], 2)
        self.assertEqual(data["totalPages"], 1)
        self.assertNotIn("Not yours", [n["title"] for n in data["notifications"]])

        unread = self.client.get(
            "/api/user/notifications", headers=self.headers, params={"unreadOnly": "true"}
        ).json()
        self.assertEqual(unread["total"], 2)

    def test_mark_read(self) -> None:
        target = self._own_ids(unread=True)[0]
        response = self._action(action="mark-read", notificationId=target)
        self.assertEqual(response.json(), {"success": True, "updated": 1})
        data = self.client.get("/api/user/notifications", headers=self.headers).json()
        self.assertEqual(data["unreadCount"], 1)

    def test_mark_all_read(self) -> None:
        self.assertEqual(self._action(action="mark-all-read").json()["updated"], 2)
        with self.session() as db:
            self.assertEqual(
                db.query(Notification).filter(Notification.read.is_(False)).count(), 1
            )

    def test_delete_and_delete_all_read(self) -> None:
        target = self._own_ids(unread=True)[0]
        self.assertEqual(self._action(action="delete", notificationId=target).json(), {"success": True})
        self.assertEqual(self._action(action="delete-all-read").json()["deleted"], 1)
        self.assertEqual(len(self._own_ids()), 1)

    def test_cannot_touch_other_users_notifications(self) -> None:
        with self.session() as db:
            foreign = db.query(Notification).filter(Notification.title == "Not yours").one().id
        self.assertEqual(self._action(action="mark-read", notificationId=foreign).json()["updated"], 0)
        self._action(action="delete", notificationId=foreign)
        with self.session() as db:
            note = db.get(Notification, foreign)
            self.assertIsNotNone(note)
            self.assertFalse(note.read)

    def test_invalid_action(self) -> None:
        response = self._action(action="archive")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid action"})


class TestAdminStats(ApiTestCase):
    def test_stats(self) -> None:
        admin = self.register("admin@example.com", name="Admin", role="ADMIN")
        client = self.register("client@example.com", name="Client")
        self.register("eng@example.com", role="ENGINEER")
        self.create_contest(client["user"]["id"], title="Atrium")
        self.create_practice()

        response = self.client.get("/api/admin/stats", headers=bearer(admin["accessToken"]))
        self.assertEqual(response.status_code, 200, response.text)
        data = response.json()
        self.assertEqual(data["stats"]["totalUsers"], 3)
        self.assertEqual(data["stats"]["totalContests"], 1)
        self.assertEqual(data["stats"]["totalProposals"], 0)
        self.assertEqual(data["stats"]["totalPractices"], 1)
        self.assertEqual(data["stats"]["usersByRole"], {"ADMIN": 1, "CLIENT": 1, "ENGINEER": 1})
        self.assertEqual(data["stats"]["contestsByStatus"], {"OPEN": 1})
        self.assertEqual(len(data["recentUsers"]), 3)
        self.assertEqual(data["recentContests"][0]["client"]["name"], "Client")

    def test_non_admin_forbidden(self) -> None:
        client = self.register("client@example.com")
        response = self.client.get("/api/admin/stats", headers=bearer(client["accessToken"]))
        self.assertEqual(response.status_code, 403)

    def test_unexpected_error_envelope(self) -> None:
        admin = self.register("admin@example.com", role="ADMIN")
        client = TestClient(self.app, raise_server_exceptions=False)
        with patch(
            "designhub.api.v1.admin.get_admin_stats", side_effect=RuntimeError("db exploded")
        ):
            response = client.get("/api/admin/stats", headers=bearer(admin["accessToken"]))
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"], "Internal server error")


class TestAdminUsers(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin = self.register("admin@example.com", name="Admin", role="ADMIN")
        self.headers = bearer(self.admin["accessToken"])
        self.client_user = self.register("carla@example.com", name="Carla Client")
        self.engineer = self.register("enzo@example.com", name="Enzo", role="ENGINEER")

    def test_list_with_counts(self) -> None:
        self.create_contest(self.client_user["user"]["id"])
        self.create_practice(user_id=self.client_user["user"]["id"])

        response = self.client.get("/api/admin/users", headers=self.headers)
        self.assertEqual(response.status_code, 200, response.text)
        data = response.json()
        self.assertEqual(data["total"], 3)
        self.assertEqual(data["totalPages"], 1)
        self.assertEqual(
            [u["email"] for u in data["users"]],
            ["enzo@example.com", "carla@example.com", "admin@example.com"],
        )
        carla = data["users"][1]
        self.assertEqual(carla["_count"], {"contests": 1, "proposals": 0, "practiceRequests": 1})
        self.assertNotIn("passwordHash", carla)

    def test_filters_and_pagination(self) -> None:
        by_role = self.client.get(
            "/api/admin/users", headers=self.headers, params={"role": "engineer"}
        ).json()
        self.assertEqual([u["name"] for u in by_role["users"]], ["Enzo"])

        everyone = self.client.get(
            "/api/admin/users", headers=self.headers, params={"role": "all"}
        ).json()
        self.assertEqual(everyone["total"], 3)

        by_search = self.client.get(
            "/api/admin/users", headers=self.headers, params={"search": "CARLA"}
        ).json()
        self.assertEqual([u["name"] for u in by_search["users"]], ["Carla Client"])

        page = self.client.get(
            "/api/admin/users", headers=self.headers, params={"page": 2, "limit": 2}
        ).json()
        self.assertEqual(page["totalPages"], 2)
        self.assertEqual([u["name"] for u in page["users"]], ["Admin"])

    def test_update_role_and_name(self) -> None:
        user_id = self.client_user["user"]["id"]
        response = self.client.put(
            "/api/admin/users",
            headers=self.headers,
            json={"userId": user_id, "role": "engineer", "name": "Carla Eng"},
        )
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["role"], "ENGINEER")
        self.assertEqual(response.json()["name"], "Carla Eng")
        self.assertEqual(response.json()["email"], "carla@example.com")

        # The promoted user passes the engineer gate with the token issued before the change.
        practice_id = self.create_practice()
        claim = self.client.post(
            f"/api/practices/{practice_id}/claim",
            headers=bearer(self.client_user["accessToken"]),
        )
        self.assertEqual(claim.status_code, 200, claim.text)

    def test_update_errors(self) -> None:
        cases = [
            ({"role": "ADMIN"}, 400, "User ID required"),
            ({"userId": 999, "name": "Ghost"}, 404, "User not found"),
            ({"userId": self.engineer["user"]["id"], "role": "OWNER"}, 400, "Invalid role"),
            (
                {"userId": self.engineer["user"]["id"], "email": "carla@example.com"},
                400,
                "User already exists",
            ),
        ]
        for body, status_code, message in cases:
            with self.subTest(body=body):
                response = self.client.put("/api/admin/users", headers=self.headers, json=body)
                self.assertEqual(response.status_code, status_code)
                self.assertEqual(response.json(), {"error": message})
        with self.session() as db:
            engineer = db.get(User, self.engineer["user"]["id"])
            self.assertEqual(engineer.role, "ENGINEER")
            self.assertEqual(engineer.email, "enzo@example.com")

    def test_non_admin_forbidden(self) -> None:
        other = bearer(self.client_user["accessToken"])
        listing = self.client.get("/api/admin/users", headers=other)
        update = self.client.put(
            "/api/admin/users",
            headers=other,
            json={"userId": self.client_user["user"]["id"], "role": "ADMIN"},
        )
        self.assertEqual(listing.status_code, 403)
        self.assertEqual(listing.json(), {"error": "Admin access required"})
        self.assertEqual(update.status_code, 403)
        with self.session() as db:
            self.assertEqual(db.get(User, self.client_user["user"]["id"]).role, "CLIENT")


class TestHealth(ApiTestCase):
    def test_health(self) -> None:
        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(), {
                "status": "ok",
                "environment": "dev",
                "database": "connected",
                "storage": "memory",
            }
        )

    def test_root(self) -> None:
        self.assertEqual(self.client.get("/").json(), {"message": "DesignHub API"})

    def test_unknown_route(self) -> None:
        response = self.client.get("/api/nope")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Not Found"})


if __name__ == "__main__":
    unittest.main()
