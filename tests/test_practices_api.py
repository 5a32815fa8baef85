"""API tests for permit-practice requests, engineer claims and the quote lifecycle."""

import unittest
from datetime import timedelta

from designhub.models import Notification, PracticeRequest, RefreshToken, User
from designhub.models.base import as_utc, utcnow

from api_support import ApiTestCase, bearer

PRACTICE_BODY = {
    "type": "scia",
    "propertyType": "Villa",
    "size": 180.5,
    "location": "Firenze",
    "isVincolato": True,
    "contactName": "Giulia",
    "contactEmail": "giulia@example.com",
}


class TestSubmitRequest(ApiTestCase):
    def test_anonymous_submission(self) -> None:
        response = self.client.post("/api/practices/requests", json=PRACTICE_BODY)
        self.assertEqual(response.status_code, 201, response.text)
        data = response.json()
        self.assertEqual(data["type"], "SCIA")
        self.assertEqual(data["status"], "PENDING_QUOTE")
        self.assertIsNone(data["userId"])
        self.assertIsNone(data["engineerId"])
        self.assertTrue(data["isVincolato"])
        self.assertFalse(data["hasOldPermits"])

    def test_authenticated_submission_is_owned(self) -> None:
        user = self.register("owner@example.com")
        response = self.client.post(
            "/api/practices/requests", json=PRACTICE_BODY, headers=bearer(user["accessToken"])
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["userId"], user["user"]["id"])

    def test_invalid_token_submits_anonymously(self) -> None:
        response = self.client.post(
            "/api/practices/requests", json=PRACTICE_BODY, headers=bearer("garbage")
        )
        self.assertEqual(response.status_code, 201)
        self.assertIsNone(response.json()["userId"])

    def test_missing_fields(self) -> None:
        response = self.client.post("/api/practices/requests", json={"type": "CILA"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Missing required fields"})

    def test_files_attached_for_owner(self) -> None:
        user = self.register("files@example.com")
        headers = bearer(user["accessToken"])
        file_id = self.client.post(
            "/api/upload", params={"filename": "planimetria.pdf"}, content=b"%PDF", headers=headers
        ).json()["file"]["id"]

        response = self.client.post(
            "/api/practices/requests", json={**PRACTICE_BODY, "fileIds": [file_id]}, headers=headers
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual([f["id"] for f in response.json()["files"]], [file_id])

    def test_deleted_account_submits_anonymously(self) -> None:
        user = self.register("gone@example.com")
        with self.session() as db:
            db.query(RefreshToken).delete()
            db.query(User).delete()
            db.commit()
        response = self.client.post(
            "/api/practices/requests", json=PRACTICE_BODY, headers=bearer(user["accessToken"])
        )
        self.assertEqual(response.status_code, 201, response.text)
        self.assertIsNone(response.json()["userId"])


class TestListRequests(ApiTestCase):
    def test_lists_only_callers_requests(self) -> None:
        mine = self.register("mine@example.com")
        other = self.register("other@example.com")
        self.create_practice(user_id=mine["user"]["id"], location="Torino")
        self.create_practice(user_id=other["user"]["id"])
        self.create_practice()

        response = self.client.get("/api/practices/requests", headers=bearer(mine["accessToken"]))
        self.assertEqual(response.status_code, 200)
        requests = response.json()["requests"]
        self.assertEqual(len(requests), 1)
        self.assertEqual(requests[0]["location"], "Torino")

    def test_requires_auth(self) -> None:
        self.assertEqual(self.client.get("/api/practices/requests").status_code, 401)


class TestClaimRequest(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.requester = self.register("req@example.com")
        self.engineer = self.register("eng@example.com", name="Eng One", role="ENGINEER")
        self.practice_id = self.create_practice(user_id=self.requester["user"]["id"])

    def _claim(self, token: str, practice_id: int | None = None):
        return self.client.post(
            f"/api/practices/{practice_id or self.practice_id}/claim", headers=bearer(token)
        )

    def test_claim(self) -> None:
        response = self._claim(self.engineer["accessToken"])
        self.assertEqual(response.status_code, 200, response.text)
        data = response.json()
        self.assertEqual(data["engineerId"], self.engineer["user"]["id"])
        self.assertEqual(data["engineer"]["name"], "Eng One")
        self.assertEqual(data["status"], "PENDING_QUOTE")

        with self.session() as db:
            note = (
                db.query(Notification)
                .filter(Notification.user_id == self.requester["user"]["id"])
                .one()
            )
            self.assertEqual(note.type, "PRACTICE_CLAIMED")
            self.assertIn("Eng One", note.message)

    def test_admin_can_claim(self) -> None:
        admin = self.register("admin@example.com", role="ADMIN")
        self.assertEqual(self._claim(admin["accessToken"]).status_code, 200)

    def test_second_claim_keeps_first_assignment(self) -> None:
        rival = self.register("rival@example.com", role="ENGINEER")
        self.assertEqual(self._claim(self.engineer["accessToken"]).status_code, 200)

        response = self._claim(rival["accessToken"])
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json(), {"error": "This practice request has already been claimed"}
        )
        with self.session() as db:
            practice = db.get(PracticeRequest, self.practice_id)
            self.assertEqual(practice.engineer_id, self.engineer["user"]["id"])

    def test_not_pending_quote(self) -> None:
        quoted_id = self.create_practice(status="QUOTE_SENT")
        response = self._claim(self.engineer["accessToken"], quoted_id)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "This practice request cannot be claimed"})

    def test_missing_request(self) -> None:
        response = self._claim(self.engineer["accessToken"], 999)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Practice request not found"})

    def test_client_forbidden(self) -> None:
        response = self._claim(self.requester["accessToken"])
        self.assertEqual(response.status_code, 403)
        with self.session() as db:
            self.assertIsNone(db.get(PracticeRequest, self.practice_id).engineer_id)

    def test_anonymous_request_claim_sends_no_notification(self) -> None:
        anonymous_id = self.create_practice()
        self.assertEqual(self._claim(self.engineer["accessToken"], anonymous_id).status_code, 200)
        with self.session() as db:
            self.assertEqual(db.query(Notification).count(), 0)


class TestReadRequest(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.requester = self.register("req@example.com")
        self.engineer = self.register("eng@example.com", role="ENGINEER")
        self.practice_id = self.create_practice(
            user_id=self.requester["user"]["id"], engineer_id=self.engineer["user"]["id"]
        )

    def _read(self, token: str | None = None):
        headers = bearer(token) if token else {}
        return self.client.get(f"/api/practices/{self.practice_id}", headers=headers)

    def test_full_detail_for_involved_users(self) -> None:
        admin = self.register("admin@example.com", role="ADMIN")
        for token in (
            self.requester["accessToken"],
            self.engineer["accessToken"],
            admin["accessToken"],
        ):
            response = self._read(token)
            self.assertEqual(response.status_code, 200, response.text)
            data = response.json()
            self.assertEqual(data["contactEmail"], "mario@example.com")
            self.assertEqual(data["progressPercent"], 0)
            self.assertEqual(data["engineer"]["id"], self.engineer["user"]["id"])

    def test_summary_for_everyone_else(self) -> None:
        stranger = self.register("stranger@example.com", role="ENGINEER")
        expected = {
            "id": self.practice_id,
            "type": "CILA",
            "propertyType": "Apartment",
            "location": "Roma",
            "status": "PENDING_QUOTE",
        }
        self.assertEqual(self._read().json(), expected)
        self.assertEqual(self._read("garbage").json(), expected)
        self.assertEqual(self._read(stranger["accessToken"]).json(), expected)

    def test_missing_request(self) -> None:
        response = self.client.get("/api/practices/999")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Practice request not found"})


class TestPracticeLifecycle(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.requester = self.register("req@example.com")
        self.engineer = self.register("eng@example.com", name="Eng One", role="ENGINEER")
        self.practice_id = self.create_practice(user_id=self.requester["user"]["id"])
        claimed = self.client.post(
            f"/api/practices/{self.practice_id}/claim",
            headers=bearer(self.engineer["accessToken"]),
        )
        self.assertEqual(claimed.status_code, 200, claimed.text)

    def _act(self, token: str, action: str, **fields):
        return self.client.put(
            f"/api/practices/{self.practice_id}",
            headers=bearer(token),
            json={"action": action, **fields},
        )

    def _engineer(self, action: str, **fields):
        return self._act(self.engineer["accessToken"], action, **fields)

    def _requester(self, action: str, **fields):
        return self._act(self.requester["accessToken"], action, **fields)

    def _notifications(self, user: dict) -> list[str]:
        with self.session() as db:
            rows = (
                db.query(Notification)
                .filter(Notification.user_id == user["user"]["id"])
                .order_by(Notification.id)
                .all()
            )
            return [n.type for n in rows]

    def test_full_lifecycle(self) -> None:
        quote = self._engineer(
            "send-quote", quoteAmount=1200, quoteValidDays=15, quoteNotes="  incl. VAT  "
        )
        self.assertEqual(quote.status_code, 200, quote.text)
        self.assertEqual(quote.json()["status"], "QUOTE_SENT")
        self.assertEqual(quote.json()["quoteAmount"], 1200)
        self.assertEqual(quote.json()["quoteNotes"], "incl. VAT")
        with self.session() as db:
            valid_until = as_utc(db.get(PracticeRequest, self.practice_id).quote_valid_until)
            self.assertAlmostEqual(
                (valid_until - utcnow()).total_seconds(),
                timedelta(days=15).total_seconds(),
                delta=60,
            )

        self.assertEqual(self._requester("accept-quote").json()["status"], "ACCEPTED")
        self.assertEqual(self._engineer("start-work").json()["status"], "IN_PROGRESS")

        progress = self._engineer("update-progress", progressPercent=140, progressNotes=" walls ")
        self.assertEqual(progress.json()["progressPercent"], 100)
        self.assertEqual(progress.json()["progressNotes"], "walls")
        self.assertEqual(
            self._engineer("update-progress", progressPercent=-5).json()["progressPercent"], 0
        )

        done = self._engineer("complete")
        self.assertEqual(done.status_code, 200)
        self.assertEqual(done.json()["status"], "COMPLETED")
        self.assertEqual(done.json()["progressPercent"], 100)
        self.assertIsNotNone(done.json()["completedAt"])

        self.assertEqual(
            self._notifications(self.requester),
            [
                "PRACTICE_CLAIMED",
                "PRACTICE_QUOTE",
                "PRACTICE_UPDATE",
                "PRACTICE_UPDATE",
                "PRACTICE_UPDATE",
                "PRACTICE_COMPLETED",
            ],
        )
        self.assertEqual(self._notifications(self.engineer), ["PRACTICE_UPDATE"])

    def test_reject_quote_releases_request(self) -> None:
        self._engineer("send-quote", quoteAmount=900)
        response = self._requester("reject-quote")
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["status"], "PENDING_QUOTE")
        self.assertIsNone(data["engineerId"])
        self.assertIsNone(data["quoteAmount"])
        self.assertIsNone(data["quoteValidUntil"])

        rival = self.register("rival@example.com", role="ENGINEER")
        claim = self.client.post(
            f"/api/practices/{self.practice_id}/claim", headers=bearer(rival["accessToken"])
        )
        self.assertEqual(claim.status_code, 200)

    def test_invalid_quote_amount(self) -> None:
        for amount in (None, 0, -10):
            with self.subTest(amount=amount):
                response = self._engineer("send-quote", quoteAmount=amount)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json(), {"error": "Invalid quote amount"})

    def test_out_of_order_steps(self) -> None:
        cases = [
            (self._requester, "accept-quote", "There is no quote to accept"),
            (self._requester, "reject-quote", "There is no quote to reject"),
            (self._engineer, "start-work", "The quote must be accepted first"),
            (self._engineer, "update-progress", "This practice request is not in progress"),
            (self._engineer, "complete", "This practice request is not in progress"),
        ]
        for act, action, message in cases:
            with self.subTest(action=action):
                response = act(action)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json(), {"error": message})

        self._engineer("send-quote", quoteAmount=500)
        self._requester("accept-quote")
        response = self._engineer("send-quote", quoteAmount=400)
        self.assertEqual(response.json(), {"error": "The quote can no longer be changed"})

    def test_roles_are_enforced(self) -> None:
        stranger = self.register("stranger@example.com", role="ENGINEER")
        admin = self.register("admin@example.com", role="ADMIN")

        for token, action in (
            (stranger["accessToken"], "send-quote"),
            (self.requester["accessToken"], "send-quote"),
            (self.engineer["accessToken"], "accept-quote"),
            (admin["accessToken"], "accept-quote"),
        ):
            with self.subTest(action=action):
                response = self._act(token, action, quoteAmount=100)
                self.assertEqual(response.status_code, 403)
                self.assertEqual(response.json(), {"error": "Not authorized"})

        admin_quote = self._act(admin["accessToken"], "send-quote", quoteAmount=100)
        self.assertEqual(admin_quote.status_code, 200)

    def test_invalid_action(self) -> None:
        response = self._engineer("archive")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid action"})

    def test_requires_auth_and_existing_request(self) -> None:
        anonymous = self.client.put(
            f"/api/practices/{self.practice_id}", json={"action": "complete"}
        )
        self.assertEqual(anonymous.status_code, 401)
        missing = self.client.put(
            "/api/practices/999",
            headers=bearer(self.engineer["accessToken"]),
            json={"action": "complete"},
        )
        self.assertEqual(missing.status_code, 404)


if __name__ == "__main__":
    unittest.main()
