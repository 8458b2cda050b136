"""HTTP surface of the scheduling domain."""

from datetime import datetime

import pytest

DAY = datetime(2026, 11, 14)


def at(hour, minute=0):
    return DAY.replace(hour=hour, minute=minute).isoformat()


def as_user(user_id):
    return {"X-User-Id": user_id}


@pytest.fixture
def base(group, event):
    return f"/groups/{group.id}/events/{event.id}"


def post_ranges(client, base, user_id, ranges):
    body = [{"availableFrom": start, "availableTo": end} for start, end in ranges]
    return client.post(f"{base}/availability-range", json=body, headers=as_user(user_id))


class TestAccess:
    def test_missing_identity_is_unauthorized(self, client, base):
        response = client.get(f"{base}/suggestions")
        assert response.status_code == 401

    def test_non_member_is_forbidden(self, client, base, other_group):
        response = client.get(f"{base}/suggestions", headers=as_user("erin"))
        assert response.status_code == 403

    def test_pending_member_is_forbidden(self, client, base):
        response = post_ranges(client, base, "dave", [(at(9), at(10))])
        assert response.status_code == 403

    def test_event_in_another_group_is_not_found(self, client, other_group, event):
        response = client.get(
            f"/groups/{other_group.id}/events/{event.id}/suggestions", headers=as_user("erin")
        )
        assert response.status_code == 404
        assert response.json() == {"detail": "Event not found."}

    def test_malformed_event_id_is_not_found(self, client, group):
        response = client.get(f"/groups/{group.id}/events/nope/suggestions", headers=as_user("alice"))
        assert response.status_code == 404


class TestSubmitAvailability:
    def test_first_submission(self, client, base):
        response = post_ranges(client, base, "alice", [(at(14), at(15)), (at(9), at(10))])

        assert response.status_code == 200
        payload = response.json()
        assert payload["status"] == "awaiting_availability"
        assert payload["suggestionsGenerated"] is False
        assert [r["availableFrom"] for r in payload["ranges"]] == [at(9), at(14)]

    def test_offsets_are_stored_as_utc(self, client, base):
        response = post_ranges(
            client, base, "alice", [("2026-11-14T11:00:00+02:00", "2026-11-14T12:00:00+02:00")]
        )

        assert response.status_code == 200
        assert response.json()["ranges"][0]["availableFrom"] == at(9)

    def test_zero_length_range_is_bad_request(self, client, base):
        response = post_ranges(client, base, "alice", [(at(10), at(10))])

        assert response.status_code == 400
        assert response.json() == {"detail": "AvailableTo must be later than AvailableFrom."}

    def test_overlapping_ranges_are_bad_request(self, client, base):
        response = post_ranges(client, base, "alice", [(at(9), at(11)), (at(10), at(12))])

        assert response.status_code == 400
        assert "overlap" in response.json()["detail"]

    def test_out_of_bound_range_is_bad_request(self, client, group, bounded_event):
        base = f"/groups/{group.id}/events/{bounded_event.id}"
        response = post_ranges(client, base, "alice", [(at(8), at(10))])

        assert response.status_code == 400
        assert response.json() == {"detail": "Availability range outside event range."}

    def test_empty_body_is_bad_request(self, client, base):
        response = client.post(f"{base}/availability-range", json=[], headers=as_user("alice"))
        assert response.status_code == 400

    def test_malformed_body_is_unprocessable(self, client, base):
        response = client.post(
            f"{base}/availability-range", json=[{"availableFrom": at(9)}], headers=as_user("alice")
        )
        assert response.status_code == 422

    def test_list_and_delete(self, client, base):
        post_ranges(client, base, "alice", [(at(9), at(10))])
        post_ranges(client, base, "bob", [(at(11), at(12))])

        listed = client.get(f"{base}/availability-range", headers=as_user("alice")).json()
        assert [(r["userId"], r["availableFrom"]) for r in listed] == [
            ("alice", at(9)),
            ("bob", at(11)),
        ]

        deleted = client.delete(f"{base}/availability-range", headers=as_user("alice"))
        assert deleted.json() == {
            "message": "Availability ranges deleted successfully.",
            "deletedCount": 1,
        }
        again = client.delete(f"{base}/availability-range", headers=as_user("alice"))
        assert again.json()["deletedCount"] == 0


class TestSchedulingFlow:
    def test_everyone_submits_then_best_date_is_chosen(self, client, base):
        post_ranges(client, base, "alice", [(at(10), at(12))])
        response = post_ranges(client, base, "bob", [(at(11), at(13))])

        payload = response.json()
        assert payload["status"] == "suggested"
        assert payload["suggestionsGenerated"] is True

        suggestions = client.get(f"{base}/suggestions", headers=as_user("alice")).json()
        assert [(s["startTime"], s["endTime"], s["score"]) for s in suggestions] == [
            (at(11), at(12), 2),
            (at(10), at(11), 1),
        ]

        chosen = client.post(
            f"{base}/{suggestions[0]['id']}/choose-best-date", headers=as_user("alice")
        )
        assert chosen.status_code == 200
        assert chosen.json()["startDate"] == at(11)
        assert chosen.json()["endDate"] == at(12)

        assert client.get(f"{base}/suggestions", headers=as_user("bob")).json() == []

        status = client.get(f"{base}/scheduling-status", headers=as_user("bob")).json()
        assert status["status"] == "scheduled"
        assert status["startDate"] == at(11)
        assert status["isAutoScheduled"] is False

    def test_unknown_suggestion_is_not_found(self, client, base):
        response = client.post(
            f"{base}/00000000-0000-0000-0000-000000000000/choose-best-date",
            headers=as_user("alice"),
        )
        assert response.status_code == 404
        assert response.json() == {"detail": "Suggestion not found."}

    def test_calculate_best_date_on_demand(self, client, base):
        post_ranges(client, base, "alice", [(at(10), at(12))])

        response = client.post(f"{base}/calculate-best-date", headers=as_user("bob"))

        assert response.status_code == 200
        assert [(s["startTime"], s["score"]) for s in response.json()] == [(at(10), 1)]

    def test_calculate_best_date_after_scheduling_conflicts(self, client, base):
        post_ranges(client, base, "alice", [(at(10), at(12))])
        post_ranges(client, base, "bob", [(at(11), at(13))])
        best = client.get(f"{base}/suggestions", headers=as_user("alice")).json()[0]
        client.post(f"{base}/{best['id']}/choose-best-date", headers=as_user("alice"))

        response = client.post(f"{base}/calculate-best-date", headers=as_user("alice"))

        assert response.status_code == 409

    def test_status_lists_pending_members(self, client, base):
        post_ranges(client, base, "alice", [(at(10), at(12))])

        status = client.get(f"{base}/scheduling-status", headers=as_user("alice")).json()

        assert status["status"] == "awaiting_availability"
        assert status["submittedUserIds"] == ["alice"]
        assert status["pendingUserIds"] == ["bob"]
        assert status["durationMinutes"] == 60


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
