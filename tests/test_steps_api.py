from auth.policy import NOT_YOUR_RECORD

ALICE_STEP = {"userId": "alice", "name": "Alice", "steps": 500, "stepsDate": "2024-01-01"}


def create_step(client, headers, **overrides):
    body = {**ALICE_STEP, **overrides}
    r = client.post("/steps", headers=headers, json=body)
    assert r.status_code == 201, r.text
    return r.json()


def test_create_then_fetch_round_trip(client, alice):
    created = create_step(client, alice)

    r = client.get(f"/steps/{created['id']}", headers=alice)
    assert r.status_code == 200
    data = r.json()
    assert data["userId"] == "alice"
    assert data["name"] == "Alice"
    assert data["steps"] == 500
    assert data["stepsDate"] == "2024-01-01"


def test_create_sets_location_header(client, alice):
    r = client.post("/steps", headers=alice, json=ALICE_STEP)
    assert r.status_code == 201
    assert r.headers["location"] == f"/steps/{r.json()['id']}"


def test_create_without_user_id_is_owned_by_caller(client, bob):
    r = client.post("/steps", headers=bob, json={"name": "Bob", "steps": 20, "stepsDate": "2024-02-02"})
    assert r.status_code == 201
    assert r.json()["userId"] == "bob"


def test_create_for_someone_else_is_forbidden(client, bob, steps_table):
    r = client.post("/steps", headers=bob, json=ALICE_STEP)
    assert r.status_code == 403
    assert r.json()["detail"] == NOT_YOUR_RECORD
    assert steps_table.rows == {}


def test_requests_without_token_are_rejected(client):
    assert client.get("/steps").status_code == 401
    assert client.get("/steps/1").status_code == 401
    assert client.post("/steps", json=ALICE_STEP).status_code == 401
    assert client.patch("/steps/1", json={"steps": 1}).status_code == 401
    assert client.delete("/steps/1").status_code == 401


def test_any_caller_can_read_any_step(client, alice, bob):
    created = create_step(client, alice)

    r = client.get(f"/steps/{created['id']}", headers=bob)
    assert r.status_code == 200
    assert r.json()["userId"] == "alice"

    r = client.get("/steps", headers=bob)
    assert r.status_code == 200
    assert [s["id"] for s in r.json()] == [created["id"]]


def test_owner_can_update(client, alice):
    created = create_step(client, alice)

    r = client.patch(f"/steps/{created['id']}", headers=alice, json={"steps": 750})
    assert r.status_code == 200
    assert r.json()["steps"] == 750
    assert r.json()["stepsDate"] == "2024-01-01"


def test_put_is_a_partial_update(client, alice):
    created = create_step(client, alice)

    r = client.put(f"/steps/{created['id']}", headers=alice, json={"name": "Alice L."})
    assert r.status_code == 200
    assert r.json()["name"] == "Alice L."
    assert r.json()["steps"] == 500


def test_other_caller_cannot_update(client, alice, bob):
    created = create_step(client, alice)

    r = client.patch(f"/steps/{created['id']}", headers=bob, json={"steps": 1})
    assert r.status_code == 403
    assert r.json()["detail"] == NOT_YOUR_RECORD

    r = client.get(f"/steps/{created['id']}", headers=alice)
    assert r.json()["steps"] == 500


def test_owner_cannot_hand_record_to_someone_else(client, alice):
    created = create_step(client, alice)

    r = client.patch(f"/steps/{created['id']}", headers=alice, json={"userId": "bob"})
    assert r.status_code == 403
    assert r.json()["detail"] == NOT_YOUR_RECORD


def test_other_caller_cannot_delete(client, alice, bob, steps_table):
    created = create_step(client, alice)

    r = client.delete(f"/steps/{created['id']}", headers=bob)
    assert r.status_code == 403
    assert r.json()["detail"] == NOT_YOUR_RECORD
    assert created["id"] in steps_table.rows


def test_owner_can_delete(client, alice):
    created = create_step(client, alice)

    r = client.delete(f"/steps/{created['id']}", headers=alice)
    assert r.status_code == 200
    assert r.json() == {}
    assert client.get(f"/steps/{created['id']}", headers=alice).status_code == 404


def test_missing_step_is_not_found(client, alice):
    assert client.get("/steps/999", headers=alice).status_code == 404
    assert client.patch("/steps/999", headers=alice, json={"steps": 1}).status_code == 404
    assert client.delete("/steps/999", headers=alice).status_code == 404


def test_invalid_body_is_rejected(client, alice):
    r = client.post("/steps", headers=alice, json={"steps": "many", "stepsDate": "2024-01-01"})
    assert r.status_code == 422


def test_values_outside_integer_column_range_are_rejected(client, alice, steps_table):
    r = client.post("/steps", headers=alice, json={"steps": 2**40, "stepsDate": "2024-01-01"})
    assert r.status_code == 422
    assert steps_table.rows == {}

    assert client.get(f"/steps/{2**40}", headers=alice).status_code == 422
    assert client.delete(f"/steps/{-(2**40)}", headers=alice).status_code == 422


def test_list_paginates_with_content_range(client, alice):
    for day in range(1, 6):
        create_step(client, alice, steps=day * 100, stepsDate=f"2024-01-0{day}")

    r = client.get("/steps", headers=alice, params={"offset": 1, "count": 2})
    assert r.status_code == 200
    assert [s["steps"] for s in r.json()] == [200, 300]
    assert r.headers["content-range"] == "items 1-2/5"

    r = client.get("/steps", headers=alice, params={"offset": 10})
    assert r.json() == []
    assert r.headers["content-range"] == "items */5"


def test_list_sorts_and_filters(client, alice, bob):
    create_step(client, alice, steps=300, stepsDate="2024-01-01")
    create_step(client, alice, steps=100, stepsDate="2024-01-02")
    create_step(client, bob, userId="bob", name="Bob", steps=200, stepsDate="2024-01-01")

    r = client.get("/steps", headers=alice, params={"sort": "-steps"})
    assert [s["steps"] for s in r.json()] == [300, 200, 100]

    r = client.get("/steps", headers=alice, params={"userId": "alice", "sort": "steps"})
    assert [s["steps"] for s in r.json()] == [100, 300]

    r = client.get("/steps", headers=alice, params={"stepsDate": "2024-01-01"})
    assert sorted(s["userId"] for s in r.json()) == ["alice", "bob"]

    r = client.get("/steps", headers=alice, params={"q": "bo"})
    assert [s["name"] for s in r.json()] == ["Bob"]


def test_list_rejects_bad_parameters(client, alice):
    r = client.get("/steps", headers=alice, params={"sort": "password"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Sorting not allowed on: password."

    r = client.get("/steps", headers=alice, params={"stepsDate": "yesterday"})
    assert r.status_code == 400

    r = client.get("/steps", headers=alice, params={"count": 5000})
    assert r.status_code == 422
