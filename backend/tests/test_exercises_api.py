def bench(**overrides):
    body = {"date": "2024-01-01", "category": "Chest", "name": "Bench",
            "sets": [{"weight": 80, "reps": 10}]}
    body.update(overrides)
    return body

def create(client, body):
    r = client.post("/api/exercises", json=body)
    assert r.status_code == 201, r.text
    return r.json()["createdExercises"]

def test_post_single_object(client):
    r = client.post("/api/exercises", json=bench())
    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "Exercises created successfully."
    [ex] = body["createdExercises"]
    assert ex["id"] > 0
    assert {k: ex[k] for k in ("date", "category", "name")} == \
        {"date": "2024-01-01", "category": "Chest", "name": "Bench"}

def test_post_list_and_read_back(client):
    created = create(client, [
        bench(date="2024-01-01"),
        bench(date="2024-01-03", category="Legs", name="Squat",
              sets=[{"weight": 100, "reps": 5}, {"weight": 110, "reps": 3}]),
    ])
    r = client.get("/api/exercises")
    assert r.status_code == 200
    listed = r.json()
    assert [ex["id"] for ex in listed] == [created[1]["id"], created[0]["id"]]
    assert [(s["weight"], s["reps"]) for s in listed[0]["sets"]] == [(100, 5), (110, 3)]

def test_post_empty_list_is_400(client):
    r = client.post("/api/exercises", json=[])
    assert r.status_code == 400
    assert r.json()["kind"] == "ValidationError"

def test_post_batch_with_invalid_item_is_500_and_writes_nothing(client):
    r = client.post("/api/exercises", json=[
        bench(),
        {"date": "2024-01-01", "category": "Legs", "name": "", "sets": []},
    ])
    assert r.status_code == 500
    body = r.json()
    assert body["kind"] == "WriteFailed"
    assert body["failures"][0]["index"] == 1
    assert client.get("/api/exercises").json() == []

def test_list_filters_by_category_and_dates(client):
    create(client, [
        bench(date="2024-01-01"),
        bench(date="2024-02-01", category="Back", name="Row"),
        bench(date="2024-03-01"),
    ])
    r = client.get("/api/exercises", params={"category": "Chest", "date_from": "2024-02-15"})
    assert [ex["date"] for ex in r.json()] == ["2024-03-01"]

def test_get_one(client):
    [ex] = create(client, bench(sets=[{"weight": 0, "reps": 12}]))
    r = client.get(f"/api/exercises/{ex['id']}")
    assert r.status_code == 200
    assert [(s["weight"], s["reps"]) for s in r.json()["sets"]] == [(0, 12)]

def test_get_missing_is_404(client):
    r = client.get("/api/exercises/999999")
    assert r.status_code == 404
    assert r.json()["kind"] == "NotFound"

def test_put_replaces_sets(client):
    [ex] = create(client, bench(sets=[{"weight": 80, "reps": r} for r in (10, 8, 6)]))
    r = client.put(f"/api/exercises/{ex['id']}",
                   json=bench(sets=[{"weight": 0, "reps": 12}, {"weight": 0, "reps": 10}]))
    assert r.status_code == 200
    assert r.json() == {"message": "Exercise updated successfully."}
    sets = client.get(f"/api/exercises/{ex['id']}").json()["sets"]
    assert [(s["weight"], s["reps"]) for s in sets] == [(0, 12), (0, 10)]

def test_put_missing_fields_is_400(client):
    [ex] = create(client, bench())
    r = client.put(f"/api/exercises/{ex['id']}", json={"date": "2024-01-01", "sets": []})
    assert r.status_code == 400

def test_put_unknown_id_is_404(client):
    r = client.put("/api/exercises/999999", json=bench())
    assert r.status_code == 404

def test_delete_twice(client):
    [ex] = create(client, bench())
    r = client.delete(f"/api/exercises/{ex['id']}")
    assert r.status_code == 200
    assert r.json() == {"message": "Exercise deleted successfully."}
    assert client.delete(f"/api/exercises/{ex['id']}").status_code == 404

def test_post_count_too_large_is_json_write_failed(client):
    r = client.post("/api/exercises", json=bench(sets=[{"weight": 2**63, "reps": 1}]))
    assert r.status_code == 500
    body = r.json()
    assert body["kind"] == "WriteFailed"
    assert body["failures"][0]["setIndex"] == 0

def test_put_count_too_large_is_400(client):
    [ex] = create(client, bench())
    r = client.put(f"/api/exercises/{ex['id']}", json=bench(sets=[{"weight": 10, "reps": 2**31}]))
    assert r.status_code == 400
    assert r.json()["kind"] == "ValidationError"
