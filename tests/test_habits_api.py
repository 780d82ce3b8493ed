from datetime import date, timedelta

from conftest import OTHER_USER, USER


def _create_habit(client, **overrides):
    payload = {"name": "Read", "target": 3, "uom": "pages"}
    payload.update(overrides)
    response = client.post("/v1/habits", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_and_list_habits(user_client):
    habit = _create_habit(user_client, description="  before bed ")
    assert habit["name"] == "Read"
    assert habit["description"] == "before bed"
    assert habit["frequency"] == "daily"
    assert habit["target"] == 3
    assert habit["user_email"] == USER
    assert habit["archived"] == 0
    assert habit["category"] is None

    items = user_client.get("/v1/habits").json()["items"]
    assert [item["id"] for item in items] == [habit["id"]]


def test_habit_defaults(user_client):
    habit = _create_habit(user_client, name="Walk", target=1, uom="", frequency="hourly")
    assert habit["uom"] == "times"
    assert habit["frequency"] == "daily"


def test_habit_name_is_required(user_client):
    response = user_client.post("/v1/habits", json={"name": "   "})
    assert response.status_code == 400
    assert response.json()["detail"] == "Name is required"


def test_habit_target_must_be_positive(user_client):
    assert user_client.post("/v1/habits", json={"name": "Run", "target": 0}).status_code == 400


def test_update_habit(user_client):
    habit = _create_habit(user_client)
    response = user_client.put(
        f"/v1/habits/{habit['id']}",
        json={"name": "Read books", "target": 10, "uom": "pages", "frequency": "weekly"},
    )
    assert response.status_code == 200
    updated = response.json()
    assert updated["name"] == "Read books"
    assert updated["target"] == 10
    assert updated["frequency"] == "weekly"
    assert user_client.get(f"/v1/habits/{habit['id']}").json()["target"] == 10


def test_archive_hides_habit_from_default_list(user_client):
    habit = _create_habit(user_client)
    archived = user_client.put(f"/v1/habits/{habit['id']}/archive", json={"archived": True}).json()
    assert archived["archived"] == 1
    assert user_client.get("/v1/habits").json()["items"] == []
    all_items = user_client.get("/v1/habits", params={"include_archived": "true"}).json()["items"]
    assert [item["id"] for item in all_items] == [habit["id"]]

    user_client.put(f"/v1/habits/{habit['id']}/archive", json={"archived": False})
    assert len(user_client.get("/v1/habits").json()["items"]) == 1


def test_filter_habits_by_category(user_client):
    category = user_client.post("/v1/categories", json={"name": "Health"}).json()
    in_category = _create_habit(user_client, name="Stretch", category_id=category["id"])
    _create_habit(user_client, name="Read")

    items = user_client.get("/v1/habits", params={"categoryId": category["id"]}).json()["items"]
    assert [item["id"] for item in items] == [in_category["id"]]
    assert items[0]["category"]["name"] == "Health"


def test_habit_with_unknown_category_is_rejected(user_client):
    response = user_client.post("/v1/habits", json={"name": "Stretch", "category_id": "missing"})
    assert response.status_code == 404


def test_delete_habit_removes_its_records(user_client):
    habit = _create_habit(user_client)
    for offset in range(3):
        day = (date.today() - timedelta(days=offset)).isoformat()
        user_client.post("/v1/habit-records", json={"habit_id": habit["id"], "date": day, "value": 2})
    assert len(user_client.get("/v1/habit-records").json()["items"]) == 3

    assert user_client.delete(f"/v1/habits/{habit['id']}").json() == {"ok": True}
    assert user_client.get(f"/v1/habits/{habit['id']}").status_code == 404
    assert user_client.get("/v1/habit-records").json()["items"] == []


def test_habits_are_scoped_to_owner(login):
    client = login(USER)
    habit = _create_habit(client)

    client = login(OTHER_USER)
    assert client.get("/v1/habits").json()["items"] == []
    assert client.get(f"/v1/habits/{habit['id']}").status_code == 403
    assert client.put(f"/v1/habits/{habit['id']}", json={"name": "Mine"}).status_code == 403
    assert client.delete(f"/v1/habits/{habit['id']}").status_code == 403
    assert client.get("/v1/habits/unknown").status_code == 404


def test_habit_stats(user_client):
    habit = _create_habit(user_client, target=1)
    today = date.today()
    for offset in (0, 1, 2, 5):
        day = (today - timedelta(days=offset)).isoformat()
        user_client.post("/v1/habit-records", json={"habit_id": habit["id"], "date": day})

    stats = user_client.get(f"/v1/habits/{habit['id']}/stats").json()
    assert stats["currentStreak"] == 3
    assert stats["totalCompletions"] == 4
    assert 0 <= stats["weeklyCompletion"] <= stats["totalCompletions"]
    assert 0 <= stats["monthlyCompletion"] <= stats["totalCompletions"]


def test_habit_stats_for_empty_habit(user_client):
    habit = _create_habit(user_client)
    stats = user_client.get(f"/v1/habits/{habit['id']}/stats").json()
    assert stats == {"weeklyCompletion": 0, "monthlyCompletion": 0, "currentStreak": 0, "totalCompletions": 0}


def test_habit_target_upper_bound(user_client):
    assert user_client.post("/v1/habits", json={"name": "Run", "target": 10**30}).status_code == 400
    habit = _create_habit(user_client, target=2_147_483_647)
    assert habit["target"] == 2_147_483_647
    response = user_client.put(f"/v1/habits/{habit['id']}", json={"name": "Run", "target": 2**31})
    assert response.status_code == 400
