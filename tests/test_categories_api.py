from conftest import OTHER_USER, USER


def test_create_category_with_defaults(user_client):
    response = user_client.post("/v1/categories", json={"name": "  Health  "})
    assert response.status_code == 201
    category = response.json()
    assert category["name"] == "Health"
    assert category["color"] == "#4F46E5"
    assert category["icon"] == "📋"
    assert category["user_email"] == USER


def test_category_name_is_required(user_client):
    response = user_client.post("/v1/categories", json={"name": ""})
    assert response.status_code == 400


def test_list_categories_sorted_by_name(user_client):
    for name in ("Work", "Health", "Mind"):
        user_client.post("/v1/categories", json={"name": name})
    names = [item["name"] for item in user_client.get("/v1/categories").json()["items"]]
    assert names == ["Health", "Mind", "Work"]


def test_update_category_keeps_unset_fields(user_client):
    category = user_client.post("/v1/categories", json={"name": "Health", "color": "#10B981", "icon": "💪"}).json()
    response = user_client.put(f"/v1/categories/{category['id']}", json={"name": "Fitness"})
    assert response.status_code == 200
    updated = response.json()
    assert updated["name"] == "Fitness"
    assert updated["color"] == "#10B981"
    assert updated["icon"] == "💪"


def test_delete_category_detaches_habits(user_client):
    category = user_client.post("/v1/categories", json={"name": "Health"}).json()
    habit_ids = []
    for name in ("Stretch", "Walk", "Sleep early"):
        habit = user_client.post("/v1/habits", json={"name": name, "category_id": category["id"]}).json()
        habit_ids.append(habit["id"])
    user_client.post("/v1/habits", json={"name": "Read"})

    response = user_client.delete(f"/v1/categories/{category['id']}")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "detached_habits": 3}

    habits = user_client.get("/v1/habits").json()["items"]
    assert len(habits) == 4
    assert all(item["category_id"] is None for item in habits)
    assert user_client.get("/v1/categories").json()["items"] == []


def test_delete_empty_category(user_client):
    category = user_client.post("/v1/categories", json={"name": "Empty"}).json()
    assert user_client.delete(f"/v1/categories/{category['id']}").json()["detached_habits"] == 0


def test_categories_are_scoped_to_owner(login):
    client = login(USER)
    category = client.post("/v1/categories", json={"name": "Health"}).json()

    client = login(OTHER_USER)
    assert client.get("/v1/categories").json()["items"] == []
    assert client.put(f"/v1/categories/{category['id']}", json={"name": "Mine"}).status_code == 403
    assert client.delete(f"/v1/categories/{category['id']}").status_code == 403
    assert client.post("/v1/habits", json={"name": "Sneaky", "category_id": category["id"]}).status_code == 403
    assert client.delete("/v1/categories/missing").status_code == 404
