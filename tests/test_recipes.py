"""Recipe API tests."""

from decimal import Decimal

from recipebook.models.recipe import Recipe


def test_create_recipe(client, auth_headers, catalog):
    """Test creating a recipe with ingredients."""
    response = client.post(
        "/api/v1/recipes",
        headers=auth_headers,
        json={
            "name": "Pancakes",
            "instructions": "Whisk everything, rest 20 minutes, fry.",
            "ingredients": [
                {"ingredient_id": catalog["Flour"], "amount": "250"},
                {"ingredient_id": catalog["Eggs"], "amount": "2"},
                {"ingredient_id": catalog["Milk"], "amount": "400.5"},
            ],
        },
    )
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Pancakes"
    assert len(data["ingredients"]) == 3

    # Lines come back in store order: Bakery before Dairy, then by name
    assert [line["name"] for line in data["ingredients"]] == ["Flour", "Eggs", "Milk"]
    milk = data["ingredients"][2]
    assert milk["unit"] == "ml"
    assert milk["category"] == "Dairy"
    assert Decimal(milk["amount"]) == Decimal("400.5")


def test_create_recipe_unknown_ingredient(client, auth_headers, catalog):
    """Test that recipe lines must reference existing ingredients."""
    response = client.post(
        "/api/v1/recipes",
        headers=auth_headers,
        json={
            "name": "Mystery Stew",
            "ingredients": [
                {"ingredient_id": catalog["Flour"], "amount": "100"},
                {"ingredient_id": 99999, "amount": "1"},
            ],
        },
    )
    assert response.status_code == 400

    response = client.get("/api/v1/recipes", headers=auth_headers)
    assert response.json() == []


def test_create_recipe_duplicate_ingredient(client, auth_headers, catalog):
    """Test that an ingredient may only appear once per recipe."""
    response = client.post(
        "/api/v1/recipes",
        headers=auth_headers,
        json={
            "name": "Double Flour",
            "ingredients": [
                {"ingredient_id": catalog["Flour"], "amount": "100"},
                {"ingredient_id": catalog["Flour"], "amount": "200"},
            ],
        },
    )
    assert response.status_code == 400


def test_create_recipe_rejects_non_positive_amount(client, auth_headers, catalog):
    """Test that ingredient amounts must be positive."""
    response = client.post(
        "/api/v1/recipes",
        headers=auth_headers,
        json={
            "name": "Nothing",
            "ingredients": [{"ingredient_id": catalog["Flour"], "amount": "0"}],
        },
    )
    assert response.status_code == 422


def test_list_recipes(client, auth_headers, catalog, create_recipe):
    """Test listing recipes."""
    create_recipe("Omelette", {catalog["Eggs"]: "3", catalog["Salt"]: "1"})
    create_recipe("Bread", {catalog["Flour"]: "500"})

    response = client.get("/api/v1/recipes", headers=auth_headers)
    assert response.status_code == 200
    recipes = response.json()
    assert [recipe["name"] for recipe in recipes] == ["Bread", "Omelette"]
    assert recipes[0]["ingredient_count"] == 1
    assert recipes[1]["ingredient_count"] == 2


def test_get_recipe(client, auth_headers, catalog, create_recipe):
    """Test getting a specific recipe."""
    recipe_id = create_recipe("Bread", {catalog["Flour"]: "500", catalog["Salt"]: "10"})

    response = client.get(f"/api/v1/recipes/{recipe_id}", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Bread"
    # Uncategorized ingredients are listed last
    assert [line["name"] for line in data["ingredients"]] == ["Flour", "Salt"]


def test_get_recipe_not_found(client, auth_headers):
    """Test getting a recipe that does not exist."""
    response = client.get("/api/v1/recipes/99999", headers=auth_headers)
    assert response.status_code == 404


def test_update_recipe(client, auth_headers, catalog, create_recipe):
    """Test that an update replaces metadata and the full set of lines."""
    recipe_id = create_recipe("Bread", {catalog["Flour"]: "500", catalog["Salt"]: "10"})

    response = client.put(
        f"/api/v1/recipes/{recipe_id}",
        headers=auth_headers,
        json={
            "name": "Milk Bread",
            "instructions": "Knead well.",
            "ingredients": [
                {"ingredient_id": catalog["Flour"], "amount": "450"},
                {"ingredient_id": catalog["Milk"], "amount": "250"},
            ],
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Milk Bread"
    assert data["instructions"] == "Knead well."
    lines = {line["name"]: Decimal(line["amount"]) for line in data["ingredients"]}
    assert lines == {"Flour": Decimal("450"), "Milk": Decimal("250")}


def test_update_recipe_unknown_ingredient_keeps_lines(client, auth_headers, catalog, create_recipe):
    """Test that a rejected update leaves the recipe unchanged."""
    recipe_id = create_recipe("Bread", {catalog["Flour"]: "500"})

    response = client.put(
        f"/api/v1/recipes/{recipe_id}",
        headers=auth_headers,
        json={"name": "Broken", "ingredients": [{"ingredient_id": 99999, "amount": "1"}]},
    )
    assert response.status_code == 400

    response = client.get(f"/api/v1/recipes/{recipe_id}", headers=auth_headers)
    assert response.json()["name"] == "Bread"
    assert len(response.json()["ingredients"]) == 1


def test_delete_recipe(client, auth_headers, catalog, create_recipe, db):
    """Test that deleting a recipe soft deletes it."""
    recipe_id = create_recipe("Bread", {catalog["Flour"]: "500"})

    response = client.delete(f"/api/v1/recipes/{recipe_id}", headers=auth_headers)
    assert response.status_code == 204

    response = client.get(f"/api/v1/recipes/{recipe_id}", headers=auth_headers)
    assert response.status_code == 404

    response = client.get("/api/v1/recipes", headers=auth_headers)
    assert response.json() == []

    # The row is kept with a deletion timestamp
    recipe = db.get(Recipe, recipe_id)
    assert recipe is not None
    assert recipe.deleted_at is not None
