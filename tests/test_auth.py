# tests/test_auth.py
import bcrypt


def register(client, username="alice", password="pw1"):
    return client.post("/users/register", json={"username": username, "password": password})


def login(client, username="alice", password="pw1"):
    return client.post("/users/login", json={"username": username, "password": password})


def test_register_then_duplicate_conflicts(client, database, run):
    r = register(client, "alice", "pw1")
    assert r.status_code == 200
    assert r.json() == {"message": "user registered successfully"}

    r2 = register(client, "alice", "pw2")
    assert r2.status_code == 409
    assert r2.json()["message"] == "username is already taken"

    assert run(database["users"].count_documents({"username": "alice"})) == 1


def test_username_is_case_sensitive(client):
    assert register(client, "alice").status_code == 200
    assert register(client, "Alice").status_code == 200


def test_password_is_stored_hashed_with_empty_cart(client, database, run):
    register(client, "bob", "secret")
    user = run(database["users"].find_one({"username": "bob"}))
    assert user["password"] != "secret"
    assert bcrypt.checkpw(b"secret", user["password"].encode())
    assert user["cart"] == {}


def test_register_rejects_empty_fields(client):
    r = register(client, "", "pw")
    assert r.status_code == 400
    body = r.json()
    assert body["message"] == "validation failed"
    assert body["errors"][0]["field"] == "username"

    assert register(client, "carol", "").status_code == 400


def test_register_rejects_password_over_bcrypt_limit(client):
    assert register(client, "dave", "x" * 73).status_code == 400
    assert register(client, "dave", "x" * 72).status_code == 200


def test_login_returns_token(client):
    register(client)
    r = login(client)
    assert r.status_code == 200
    token = r.json()["token"]
    assert isinstance(token, str) and token.count(".") == 2


def test_login_failures_are_indistinguishable(client):
    register(client)
    wrong_password = login(client, "alice", "wrong")
    unknown_user = login(client, "nobody", "pw1")
    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json() == {"message": "invalid username or password"}


def test_login_token_authenticates_cart(client):
    register(client)
    token = login(client).json()["token"]
    r = client.get("/cart", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json() == {"cart": []}
