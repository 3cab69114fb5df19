"""End-to-end tests for the v1 HTTP API."""

from conftest import PASSWORD, make_account
from digital_bank_api.app.core.store import accounts
from digital_bank_api.app.services.login_throttle import LOCKOUT_WINDOW_SECONDS

API = "/api/v1"


def account_payload(**overrides) -> dict:
    payload = {
        "name": "alice",
        "accountNumber": "100000001",
        "bank": "abc",
        "deposit": 1000,
        "password": PASSWORD,
        "password_confirm": PASSWORD,
    }
    payload.update(overrides)
    return payload


class TestAuthentication:

    def test_missing_token(self, client) -> None:
        response = client.get(f"{API}/accounts")
        assert response.status_code == 401
        assert response.json() == {"code": "UNAUTHORIZED", "message": "Not authenticated"}

    def test_invalid_token(self, client) -> None:
        response = client.get(f"{API}/accounts", headers={"Authorization": "Bearer nonsense"})
        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    def test_login(self, client, user) -> None:
        response = client.post(f"{API}/login", json={"email": user.email, "password": PASSWORD})
        assert response.status_code == 200
        body = response.json()
        assert body["user_id"] == user.id
        assert body["token_type"] == "bearer"
        listed = client.get(f"{API}/accounts", headers={"Authorization": f"Bearer {body['token']}"})
        assert listed.status_code == 200

    def test_wrong_password(self, client, user) -> None:
        response = client.post(f"{API}/login", json={"email": user.email, "password": "nope"})
        assert response.status_code == 401
        assert response.json() == {"code": "INVALID_CREDENTIALS", "message": "Wrong email or password"}

    def test_lockout_and_recovery(self, client, user, clock) -> None:
        for _ in range(5):
            client.post(f"{API}/login", json={"email": user.email, "password": "nope"})
            clock.advance(1)
        locked = client.post(f"{API}/login", json={"email": user.email, "password": PASSWORD})
        assert locked.status_code == 403
        assert locked.json()["code"] == "LOCKED_OUT"
        assert "30 minutes" in locked.json()["message"]

        clock.advance(LOCKOUT_WINDOW_SECONDS)
        recovered = client.post(f"{API}/login", json={"email": user.email, "password": PASSWORD})
        assert recovered.status_code == 200


class TestAccounts:

    def test_create(self, client, auth_headers) -> None:
        response = client.post(f"{API}/accounts", json=account_payload(), headers=auth_headers)
        assert response.status_code == 201
        assert response.json() == {
            "owner_name": "ALICE",
            "account_number": "100000001",
            "bank": "ABC",
            "balance": 1000,
        }

    def test_create_duplicate(self, client, auth_headers) -> None:
        client.post(f"{API}/accounts", json=account_payload(), headers=auth_headers)
        response = client.post(
            f"{API}/accounts", json=account_payload(name="bob", deposit=5), headers=auth_headers
        )
        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE"
        assert len(accounts.list_all()) == 1
        assert accounts.find_one("account_number", "100000001")["owner_name"] == "ALICE"

    def test_create_rejects_bad_account_number(self, client, auth_headers) -> None:
        response = client.post(
            f"{API}/accounts", json=account_payload(accountNumber="12ab"), headers=auth_headers
        )
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_FAILED"
        assert response.json()["message"].startswith("accountNumber")

    def test_create_rejects_weak_password(self, client, auth_headers) -> None:
        payload = account_payload(password="simple", password_confirm="simple")
        response = client.post(f"{API}/accounts", json=payload, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_FAILED"

    def test_create_rejects_mismatched_confirmation(self, client, auth_headers) -> None:
        payload = account_payload(password_confirm="Other-pw1")
        response = client.post(f"{API}/accounts", json=payload, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Password confirmation mismatched"

    def test_pagination_envelope(self, client, auth_headers) -> None:
        for i in range(5):
            make_account(f"OWNER{i}", f"10000000{i}")
        pages = [
            client.get(
                f"{API}/accounts", params={"page_number": n, "page_size": 2}, headers=auth_headers
            ).json()
            for n in (1, 2, 3)
        ]
        assert [len(p["data"]) for p in pages] == [2, 2, 1]
        assert [p["count"] for p in pages] == [2, 2, 1]
        assert {p["total_pages"] for p in pages} == {3}
        assert [p["has_previous_page"] for p in pages] == [False, True, True]
        assert [p["has_next_page"] for p in pages] == [True, True, False]
        assert all("password" not in a for p in pages for a in p["data"])

    def test_page_past_the_end_is_empty(self, client, auth_headers) -> None:
        make_account()
        response = client.get(f"{API}/accounts", params={"page_number": 9}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"] == []

    def test_search_and_sort(self, client, auth_headers) -> None:
        make_account("ALICE", "100000001", balance=10)
        make_account("MALIK", "100000002", balance=30)
        make_account("BOB", "100000003", balance=20)
        response = client.get(
            f"{API}/accounts", params={"search": "ownerName:ali", "sort": "balance:desc"}, headers=auth_headers
        )
        assert [a["owner_name"] for a in response.json()["data"]] == ["MALIK", "ALICE"]

    def test_invalid_page_size(self, client, auth_headers) -> None:
        response = client.get(f"{API}/accounts", params={"page_size": 0}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_FAILED"

    def test_balance_by_number(self, client, auth_headers) -> None:
        account_id = make_account(account_number="123123123", balance=42)
        response = client.get(f"{API}/accounts/123123123", headers=auth_headers)
        assert response.json() == {"id": account_id, "owner_name": "ALICE", "balance": 42}
        missing = client.get(f"{API}/accounts/999999999", headers=auth_headers)
        assert missing.status_code == 404
        assert missing.json() == {"code": "NOT_FOUND", "message": "Unknown Bank Account"}

    def test_update_and_delete(self, client, auth_headers) -> None:
        account_id = make_account()
        updated = client.put(
            f"{API}/accounts/{account_id}",
            json={"name": "carol", "accountNumber": "200000002", "password": PASSWORD},
            headers=auth_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["owner_name"] == "CAROL"

        refused = client.request(
            "DELETE", f"{API}/accounts/{account_id}", json={"password": "wrong"}, headers=auth_headers
        )
        assert refused.status_code == 401
        deleted = client.request(
            "DELETE", f"{API}/accounts/{account_id}", json={"password": PASSWORD}, headers=auth_headers
        )
        assert deleted.status_code == 200
        assert accounts.find_by_id(account_id) is None

    def test_change_password(self, client, auth_headers) -> None:
        account_id = make_account()
        response = client.post(
            f"{API}/accounts/{account_id}/change-password",
            json={"password_old": PASSWORD, "password_new": "Better-2", "password_confirm": "Better-2"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["id"] == account_id


    def test_collection_paths_do_not_redirect(self, client, auth_headers) -> None:
        for path in ("accounts", "users"):
            response = client.get(f"{API}/{path}", headers=auth_headers, follow_redirects=False)
            assert response.status_code == 200


class TestMoneyMovement:

    def test_fractional_amounts_are_exact(self, client, auth_headers) -> None:
        client.post(f"{API}/accounts", json=account_payload(deposit=3.3), headers=auth_headers)
        account_id = accounts.find_one("account_number", "100000001")["id"]
        payment = {"bank": "XYZ", "amount": 1.1, "title": "Rent", "password": PASSWORD}
        assert client.post(f"{API}/accounts/{account_id}/payment", json=payment, headers=auth_headers).status_code == 200

        shown = client.get(f"{API}/accounts/100000001", headers=auth_headers).json()["balance"]
        assert shown == 2.2

        payment["amount"] = shown
        response = client.post(f"{API}/accounts/{account_id}/payment", json=payment, headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"{API}/accounts/100000001", headers=auth_headers).json()["balance"] == 0

    def test_fractional_transfer(self, client, auth_headers) -> None:
        source = make_account("ALICE", "100000001", balance="10.30")
        target = make_account("BOB", "100000002", balance="0.10")
        payload = {"bank": "ABC", "amount": 10.3, "password": PASSWORD}
        response = client.post(f"{API}/accounts/{source}/{target}/transfer", json=payload, headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"{API}/accounts/100000001", headers=auth_headers).json()["balance"] == 0
        assert client.get(f"{API}/accounts/100000002", headers=auth_headers).json()["balance"] == 10.4

    def test_rejects_sub_cent_amounts(self, client, auth_headers) -> None:
        account_id = make_account()
        response = client.put(
            f"{API}/accounts/{account_id}/deposit", json={"amount": 1.234}, headers=auth_headers
        )
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_FAILED"
        assert accounts.find_by_id(account_id)["balance"] == 1000

    def test_deposit(self, client, auth_headers) -> None:
        account_id = make_account(balance=1000)
        response = client.put(f"{API}/accounts/{account_id}/deposit", json={"amount": 250}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Deposit success"
        assert accounts.find_by_id(account_id)["balance"] == 1250

    def test_deposit_rejects_zero(self, client, auth_headers) -> None:
        account_id = make_account()
        response = client.put(f"{API}/accounts/{account_id}/deposit", json={"amount": 0}, headers=auth_headers)
        assert response.status_code == 400

    def test_deposit_unknown_account(self, client, auth_headers) -> None:
        response = client.put(f"{API}/accounts/999/deposit", json={"amount": 5}, headers=auth_headers)
        assert response.status_code == 404

    def test_payment(self, client, auth_headers) -> None:
        account_id = make_account(balance=1000)
        payload = {"bank": "xyz", "amount": 400, "title": "Rent", "password": PASSWORD}
        response = client.post(f"{API}/accounts/{account_id}/payment", json=payload, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["bank"] == "XYZ"
        assert accounts.find_by_id(account_id)["balance"] == 600

    def test_payment_insufficient_funds(self, client, auth_headers) -> None:
        account_id = make_account(balance=100)
        payload = {"bank": "XYZ", "amount": 101, "title": "Rent", "password": PASSWORD}
        response = client.post(f"{API}/accounts/{account_id}/payment", json=payload, headers=auth_headers)
        assert response.status_code == 422
        assert response.json() == {"code": "INSUFFICIENT_FUNDS", "message": "Balance not enough"}
        assert accounts.find_by_id(account_id)["balance"] == 100

    def test_payment_wrong_password(self, client, auth_headers) -> None:
        account_id = make_account(balance=1000)
        payload = {"bank": "XYZ", "amount": 10, "title": "Rent", "password": "wrong"}
        response = client.post(f"{API}/accounts/{account_id}/payment", json=payload, headers=auth_headers)
        assert response.status_code == 401
        assert accounts.find_by_id(account_id)["balance"] == 1000

    def test_transfer(self, client, auth_headers) -> None:
        source = make_account("ALICE", "100000001", balance=1000)
        target = make_account("BOB", "100000002", balance=300)
        payload = {"bank": "ABC", "amount": 250, "password": PASSWORD}
        response = client.post(f"{API}/accounts/{source}/{target}/transfer", json=payload, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["owner_name"] == "BOB"
        assert accounts.find_by_id(source)["balance"] == 750
        assert accounts.find_by_id(target)["balance"] == 550

    def test_transfer_insufficient_funds(self, client, auth_headers) -> None:
        source = make_account("ALICE", "100000001", balance=100)
        target = make_account("BOB", "100000002", balance=300)
        payload = {"bank": "ABC", "amount": 500, "password": PASSWORD}
        response = client.post(f"{API}/accounts/{source}/{target}/transfer", json=payload, headers=auth_headers)
        assert response.status_code == 422
        assert (accounts.find_by_id(source)["balance"], accounts.find_by_id(target)["balance"]) == (100, 300)

    def test_transfer_to_unknown_account(self, client, auth_headers) -> None:
        source = make_account()
        payload = {"bank": "ABC", "amount": 5, "password": PASSWORD}
        response = client.post(f"{API}/accounts/{source}/999/transfer", json=payload, headers=auth_headers)
        assert response.status_code == 404
        assert accounts.find_by_id(source)["balance"] == 1000


class TestUsers:

    def test_crud(self, client, auth_headers) -> None:
        created = client.post(
            f"{API}/users",
            json={"name": "Bob", "email": "Bob@Example.com", "password": PASSWORD, "password_confirm": PASSWORD},
            headers=auth_headers,
        )
        assert created.status_code == 201
        user_id = created.json()["id"]
        assert created.json()["email"] == "bob@example.com"

        fetched = client.get(f"{API}/users/{user_id}", headers=auth_headers)
        assert fetched.json()["name"] == "Bob"

        updated = client.put(
            f"{API}/users/{user_id}", json={"name": "Robert", "email": "rob@example.com"}, headers=auth_headers
        )
        assert updated.json()["message"] == "User changed successfully"

        listed = client.get(f"{API}/users", params={"sort": "name:desc"}, headers=auth_headers)
        assert [u["name"] for u in listed.json()["data"]] == ["Robert", "Admin"]

        deleted = client.delete(f"{API}/users/{user_id}", headers=auth_headers)
        assert deleted.json()["message"] == "User deleted successfully"
        assert client.get(f"{API}/users/{user_id}", headers=auth_headers).status_code == 404

    def test_duplicate_email(self, client, user, auth_headers) -> None:
        response = client.post(
            f"{API}/users",
            json={"name": "Copy", "email": user.email, "password": PASSWORD, "password_confirm": PASSWORD},
            headers=auth_headers,
        )
        assert response.status_code == 409

    def test_deleted_user_token_is_rejected(self, client, user, auth_headers) -> None:
        client.delete(f"{API}/users/{user.id}", headers=auth_headers)
        response = client.get(f"{API}/users", headers=auth_headers)
        assert response.status_code == 401
        assert response.json()["message"] == "User no longer exists"
