"""HTTP-level flows through the FastAPI app."""

from app.core.config import settings

API = settings.API_PREFIX

TASHKENT = {
    "country": "Uzbekistan",
    "region": "Tashkent",
    "city": "Tashkent",
    "coordinates": {"lat": 41.31, "lng": 69.28},
}

ORDER = {
    "firstName": "Alice",
    "lastName": "Smith",
    "phone": "+998901234567",
    "telegramUsername": "@alice",
    "comment": "Dark theme please",
}


def login(client, token="alice-token"):
    response = client.post(f"{API}/auth/google", json={"idToken": token})
    assert response.status_code == 200
    return response.json()


def navigate(client, event, **extra):
    return client.post(f"{API}/app/navigate", json={"event": event, **extra})


def verify_location(client, body=TASHKENT):
    return client.post(f"{API}/location/verify", json=body)


def test_anonymous_session_starts_on_hero(client):
    response = client.get(f"{API}/app/state")
    assert response.status_code == 200
    data = response.json()
    assert data["authenticated"] is False
    assert data["appState"]["view"] == "hero"
    assert settings.SESSION_COOKIE_NAME in response.cookies


def test_start_requires_login(client):
    response = navigate(client, "start")
    assert response.status_code == 401
    assert response.json()["code"] == "AUTHENTICATION_FAILED"


def test_google_login_syncs_profile(client, store):
    data = login(client)
    assert data["authenticated"] is True
    assert data["user"]["uid"] == "google-alice"
    assert data["user"]["photoURL"] == "https://example.com/alice.png"
    assert data["isAdmin"] is False

    profile = store.collections["users"]["google-alice"]["profile"]
    assert profile["email"] == "alice@example.com"
    assert profile["authMethod"] == "google"
    assert profile["lastLogin"] > 0


def test_invalid_google_token(client):
    response = client.post(f"{API}/auth/google", json={"idToken": "forged"})
    assert response.status_code == 401


def test_full_order_flow(client, store, telegram_api):
    login(client)
    assert navigate(client, "start").json()["appState"]["view"] == "location-verify"

    response = verify_location(client)
    assert response.status_code == 200
    data = response.json()
    assert data["applied"] is True
    assert data["session"]["appState"]["view"] == "shop"
    assert data["session"]["appState"]["verifiedLocation"]["city"] == "Tashkent"

    response = navigate(client, "select", game="pubg", design="logo")
    assert response.json()["appState"]["view"] == "form"
    assert response.json()["progress"] == "Step 3 of 4"

    response = client.post(f"{API}/orders", json=ORDER)
    assert response.status_code == 201
    data = response.json()
    assert data["order"]["selectedGame"] == "pubg"
    assert data["order"]["selectedDesign"] == "logo"
    assert data["order"]["location"]["country"] == "Uzbekistan"
    assert data["session"]["appState"]["view"] == "success"
    assert "YANGI BEPUL BUYURTMA" in telegram_api.sent[-1]["text"]

    response = navigate(client, "my_orders")
    assert response.json()["appState"]["view"] == "my-orders"
    assert response.json()["appState"].get("orderConfig") is None

    mine = client.get(f"{API}/orders/mine").json()
    assert len(mine["orders"]) == 1
    assert mine["latestResult"] is None


def test_order_form_errors_are_reported_together(client):
    login(client)
    navigate(client, "start")
    verify_location(client)
    navigate(client, "select", game="gta", design="avatar")

    response = client.post(f"{API}/orders", json={**ORDER, "phone": "+99890123456", "comment": ""})
    assert response.status_code == 422
    assert response.json()["details"] == {
        "phone": "Format: +998901234567",
        "comment": "Required",
    }
    assert client.get(f"{API}/app/state").json()["appState"]["view"] == "form"


def test_order_requires_verified_location(client):
    login(client)
    response = client.post(f"{API}/orders", json={**ORDER, "selectedGame": "pubg", "selectedDesign": "logo"})
    assert response.status_code == 422
    assert "location" in response.json()["details"]


def test_location_mismatch_then_ban(client, nominatim, store):
    login(client)
    navigate(client, "start")
    nominatim.address = {"city": "Almaty", "state": "Almaty", "country": "Kazakhstan", "country_code": "kz"}

    for strike in (1, 2):
        response = verify_location(client)
        assert response.status_code == 409
        data = response.json()
        assert data["code"] == "LOCATION_MISMATCH"
        assert data["error"] == "LOCATION MISMATCH. DETECTED: KAZAKHSTAN"
        assert data["details"]["strikes"] == strike

    response = verify_location(client)
    assert response.status_code == 403
    assert response.json()["code"] == "ACCOUNT_BANNED"

    state = client.get(f"{API}/app/state").json()
    assert state["appState"]["view"] == "banned"
    assert state["authenticated"] is False
    assert state["user"]["displayName"] == "Alice"

    assert navigate(client, "logout").status_code == 403
    assert store.collections["users"]["google-alice"]["security"]["isBanned"] is True


def test_geocoder_outage_is_retryable(client, nominatim):
    login(client)
    navigate(client, "start")
    nominatim.fail = True

    response = verify_location(client)
    assert response.status_code == 502
    assert response.json()["code"] == "GEOCODING_FAILED"

    nominatim.fail = False
    assert verify_location(client).status_code == 200


def test_gps_denied(client):
    login(client)
    navigate(client, "start")
    body = {**TASHKENT, "coordinates": None, "gpsError": "denied"}

    response = verify_location(client, body)
    assert response.status_code == 400
    assert response.json()["code"] == "GEOLOCATION_UNAVAILABLE"


def test_late_location_result_does_not_move_view(client):
    login(client)
    navigate(client, "start")
    navigate(client, "back")

    data = verify_location(client).json()
    assert data["applied"] is False
    assert data["session"]["appState"]["view"] == "hero"


def stored_view(store):
    (session,) = store.collections["sessions"].values()
    return session["appState"]["view"]


def test_navigation_during_geocoding_is_kept(client, nominatim, store):
    login(client)
    navigate(client, "start")

    def user_goes_back():
        (session,) = store.collections["sessions"].values()
        session["appState"] = {"view": "hero"}

    nominatim.on_request = user_goes_back

    data = verify_location(client).json()
    assert data["applied"] is False
    assert data["session"]["appState"]["view"] == "hero"
    assert stored_view(store) == "hero"


def test_navigation_during_order_notification_is_kept(client, telegram_api, store):
    login(client)
    navigate(client, "start")
    verify_location(client)
    navigate(client, "select", game="pubg", design="logo")

    def user_goes_back():
        (session,) = store.collections["sessions"].values()
        session["appState"]["view"] = "shop"

    telegram_api.on_request = user_goes_back

    response = client.post(f"{API}/orders", json=ORDER)
    assert response.status_code == 201
    assert response.json()["session"]["appState"]["view"] == "shop"
    assert stored_view(store) == "shop"


def test_banned_user_login_lands_on_ban_screen(client, store):
    store.collections["users"] = {
        "google-alice": {"security": {"isBanned": True, "attempts": 3}}
    }
    data = login(client)
    assert data["authenticated"] is False
    assert data["appState"]["view"] == "banned"


def test_client_cannot_send_server_events(client):
    login(client)
    navigate(client, "start")
    response = navigate(client, "location_verified")
    assert response.status_code == 409
    assert response.json()["code"] == "INVALID_TRANSITION"


def test_invalid_navigation(client):
    login(client)
    response = navigate(client, "back")
    assert response.status_code == 409


def test_logout(client):
    login(client)
    navigate(client, "start")

    response = client.post(f"{API}/auth/logout")
    assert response.status_code == 200
    data = response.json()
    assert data["authenticated"] is False
    assert data["appState"]["view"] == "hero"


def test_me_restores_user_and_linked_telegram(client, store):
    login(client)
    store.collections["users"]["google-alice"]["profile"]["telegramId"] = "555666777"

    data = client.get(f"{API}/auth/me").json()
    assert data["authenticated"] is True
    assert data["user"]["telegramId"] == "555666777"


def test_me_applies_ban_placed_while_away(client, store):
    login(client)
    store.collections["users"]["google-alice"]["security"] = {"isBanned": True, "attempts": 0}

    data = client.get(f"{API}/auth/me").json()
    assert data["appState"]["view"] == "banned"
    assert data["authenticated"] is False


def test_telegram_sign_up(client, telegram_api, store):
    navigate(client, "telegram")

    start = client.post(f"{API}/telegram/verify/start").json()
    vid = start["verificationId"]
    assert start["step"] == "awaiting-id"

    response = client.post(f"{API}/telegram/verify/send-code", json={"verificationId": vid, "telegramId": "123456789"})
    assert response.json()["step"] == "awaiting-code"

    response = client.post(
        f"{API}/telegram/verify/verify-code",
        json={"verificationId": vid, "code": telegram_api.last_code()},
    )
    assert response.json()["step"] == "awaiting-nickname"

    response = client.post(f"{API}/telegram/verify/register", json={"verificationId": vid, "nickname": "Ali"})
    data = response.json()
    assert data["session"]["authenticated"] is True
    assert data["session"]["user"]["uid"] == "tg_123456789"
    assert data["session"]["appState"]["view"] == "hero"

    # Telegram-only sessions survive a reload without any provider
    me = client.get(f"{API}/auth/me").json()
    assert me["user"]["uid"] == "tg_123456789"
    assert me["user"]["authMethod"] == "telegram"


def test_telegram_bot_not_started(client, telegram_api):
    vid = client.post(f"{API}/telegram/verify/start").json()["verificationId"]
    telegram_api.mode = "chat_not_found"

    response = client.post(f"{API}/telegram/verify/send-code", json={"verificationId": vid, "telegramId": "123456789"})
    assert response.status_code == 502
    assert response.json()["code"] == "TELEGRAM_BOT_NOT_STARTED"


def test_wrong_code(client):
    vid = client.post(f"{API}/telegram/verify/start").json()["verificationId"]
    client.post(f"{API}/telegram/verify/send-code", json={"verificationId": vid, "telegramId": "123456789"})

    response = client.post(f"{API}/telegram/verify/verify-code", json={"verificationId": vid, "code": "000000"})
    assert response.status_code == 409
    assert response.json()["code"] == "OTP_MISMATCH"


def test_link_telegram_to_google_account(client, telegram_api, store):
    login(client)
    navigate(client, "telegram")
    vid = client.post(f"{API}/telegram/verify/start").json()["verificationId"]
    client.post(f"{API}/telegram/verify/send-code", json={"verificationId": vid, "telegramId": "555666777"})

    data = client.post(
        f"{API}/telegram/verify/verify-code",
        json={"verificationId": vid, "code": telegram_api.last_code()},
    ).json()

    assert data["step"] == "completed"
    assert data["session"]["user"]["telegramId"] == "555666777"
    assert data["session"]["appState"]["view"] == "hero"
    assert store.collections["users"]["google-alice"]["profile"]["telegramId"] == "555666777"


def test_country_list(client):
    countries = client.get(f"{API}/location/countries", params={"search": "stan"}).json()
    assert [c["name"] for c in countries] == ["Kazakhstan", "Uzbekistan"]
    assert countries[0] == {"name": "Kazakhstan", "isoCode": "KZ", "flag": "kz.svg"}


def test_gps_options(client):
    assert client.get(f"{API}/location/options").json()["enableHighAccuracy"] is True


def test_admin_requires_operator(client):
    login(client)
    assert client.get(f"{API}/admin/dashboard").status_code == 403
    assert navigate(client, "admin").status_code == 403


def test_admin_dashboard_and_actions(client, store):
    # A customer places an order
    login(client)
    navigate(client, "start")
    verify_location(client)
    navigate(client, "select", game="valorant", design="preview")
    order_id = client.post(f"{API}/orders", json=ORDER).json()["order"]["id"]
    client.post(f"{API}/auth/logout")

    data = login(client, "operator-token")
    assert data["isAdmin"] is True
    assert navigate(client, "admin").json()["appState"]["view"] == "admin"

    dashboard = client.get(f"{API}/admin/dashboard").json()
    assert [o["id"] for o in dashboard["orders"]] == [order_id]
    assert {u["uid"] for u in dashboard["activeUsers"]} == {"google-alice", "google-operator"}
    assert dashboard["bannedUsers"] == []

    response = client.patch(f"{API}/admin/orders/{order_id}/status", json={"status": "processing"})
    assert response.status_code == 200
    assert store.collections["orders"][order_id]["status"] == "processing"

    response = client.post(
        f"{API}/admin/orders/{order_id}/deliver",
        json={"imageUrl": "https://img.example.com/final.png", "description": "Enjoy"},
    )
    assert response.status_code == 200
    stored = store.collections["orders"][order_id]
    assert stored["status"] == "completed"
    assert stored["resultImage"] == "https://img.example.com/final.png"

    client.post(f"{API}/admin/users/google-alice/ban", json={"reason": "Spam"})
    dashboard = client.get(f"{API}/admin/dashboard").json()
    assert [u["uid"] for u in dashboard["bannedUsers"]] == ["google-alice"]

    client.post(f"{API}/admin/users/google-alice/unban")
    security = store.collections["users"]["google-alice"]["security"]
    assert security == {"isBanned": False, "attempts": 0}


def test_unknown_order_status_update(client):
    login(client, "operator-token")
    response = client.patch(f"{API}/admin/orders/missing/status", json={"status": "busy"})
    assert response.status_code == 404


def test_root_and_health(client):
    response = client.get("/", headers={"X-Request-Id": "req-42"})
    assert response.json()["status"] == "running"
    assert response.headers["X-Request-Id"] == "req-42"
    assert "X-Process-Time" in response.headers

    # no database connection in tests
    health = client.get("/health")
    assert health.status_code == 503
    assert health.json()["database"]["healthy"] is False
