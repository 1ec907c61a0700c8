from vitrinex import themes


def test_deep_merge_keeps_untouched_keys():
    base = {"colors": {"primary": "#000000", "text": "#111111"}, "sections": {"hero": True}}
    merged = themes.deep_merge(base, {"colors": {"primary": "#ffffff"}, "theme": "custom"})
    assert merged["colors"] == {"primary": "#ffffff", "text": "#111111"}
    assert merged["theme"] == "custom"
    assert base["colors"]["primary"] == "#000000"


def test_every_catalogue_entry_can_be_applied():
    for entry in themes.catalogue():
        applied = themes.apply_theme(themes.default_appearance(), entry["id"])
        assert applied["theme"] == entry["id"]
        assert applied["theme_category"] == entry["category"]
        assert "name" not in applied


def test_get_creates_default(client, db, product_store):
    res = client.get(f"/api/stores/{product_store['id']}/appearance")
    assert res.status_code == 200
    body = res.json()
    assert body["theme"] == "minimal"
    assert body["version"] == 1
    assert body["store"] == product_store["id"]

    client.get(f"/api/stores/{product_store['id']}/appearance")
    assert db["store_appearance"].count_documents({}) == 1


def test_get_unknown_store(client):
    assert client.get("/api/stores/0123456789abcdef01234567/appearance").status_code == 404


def test_update_merges_and_bumps_version(client, owner_headers, product_store):
    url = f"/api/stores/{product_store['id']}/appearance"
    res = client.put(
        url,
        json={"colors": {"primary": "#ff0000"}, "sections": {"gallery": True}, "ignored": 1},
        headers=owner_headers,
    )
    assert res.status_code == 200
    body = res.json()
    assert body["colors"]["primary"] == "#ff0000"
    assert body["colors"]["text"] == "#0f172a"
    assert body["sections"]["gallery"] is True
    assert body["sections"]["hero"] is True
    assert body["version"] == 2
    assert "ignored" not in body


def test_apply_theme(client, owner_headers, product_store):
    url = f"/api/stores/{product_store['id']}/appearance/apply-theme"
    res = client.post(url, json={"theme_name": "neon"}, headers=owner_headers)
    assert res.status_code == 200
    body = res.json()
    assert body["theme"] == "neon"
    assert body["theme_category"] == "vibrant"
    assert body["colors"]["primary"] == "#a855f7"
    # Sections a preset does not mention keep their values
    assert body["colors"]["success"] == "#10b981"

    res = client.post(url, json={"theme_name": "does-not-exist"}, headers=owner_headers)
    assert res.status_code == 400


def test_reset(client, owner_headers, product_store):
    base = f"/api/stores/{product_store['id']}/appearance"
    client.post(f"{base}/apply-theme", json={"theme_name": "dark-pro"}, headers=owner_headers)
    res = client.post(f"{base}/reset", headers=owner_headers)
    assert res.status_code == 200
    assert res.json()["theme"] == "minimal"
    assert res.json()["version"] == 1


def test_appearance_owner_only(client, other_headers, product_store):
    res = client.put(
        f"/api/stores/{product_store['id']}/appearance", json={"theme": "custom"}, headers=other_headers
    )
    assert res.status_code == 403


def test_theme_catalogue(client):
    res = client.get("/api/appearance/themes")
    assert res.status_code == 200
    ids = {t["id"] for t in res.json()}
    assert {"minimal", "neon", "dark-pro"} <= ids
