import pytest


# ── Regimes ──


@pytest.mark.asyncio
async def test_list_regimes(client):
    response = await client.get("/api/v1/regimes")
    assert response.status_code == 200
    data = response.json()
    assert len(data) == 16
    codes = {r["regime"]: r["procedure_code"] for r in data}
    assert codes["export"] == "10"
    assert codes["import"] == "40"
    assert codes["transit"] == "80"


@pytest.mark.asyncio
async def test_get_regime_by_abbreviation(client):
    response = await client.get("/api/v1/regimes/ЭК")
    assert response.status_code == 200
    data = response.json()
    assert data["regime"] == "export"
    assert data["auto_fill"]["dispatch_country"] == "UZ"
    assert "16" in data["disabled_graphs"]
    assert "origin_country" in data["disabled_fields"]


@pytest.mark.asyncio
async def test_get_unknown_regime_404(client):
    response = await client.get("/api/v1/regimes/smuggling")
    assert response.status_code == 404


# ── Regime resolution and propagation ──


@pytest.mark.asyncio
async def test_resolve_regime_autofills(client):
    response = await client.post(
        "/api/v1/declarations/resolve-regime",
        json={"declaration": {"exporter_country": "KZ"}, "regime": "export"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["declaration"]["regime"] == "export"
    assert data["declaration"]["declaration_type_code"] == "10"
    assert data["declaration"]["dispatch_country"] == "UZ"
    assert data["declaration"]["exporter_country"] == "KZ"
    assert data["skipped"] == {"exporter_country": "UZ"}
    assert "exporter_name" in data["missing_required_fields"]


@pytest.mark.asyncio
async def test_resolve_regime_loading_state(client):
    response = await client.post(
        "/api/v1/declarations/resolve-regime",
        json={"declaration": {}, "regime": "40", "state": "loading"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["applied"] == {}
    assert data["declaration"]["regime"] is None


@pytest.mark.asyncio
async def test_resolve_unknown_regime_422(client):
    response = await client.post(
        "/api/v1/declarations/resolve-regime",
        json={"declaration": {}, "regime": "smuggling"},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_propagate(client):
    response = await client.post(
        "/api/v1/declarations/propagate",
        json={"declaration": {"regime": "import", "exporter_country": "CN", "border_transport_type": "ж/д"}},
    )
    assert response.status_code == 200
    declaration = response.json()["declaration"]
    assert declaration["dispatch_country"] == "CN"
    assert declaration["dispatch_country_code"] == "156"
    assert declaration["border_transport_mode"] == "20"


# ── Calculation ──


@pytest.mark.asyncio
async def test_calculate_declaration(client, car_import):
    response = await client.post(
        "/api/v1/declarations/calculate", json=car_import.model_dump(mode="json")
    )
    assert response.status_code == 200
    data = response.json()
    assert data["sheet_count"] == 1
    assert data["advisories"] == []
    declaration = data["declaration"]
    assert declaration["total_customs_value"] == 12_600_000.0
    assert declaration["total_payment"] == 5_795_600.0
    assert declaration["items"][0]["fee_amount"] == 50_000.0


@pytest.mark.asyncio
async def test_calculate_reports_weight_advisory(client, car_import):
    car_import.items[0].gross_weight = 1_000
    response = await client.post(
        "/api/v1/declarations/calculate", json=car_import.model_dump(mode="json")
    )
    assert response.status_code == 200
    assert len(response.json()["advisories"]) == 1


@pytest.mark.asyncio
async def test_calculate_duties(client):
    response = await client.post(
        "/api/v1/declarations/calculate-duties",
        json={
            "hs_code": "8703000000",
            "customs_value": 10_000_000,
            "quantity": 1,
            "origin_country": "jp",
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["duty_amount"] == 3_000_000.0
    assert data["vat_amount"] == 1_560_000.0
    assert data["fee_amount"] == 50_000.0
    assert data["total_payment"] == 4_610_000.0


@pytest.mark.asyncio
async def test_calculate_duties_preference(client):
    response = await client.post(
        "/api/v1/declarations/calculate-duties",
        json={
            "hs_code": "8703000000",
            "customs_value": 10_000_000,
            "quantity": 1,
            "origin_country": "KZ",
        },
    )
    data = response.json()
    assert data["preference_code"] == "200"
    assert data["preference_type"] == "EAEU"
    assert data["duty_amount"] == 0
    assert data["total_payment"] == 1_250_000.0


@pytest.mark.asyncio
async def test_calculate_duties_rejects_short_hs_code(client):
    response = await client.post(
        "/api/v1/declarations/calculate-duties",
        json={"hs_code": "8703", "customs_value": 100, "quantity": 1, "origin_country": "JP"},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_duty_rates_found(client):
    response = await client.get("/api/v1/declarations/duty-rates", params={"hs_code": "2203000000"})
    assert response.status_code == 200
    data = response.json()
    assert data["found"] is True
    assert data["excise_rate"] == 30.0


@pytest.mark.asyncio
async def test_duty_rates_not_found(client):
    response = await client.get("/api/v1/declarations/duty-rates", params={"hs_code": "9999"})
    data = response.json()
    assert data["found"] is False
    assert data["duty_rate"] == 15.0


@pytest.mark.asyncio
async def test_exchange_rate_national(client):
    response = await client.get("/api/v1/declarations/exchange-rates/сум")
    assert response.status_code == 200
    assert response.json() == {"currency": "UZS", "rate": 1.0, "source": "national"}


@pytest.mark.asyncio
async def test_exchange_rate_fallback(client):
    response = await client.get("/api/v1/declarations/exchange-rates/usd")
    data = response.json()
    assert data["source"] == "fallback"
    assert data["rate"] == 12_500.0


@pytest.mark.asyncio
async def test_exchange_rate_unknown_404(client):
    response = await client.get("/api/v1/declarations/exchange-rates/XYZ")
    assert response.status_code == 404
