import pytest
from httpx import ASGITransport, AsyncClient

from gtd_engine.regime_resolver.catalog import CustomsRegime
from gtd_engine.schemas.declaration import Declaration, LineItem


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def client():
    from gtd_engine.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def car_import() -> Declaration:
    """Import of one passenger car from Japan, priced in USD, FOB."""
    return Declaration(
        regime=CustomsRegime.IMPORT,
        declaration_type_code="40",
        currency="USD",
        exchange_rate=12_000,
        incoterms="FOB",
        items=[
            LineItem(
                item_number=1,
                description="Toyota Camry",
                hs_code="8703000000",
                origin_country_code="JP",
                item_price=1_000,
                gross_weight=1_500,
                net_weight=1_450,
            )
        ],
    )


@pytest.fixture
def structured_payload() -> dict:
    """Structured extraction from a CMR + invoice, camelCase as the service sends it."""
    return {
        "declarationType": "ИМ",
        "declarationTypeCode": "40",
        "exporter": {
            "nameAndAddress": "SHANGHAI AUTO TRADING CO., LTD. No.568 Jinshajiang Road, Shanghai",
            "countryCode": "156",
            "tin": None,
        },
        "consignee": {
            "nameAndAddress": "ООО Avto Import, г. Ташкент",
            "countryCode": "UZ",
            "tin": "301 234 567",
        },
        "declarant": {"nameAndAddress": "Broker Service LLC, Tashkent city", "tin": "305111222", "isBroker": True},
        "tradingCountryCode": "CN",
        "dispatchCountryCode": "CN",
        "destinationCountryCode": "UZ",
        "transportDeparture": {
            "count": 1,
            "type": "автомобиль",
            "vehicles": [{"plateNumber": "01A123BC", "trailerNumber": "01XA1234", "countryCode": "860"}],
        },
        "containerIndicator": "0",
        "delivery": {"incotermsCode": "FCA Shanghai", "place": "Shanghai", "paymentFormCode": "10"},
        "invoiceCurrency": "доллар",
        "items": [
            {
                "description": "Легковой автомобиль",
                "brand": "BYD",
                "vinNumber": "LGXCE4CB0P0123456",
                "yearOfManufacture": "2024",
                "condition": "new",
                "hsCode": "8703 80 000 0",
                "originCountryCode": "China",
                "grossWeight": 2100,
                "price": 25000,
                "currencyCode": "USD",
            }
        ],
        "documents": [
            {"code": "04021", "shortName": "INV", "number": "SA-2024-15", "date": "12.03.2024"},
            {"code": "02015", "shortName": "CMR", "number": None, "date": "14.03.2024"},
        ],
        "documentNumber": "SA-2024-15",
        "documentDate": "2024-03-12",
        "confidence": 0.92,
    }


@pytest.fixture
def legacy_payload() -> dict:
    """Flat invoice extraction in the older shape."""
    return {
        "exporter": {"name": "Global Motors FZE", "address": "Jebel Ali, Dubai", "country": "United Arab Emirates"},
        "consignee": {"name": "Avto Import", "address": "Tashkent", "tin": "301234567", "country": None},
        "items": [
            {"description": "Chevrolet Malibu", "quantity": 1, "weight": 1600, "price": 18000,
             "currency": "USD", "origin": "US", "hsCode": "870323", "vinNumber": "1G1ZD5ST0LF000001"},
        ],
        "financial": {"totalAmount": 18000, "currency": "$", "incoterms": "CIF Tashkent"},
        "transport": {"mode": "truck", "containerNumbers": ["MSCU1234567", "bad-number"], "vehiclePlates": ["01A777AA"]},
        "documentNumber": "GM-778",
        "documentDate": "2024-02-01",
        "confidence": 0.8,
    }
