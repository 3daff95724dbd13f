"""Tests for liability endpoints."""

from decimal import Decimal

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.integration

BASE = "/api/v1/liabilities"


def liability_payload(**overrides) -> dict:
    payload = {
        "name": "Home loan",
        "type": "MORTGAGE",
        "category": "SECURED",
        "term": "LONG_TERM",
        "originalAmount": "5000000",
        "currentBalance": "4200000",
        "interestRate": "8.5",
        "monthlyPayment": "45000",
        "startDate": "2020-04-01",
    }
    payload.update(overrides)
    return payload


async def test_create_and_get(client: AsyncClient) -> None:
    response = await client.post(BASE, json=liability_payload())

    assert response.status_code == 201
    created = response.json()
    assert created["id"]
    assert created["isActive"] is True
    assert created["currency"] == "INR"

    response = await client.get(f"{BASE}/{created['id']}")
    assert response.status_code == 200
    assert response.json() == created


async def test_balance_above_original_amount(client: AsyncClient) -> None:
    response = await client.post(BASE, json=liability_payload(currentBalance="6000000"))

    assert response.status_code == 422


async def test_update_rejects_merged_balance(client: AsyncClient) -> None:
    created = (await client.post(BASE, json=liability_payload())).json()

    response = await client.put(f"{BASE}/{created['id']}", json={"originalAmount": "1000"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"


async def test_update_and_delete(client: AsyncClient) -> None:
    created = (await client.post(BASE, json=liability_payload())).json()
    url = f"{BASE}/{created['id']}"

    response = await client.put(url, json={"currentBalance": "4100000", "lender": "SBI"})
    assert response.status_code == 200
    assert Decimal(response.json()["currentBalance"]) == Decimal("4100000")
    assert response.json()["lender"] == "SBI"

    assert (await client.delete(url)).status_code == 204
    assert (await client.get(url)).status_code == 404
    assert (await client.get(BASE)).json() == []


async def test_metrics(client: AsyncClient) -> None:
    await client.post(BASE, json=liability_payload(currentBalance="1000", originalAmount="1000"))
    await client.post(
        BASE,
        json=liability_payload(
            type="CREDIT_CARD",
            category="UNSECURED",
            term="SHORT_TERM",
            originalAmount="500",
            currentBalance="500",
            interestRate="36",
            monthlyPayment="100",
        ),
    )

    response = await client.get(f"{BASE}/metrics")

    assert response.status_code == 200
    metrics = response.json()
    assert Decimal(metrics["securedLiabilities"]) == Decimal("1000")
    assert Decimal(metrics["unsecuredLiabilities"]) == Decimal("500")
    assert Decimal(metrics["totalLiabilities"]) == Decimal("1500")
    assert Decimal(metrics["longTermLiabilities"]) == Decimal("1000")
    assert Decimal(metrics["shortTermLiabilities"]) == Decimal("500")
    assert Decimal(metrics["averageInterestRate"]) == Decimal("22.25")
