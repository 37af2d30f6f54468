"""
API tests for the emission factors endpoint.
"""

from decimal import Decimal

import pytest

from carp.test.conftest import auth_headers
from carp.test.factory.emission_factor import (
    DieselBusFactorFactory,
    EmissionFactorFactory,
    LargeGasolineCarFactorFactory,
)
from carp.test.factory.user import UserFactory


@pytest.mark.asyncio
async def test_factors_require_a_caller(test_async_client):
    """Test that anonymous requests are rejected."""
    response = await test_async_client.get("/api/v1/factors/")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_unknown_caller_is_rejected(test_async_client):
    """Test that an X-User-Id matching no user is rejected."""
    response = await test_async_client.get(
        "/api/v1/factors/", headers={"X-User-Id": "999"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_suspended_caller_is_forbidden(test_async_client):
    """Test that suspended users cannot call the API."""
    user = await UserFactory(status="suspended")
    response = await test_async_client.get("/api/v1/factors/", headers=auth_headers(user))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_emission_factors_empty(test_async_client):
    """Test listing emission factors when database is empty."""
    user = await UserFactory()
    response = await test_async_client.get("/api/v1/factors/", headers=auth_headers(user))
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_list_emission_factors_hides_inactive(test_async_client):
    """Test that inactive factors are only listed on request."""
    user = await UserFactory()
    await EmissionFactorFactory()
    await LargeGasolineCarFactorFactory(is_active=False)
    await DieselBusFactorFactory()

    response = await test_async_client.get("/api/v1/factors/", headers=auth_headers(user))
    assert response.status_code == 200
    assert len(response.json()) == 2

    response = await test_async_client.get(
        "/api/v1/factors/?include_inactive=true", headers=auth_headers(user)
    )
    assert len(response.json()) == 3


@pytest.mark.asyncio
async def test_filter_emission_factors_by_profile(test_async_client):
    """Test filtering emission factors by vehicle and fuel type."""
    user = await UserFactory()
    await EmissionFactorFactory()
    await LargeGasolineCarFactorFactory()
    await DieselBusFactorFactory()

    response = await test_async_client.get(
        "/api/v1/factors/?vehicle_type=car&fuel_type=gasoline", headers=auth_headers(user)
    )
    assert response.status_code == 200
    data = response.json()
    assert len(data) == 2
    assert all(item["vehicle_type"] == "car" for item in data)

    response = await test_async_client.get(
        "/api/v1/factors/?vehicle_type=spaceship", headers=auth_headers(user)
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_emission_factor_by_id(test_async_client):
    """Test retrieving a specific emission factor by ID."""
    user = await UserFactory()
    factor = await EmissionFactorFactory()

    response = await test_async_client.get(
        f"/api/v1/factors/{factor.id}", headers=auth_headers(user)
    )
    assert response.status_code == 200

    data = response.json()
    assert data["id"] == factor.id
    assert data["description"] == "Average gasoline car"
    assert Decimal(data["factor_g_per_km"]) == Decimal("120")


@pytest.mark.asyncio
async def test_get_emission_factor_not_found(test_async_client):
    """Test retrieving non-existent emission factor."""
    user = await UserFactory()
    response = await test_async_client.get("/api/v1/factors/12345", headers=auth_headers(user))
    assert response.status_code == 404
    assert response.json()["detail"] == "Emission factor 12345 not found"
