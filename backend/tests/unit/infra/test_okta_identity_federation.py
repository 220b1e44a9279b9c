"""Okta adapter tests with HTTP mocked by ``responses``."""

from __future__ import annotations

import json

import pytest
import requests
import responses
from responses import matchers

from fleetapi.infra.okta.okta_identity_federation import (
    OktaIdentityFederation,
    owner_group_name,
)

BASE = "https://acme.okta.test"


@pytest.fixture()
def okta() -> OktaIdentityFederation:
    return OktaIdentityFederation(domain="acme.okta.test", api_token="tok", timeout=1.0)


def test_owner_group_name_is_prefixed_and_lowercased():
    assert owner_group_name("  Acme Logistics ") == "fleet-acme logistics"


def test_from_config_requires_domain_and_token():
    assert not OktaIdentityFederation.from_config({"OKTA_DOMAIN": "x.okta.com"}).configured
    assert OktaIdentityFederation.from_config(
        {"OKTA_DOMAIN": "x.okta.com", "OKTA_API_TOKEN": "t"}
    ).configured


@responses.activate
def test_ensure_owner_group_reuses_existing_group(okta):
    # Arrange
    responses.add(
        responses.GET,
        f"{BASE}/api/v1/groups",
        json=[{"id": "00g1", "profile": {"name": "fleet-acme"}}],
        match=[matchers.query_param_matcher({"q": "fleet-acme", "limit": "1"})],
    )

    # Act
    group_id = okta.ensure_owner_group("Acme")

    # Assert
    assert group_id == "00g1"
    assert len(responses.calls) == 1
    assert responses.calls[0].request.headers["Authorization"] == "SSWS tok"


@responses.activate
def test_ensure_owner_group_creates_missing_group(okta):
    responses.add(responses.GET, f"{BASE}/api/v1/groups", json=[])
    responses.add(responses.POST, f"{BASE}/api/v1/groups", json={"id": "00g2"}, status=200)

    assert okta.ensure_owner_group("Acme") == "00g2"
    body = json.loads(responses.calls[1].request.body)
    assert body["profile"]["name"] == "fleet-acme"


@responses.activate
def test_provision_user_activates_and_assigns_group(okta):
    responses.add(
        responses.POST,
        f"{BASE}/api/v1/users",
        json={"id": "00u1"},
        match=[matchers.query_param_matcher({"activate": "true"})],
    )

    external_id = okta.provision_user(
        email="a@acme.test",
        password="CorrectHorse99!",
        first_name="Ada",
        last_name="Lovelace",
        group_id="00g1",
    )

    assert external_id == "00u1"
    body = json.loads(responses.calls[0].request.body)
    assert body["profile"]["login"] == "a@acme.test"
    assert body["profile"]["firstName"] == "Ada"
    assert body["groupIds"] == ["00g1"]


@responses.activate
def test_provider_errors_degrade_to_none(okta):
    responses.add(responses.GET, f"{BASE}/api/v1/groups", status=500)
    responses.add(responses.POST, f"{BASE}/api/v1/groups", json={"errorCode": "E0000001"}, status=400)
    responses.add(responses.POST, f"{BASE}/api/v1/users", body="not json", status=200)

    assert okta.ensure_owner_group("Acme") is None
    assert okta.provision_user(
        email="a@acme.test", password="x", first_name="", last_name=""
    ) is None


@responses.activate
@pytest.mark.parametrize(
    "listing",
    [
        [{"id": "00g1", "profile": None}],
        ["fleet-acme"],
        [{"profile": {"name": "fleet-acme"}}],
        {"id": "00g1"},
    ],
)
def test_unexpected_group_bodies_fall_through_to_create(okta, listing):
    responses.add(responses.GET, f"{BASE}/api/v1/groups", json=listing)
    responses.add(responses.POST, f"{BASE}/api/v1/groups", json={"id": "00g2"})

    assert okta.ensure_owner_group("Acme") == "00g2"


@responses.activate
@pytest.mark.parametrize("created", ["id", ["id"], {"id": None}, {"id": {"nested": 1}}])
def test_unexpected_created_bodies_degrade_to_none(okta, created):
    responses.add(responses.GET, f"{BASE}/api/v1/groups", json=[])
    responses.add(responses.POST, f"{BASE}/api/v1/groups", json=created)
    responses.add(responses.POST, f"{BASE}/api/v1/users", json=created)

    assert okta.ensure_owner_group("Acme") is None
    assert okta.provision_user(
        email="a@acme.test", password="x", first_name="A", last_name="B"
    ) is None


@responses.activate
def test_timeouts_degrade_to_none(okta):
    responses.add(responses.POST, f"{BASE}/api/v1/users", body=requests.Timeout("slow"))

    assert okta.provision_user(
        email="a@acme.test", password="x", first_name="A", last_name="B"
    ) is None


def test_unconfigured_adapter_makes_no_calls():
    okta = OktaIdentityFederation(domain="", api_token="")
    with responses.RequestsMock() as rsps:
        assert okta.ensure_owner_group("Acme") is None
        assert okta.provision_user(
            email="a@acme.test", password="x", first_name="A", last_name="B"
        ) is None
        assert len(rsps.calls) == 0
