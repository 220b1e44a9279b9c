from __future__ import annotations

import pytest

from fleetapi.models.owner import Owner
from tests.factories.owner import CityFactory, OwnerFactory


def test_owner_links_user_and_location(session):
    city = CityFactory(name="Lisbon")
    owner = OwnerFactory(company_name="  Acme  ", contact_email=" Ops@Acme.TEST ", city=city)

    assert owner.company_name == "Acme"
    assert owner.contact_email == "ops@acme.test"
    assert owner.identity_user_id == owner.user.id
    assert owner.user.owner is owner
    assert owner.city.country.name == "Spain"


def test_company_name_is_required():
    with pytest.raises(ValueError):
        Owner(company_name="   ")
