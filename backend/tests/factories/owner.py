"""Factory Boy definitions for owners and location reference data."""

from __future__ import annotations

import factory

from fleetapi.models.owner import City, Country, Owner
from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class CountryFactory(BaseFactory):
    class Meta:
        model = Country
        sqlalchemy_get_or_create = ("name",)

    name = "Spain"
    iso_code = "ES"


class CityFactory(BaseFactory):
    class Meta:
        model = City

    name = factory.Sequence(lambda n: f"City {n}")
    country = factory.SubFactory(CountryFactory)


class OwnerFactory(BaseFactory):
    """Owner linked 1:1 to a freshly created user."""

    class Meta:
        model = Owner

    user = factory.SubFactory(UserFactory)
    company_name = factory.Sequence(lambda n: f"Company {n}")
    contact_email = factory.LazyAttribute(lambda o: o.user.email)
    primary_contact_name = "Grace Hopper"
    contact_phone = None
    city = None
