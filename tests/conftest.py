"""Pytest configuration and fixtures."""

from decimal import Decimal

import pytest
from django.core.cache import caches

from land_registry import events, transfers
from land_registry.models import LandRecord, User


@pytest.fixture(autouse=True)
def land_settings(settings):
    """In-memory events and a private cache for every test."""
    settings.LAND_EVENTS = {
        'BACKEND': 'land_registry.events.MemoryEventBackend',
        'SOURCE': 'land-admin-test',
        'VERSION': '1.0.0',
    }
    settings.CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'land-admin-tests',
        }
    }
    settings.LAND_TRANSFER_TAX_RATE = Decimal('0.05')
    events.outbox.clear()
    caches['default'].clear()
    yield
    events.outbox.clear()


@pytest.fixture
def make_user(db):
    """Factory for users with a role and district."""
    def _make(username, role=User.Role.CITIZEN, district='Gasabo', **extra):
        return User.objects.create_user(
            username=username, password='password123', role=role, district=district, **extra
        )
    return _make


@pytest.fixture
def owner(make_user):
    return make_user('alice', first_name='Alice', last_name='Uwase')


@pytest.fixture
def buyer(make_user):
    return make_user('bob', first_name='Bob', last_name='Mugisha')


@pytest.fixture
def outsider(make_user):
    """Citizen who is party to no transfer."""
    return make_user('carol')


@pytest.fixture
def land_officer(make_user):
    return make_user('officer.gasabo', role=User.Role.LAND_OFFICER, district='Gasabo')


@pytest.fixture
def other_land_officer(make_user):
    return make_user('officer.kicukiro', role=User.Role.LAND_OFFICER, district='Kicukiro')


@pytest.fixture
def registrar(make_user):
    return make_user('registrar', role=User.Role.REGISTRAR, district='')


@pytest.fixture
def district_admin(make_user):
    return make_user('district.admin', role=User.Role.DISTRICT_ADMIN, district='Gasabo')


@pytest.fixture
def system_admin(make_user):
    return make_user('sysadmin', role=User.Role.SYSTEM_ADMIN, district='')


@pytest.fixture
def tax_officer(make_user):
    return make_user('tax.officer', role=User.Role.TAX_OFFICER, district='')


@pytest.fixture
def make_land(db):
    """Factory for parcels, approved unless told otherwise."""
    counter = {'value': 0}

    def _make(owner, status=LandRecord.Status.APPROVED, district='Gasabo', **extra):
        counter['value'] += 1
        index = counter['value']
        fields = dict(
            parcel_number=f"GAS-{index:05d}",
            upi_number=f"1/02/01/{index:04d}",
            owner=owner,
            area_sqm=Decimal('600.00'),
            district=district,
            sector='Kimironko',
            cell='Bibare',
            village='Imena',
            status=status,
        )
        fields.update(extra)
        return LandRecord.objects.create(**fields)
    return _make


@pytest.fixture
def land(make_land, owner):
    return make_land(owner)


@pytest.fixture
def transfer(land, owner, buyer):
    """Freshly initiated transfer of ``land`` from owner to buyer."""
    return transfers.initiate_transfer(
        owner,
        land_id=land.pk,
        new_owner_id=buyer.pk,
        transfer_number='TRF-1',
        transfer_value=Decimal('1000000'),
        reason='Sale',
    )
