"""Tests for the transfer snapshot cache."""

from decimal import Decimal

import pytest

from land_registry import cache, transfers
from land_registry.exceptions import Forbidden


class BrokenCache:
    """Cache stand-in whose every call fails like an unreachable Redis."""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise ConnectionError('cache unavailable')
        return fail


@pytest.fixture
def broken_cache(monkeypatch):
    monkeypatch.setattr(cache, 'get_cache', BrokenCache)


class TestKeys:
    """Tests for key construction."""

    def test_district_key_is_quoted(self):
        assert cache.district_key('Nyarugenge West') == 'land_transfer:district:Nyarugenge%20West'

    def test_stats_key_keeps_scope_separator(self):
        assert cache.stats_key('user:7') == 'land_transfer:stats:user:7'

    def test_ttl_falls_back_to_default(self, settings):
        settings.LAND_TRANSFER_CACHE_TTLS = {'transfer': 5}
        assert cache.ttl('transfer') == 5
        assert cache.ttl('history') == 900


@pytest.mark.django_db
class TestTransferCacheKeys:
    """The invalidation set is derived from the transfer alone."""

    def test_covers_every_dependent_key(self, transfer, owner, buyer, land):
        keys = cache.transfer_cache_keys(transfer)
        assert keys == [
            f"land_transfer:{transfer.pk}",
            f"land_transfer:user:{owner.pk}",
            f"land_transfer:user:{buyer.pk}",
            f"land_transfer:history:{land.pk}",
            'land_transfer:district:Gasabo',
            f"land_transfer:stats:user:{owner.pk}",
            f"land_transfer:stats:user:{buyer.pk}",
            'land_transfer:stats:district:Gasabo',
            'land_transfer:stats:all',
        ]


@pytest.mark.django_db
class TestReadThrough:
    """Reads populate the cache and mutations invalidate it after commit."""

    def test_get_populates_cache(self, transfer, owner):
        transfers.get_transfer(transfer.pk, owner)
        assert cache.fetch(cache.transfer_key(transfer.pk))['transfer_number'] == 'TRF-1'

    def test_mutation_invalidates_after_commit(self, transfer, owner, django_capture_on_commit_callbacks):
        transfers.get_transfer(transfer.pk, owner)
        with django_capture_on_commit_callbacks(execute=True):
            transfers.cancel_transfer(transfer.pk, owner)

        assert cache.fetch(cache.transfer_key(transfer.pk)) is None
        assert transfers.get_transfer(transfer.pk, owner)['status'] == 'cancelled'

    def test_statistics_invalidated_by_new_transfer(self, make_land, owner, buyer, system_admin,
                                                    django_capture_on_commit_callbacks):
        assert transfers.transfer_statistics(system_admin)['total'] == 0
        with django_capture_on_commit_callbacks(execute=True):
            transfers.initiate_transfer(
                owner, land_id=make_land(owner).pk, new_owner_id=buyer.pk,
                transfer_number='TRF-7', transfer_value=Decimal('100'),
            )
        assert transfers.transfer_statistics(system_admin)['total'] == 1

    def test_history_invalidated_by_approval(self, transfer, land, buyer, land_officer,
                                             django_capture_on_commit_callbacks):
        assert transfers.transfer_history(land.pk, buyer)[0]['status'] == 'initiated'
        with django_capture_on_commit_callbacks(execute=True):
            transfers.approve_transfer(transfer.pk, land_officer)
        assert transfers.transfer_history(land.pk, buyer)[0]['status'] == 'completed'


@pytest.mark.django_db
class TestFailuresAreSwallowed:
    """Cache errors degrade to database reads."""

    def test_operations_do_not_raise(self, broken_cache):
        assert cache.fetch('land_transfer:x') is None
        cache.store('land_transfer:x', {}, 'transfer')
        cache.invalidate(['land_transfer:x'])
        assert cache.warm_transfers([{'id': 'x'}]) == 0

    def test_health_reports_disconnected(self, broken_cache):
        assert cache.health()['connected'] is False

    def test_workflow_survives_broken_cache(self, broken_cache, transfer, owner, land_officer,
                                            django_capture_on_commit_callbacks):
        assert transfers.get_transfer(transfer.pk, owner)['status'] == 'initiated'
        with django_capture_on_commit_callbacks(execute=True):
            result = transfers.approve_transfer(transfer.pk, land_officer)
        assert result.status == 'completed'


@pytest.mark.django_db
class TestCacheAdministration:
    """Tests for cache_health and preload_transfer_cache."""

    def test_health_for_admins(self, district_admin, system_admin):
        for actor in (district_admin, system_admin):
            health = transfers.cache_health(actor)
            assert health['connected'] is True
            assert health['timestamp']

    def test_health_denied_to_citizens(self, owner):
        with pytest.raises(Forbidden):
            transfers.cache_health(owner)

    def test_preload_warms_open_transfers(self, transfer, owner, land_officer, system_admin):
        assert transfers.preload_transfer_cache(system_admin) == 1
        assert cache.fetch(cache.transfer_key(transfer.pk))['id'] == str(transfer.pk)

    def test_preload_skips_closed_transfers(self, transfer, owner, system_admin):
        transfers.cancel_transfer(transfer.pk, owner)
        assert transfers.preload_transfer_cache(system_admin) == 0

    def test_preload_requires_system_admin(self, district_admin):
        with pytest.raises(Forbidden):
            transfers.preload_transfer_cache(district_admin)
