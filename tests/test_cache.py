from logistik.core.cache import QueryCache, RECYCLE_BIN
from logistik.services.master_service import VendorService


def test_invalidate_drops_every_scope_of_an_entity():
    cache = QueryCache(ttl_seconds=60)
    cache.set("vendors", [1])
    cache.set("vendors", [2], scope="active")
    cache.set("customers", [3])

    assert cache.invalidate("vendors") == 2
    assert cache.get("vendors") is None
    assert cache.get("vendors", scope="active") is None
    assert cache.get("customers") == [3]


def test_expired_entries_are_dropped():
    cache = QueryCache(ttl_seconds=60)
    cache.set("trucks", ["B 1234 CD"], ttl=-1)
    assert cache.get("trucks") is None


def test_list_is_served_from_cache_until_a_mutation(db):
    service = VendorService(db)
    service.create({"company_name": "PT Samudra"})
    db.commit()
    assert [v["company_name"] for v in service.list()] == ["PT Samudra"]

    # A write that bypasses the service is not seen while the cache is warm
    db.execute(VendorService.model.__table__.update().values(company_name="PT Renamed"))
    db.commit()
    assert service.list()[0]["company_name"] == "PT Samudra"

    service.create({"company_name": "PT Baru"})
    db.commit()
    names = {v["company_name"] for v in service.list()}
    assert names == {"PT Renamed", "PT Baru"}


def test_soft_delete_invalidates_recycle_bin_key(db):
    from logistik.core.cache import query_cache

    service = VendorService(db)
    vendor = service.create({"company_name": "PT Hapus"})
    db.commit()
    query_cache.set(RECYCLE_BIN, [])

    service.delete(vendor.id)
    db.commit()
    assert query_cache.get(RECYCLE_BIN) is None


def test_zero_ttl_disables_caching():
    cache = QueryCache(ttl_seconds=0)
    cache.set(RECYCLE_BIN, [{"id": 1}])
    assert cache.get(RECYCLE_BIN) is None


def test_default_ttl_is_short():
    from logistik.core.config import Settings

    assert 0 < Settings().CACHE_TTL_SECONDS <= 60
