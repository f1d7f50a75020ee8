# test_tenant.py
import pytest

from conftest import BrokenStore
from qrmenu.errors import BusinessNotFound, TransientLoadError
from qrmenu.models import Business, Owner
from qrmenu.services.tenant import TenantResolver
from qrmenu.util.slug import make_slug


def test_slug_is_derived_from_name():
    assert make_slug("Pizza Place") == "pizza-place"
    assert make_slug("Café  Ñandú & Grill") == "cafe-nandu-grill"
    assert Business(name="La Cocina de Ana").slug == "la-cocina-de-ana"


def test_resolve_by_slug(repo, seed):
    assert TenantResolver(repo).resolve("pizza-place").id == seed.business.id
    # the human-readable name resolves to the same slug
    assert TenantResolver(repo).resolve("Pizza Place").id == seed.business.id


def test_unknown_slug_never_falls_back(repo, seed):
    with pytest.raises(BusinessNotFound):
        TenantResolver(repo).resolve("burger-barn")


def test_owner_business_before_default(repo, db, seed):
    other = Business(name="Sushi Bar")
    db.add(other)
    db.flush()
    owner = Owner(business_id=other.id, name="Ken", email="ken@sushi.test", pass_hash="x")
    db.add(owner)
    db.commit()

    assert TenantResolver(repo).resolve(None, owner.id).id == other.id
    # slug still wins over the owner context
    assert TenantResolver(repo).resolve("pizza-place", owner.id).id == seed.business.id


def test_default_is_first_business(repo, seed):
    assert TenantResolver(repo).resolve().id == seed.business.id


def test_no_business_at_all(repo):
    with pytest.raises(BusinessNotFound):
        TenantResolver(repo).resolve()


def test_store_failure_is_distinct_from_not_found():
    with pytest.raises(TransientLoadError) as e:
        TenantResolver(BrokenStore()).resolve("pizza-place")
    assert e.value.retry is True
    assert e.value.kind == "load_failed"


# ---------- HTTP ----------

def test_unknown_menu_is_not_available(client):
    r = client.get("/menu/burger-barn")
    assert r.status_code == 404
    assert r.json()["kind"] == "not_available"
    assert r.json()["retry"] is False


def test_default_menu_for_signed_in_owner(client, seed):
    r = client.post("/auth/login", params={"email": "owner@pizza.test", "password": "secret"})
    assert r.status_code == 200, r.text
    token = r.json()["access_token"]

    r = client.get("/menu", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200, r.text
    assert r.json()["business"]["id"] == seed.business.id


def test_bad_login(client):
    r = client.post("/auth/login", params={"email": "owner@pizza.test", "password": "nope"})
    assert r.status_code == 401


def test_bad_token_is_rejected(client):
    r = client.get("/menu", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401
