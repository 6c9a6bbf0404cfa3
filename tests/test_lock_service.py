def test_lock_is_exclusive_per_user(lock_service):
    assert lock_service.acquire_checkout_lock(1, "a")
    assert not lock_service.acquire_checkout_lock(1, "b")
    assert lock_service.acquire_checkout_lock(2, "c")


def test_only_owner_can_release(lock_service):
    lock_service.acquire_checkout_lock(1, "owner")

    assert not lock_service.release_checkout_lock(1, "intruder")
    assert lock_service.is_locked(1)

    assert lock_service.release_checkout_lock(1, "owner")
    assert not lock_service.is_locked(1)


def test_lock_has_ttl(lock_service, redis_client):
    lock_service.acquire_checkout_lock(1, "owner", ttl=30)

    assert 0 < redis_client.ttl("checkout:1:lock") <= 30


def test_ping(lock_service):
    assert lock_service.ping()
