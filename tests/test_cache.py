import sys
import threading

from cache import FIFOCache, create_fingerprint


def test_fifo_eviction_ignores_reads():
    cache = FIFOCache(2)
    cache.put("a", 1)
    cache.put("b", 2)
    assert cache.get("a") == 1  # no reordering on read
    cache.put("c", 3)

    assert "a" not in cache
    assert cache.get("b") == 2
    assert cache.get("c") == 3
    assert len(cache) == 2


def test_overwrite_does_not_evict():
    cache = FIFOCache(2)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.put("a", 10)
    assert cache.get("a") == 10
    assert cache.stats() == {"size": 2, "max_size": 2}


def test_clear():
    cache = FIFOCache(3)
    cache.put("a", 1)
    cache.clear()
    assert cache.get("a") is None
    assert cache.stats()["size"] == 0


def test_fingerprint_rounds_to_precision():
    a = [(59.30001, 18.00001), (59.4, 18.1), (59.5, 18.2)]
    b = [(59.30004, 18.00002), (59.4, 18.1), (59.5, 18.2)]
    assert create_fingerprint(a, 4) == create_fingerprint(b, 4)
    assert create_fingerprint(a, 5) != create_fingerprint(b, 5)


def test_fingerprint_samples_first_middle_last():
    a = [(0.0, 0.0), (1.0, 1.0), (2.0, 2.0), (3.0, 3.0), (4.0, 4.0)]
    b = [(0.0, 0.0), (9.0, 9.0), (2.0, 2.0), (9.0, 9.0), (4.0, 4.0)]
    assert create_fingerprint(a, 4) == create_fingerprint(b, 4)


def test_fingerprint_includes_options():
    coords = [(0.0, 0.0), (1.0, 1.0)]
    assert create_fingerprint(coords, 4, {"profile": "walking"}) != create_fingerprint(coords, 4, {"profile": "driving"})
    assert create_fingerprint(coords, 4, {"a": 1, "b": 2}) == create_fingerprint(coords, 4, {"b": 2, "a": 1})
    assert create_fingerprint([], 4) == ""


def test_concurrent_puts_respect_max_size():
    cache = FIFOCache(5)
    sizes = []
    old_interval = sys.getswitchinterval()
    sys.setswitchinterval(1e-6)

    def writer(worker):
        for i in range(5000):
            cache.put(f"{worker}-{i}", i)
            sizes.append(len(cache))

    try:
        threads = [threading.Thread(target=writer, args=(w,)) for w in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
    finally:
        sys.setswitchinterval(old_interval)

    assert max(sizes) <= 5
    assert cache.stats() == {"size": 5, "max_size": 5}
