from fastfab.infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter
from fastfab.infrastructure.rate_limit import redis_rate_limiter as mod


def test_memory_rate_limiter_allows_then_blocks():
    rl = InMemoryRateLimiter()
    key = "otp:customer:+919876543210"
    assert rl.allow(key, max_requests=2, window_seconds=60) is True
    assert rl.allow(key, max_requests=2, window_seconds=60) is True
    assert rl.allow(key, max_requests=2, window_seconds=60) is False
    assert rl.allow("otp:seller:+919876543210", max_requests=2, window_seconds=60) is True


def test_memory_rate_limiter_window_slides():
    now = [1000.0]
    rl = InMemoryRateLimiter(clock=lambda: now[0])
    assert rl.allow("k", max_requests=1, window_seconds=60) is True
    assert rl.allow("k", max_requests=1, window_seconds=60) is False
    now[0] += 61
    assert rl.allow("k", max_requests=1, window_seconds=60) is True


class FakePipe:
    def __init__(self, client):
        self.client = client
        self.ops = []

    def incr(self, k, n):
        self.ops.append(("incr", k, n))
        return self

    def expire(self, k, s):
        self.ops.append(("expire", k, s))
        return self

    def execute(self):
        key = self.ops[0][1]
        self.client.store[key] = self.client.store.get(key, 0) + 1
        self.client.executed.append(self.ops)
        return [self.client.store[key], True]


class FakeRedis:
    def __init__(self):
        self.store = {}
        self.executed = []

    @classmethod
    def from_url(cls, url):
        return cls()

    def pipeline(self):
        return FakePipe(self)


def test_redis_rate_limiter_with_fake(monkeypatch):
    monkeypatch.setattr(mod.redis, "Redis", FakeRedis)

    rl = mod.RedisRateLimiter(url="redis://fake")

    assert rl.allow("otp:customer:+919876543210", max_requests=2, window_seconds=3600) is True
    assert rl.allow("otp:customer:+919876543210", max_requests=2, window_seconds=3600) is True
    assert rl.allow("otp:customer:+919876543210", max_requests=2, window_seconds=3600) is False
    assert rl.client.executed[0] == [
        ("incr", "otp-rl:otp:customer:+919876543210:3600", 1),
        ("expire", "otp-rl:otp:customer:+919876543210:3600", 3600),
    ]
