from logistik.core.rate_limit import SlidingWindowLimiter, Rule, RULES


def test_rule_matching():
    limiter = SlidingWindowLimiter()
    assert limiter.rule_for("POST", "/api/v1/auth/login").max_requests == 5
    assert limiter.rule_for("POST", "/api/v1/job-orders/3/files").prefix == "/api/v1/job-orders/"
    # Reads are not limited outside the explicit prefixes
    assert limiter.rule_for("GET", "/api/v1/job-orders/3/files") is None
    assert limiter.rule_for("GET", "/manage-users").prefix == "/manage-users"
    assert limiter.rule_for("GET", "/health") is None
    assert RULES[0].prefix == "/api/v1/auth/login"


def test_window_slides():
    rule = Rule("/x", 2, 10)
    limiter = SlidingWindowLimiter([rule])

    assert limiter.hit(rule, "1.1.1.1", now=0.0) == (True, 1, 0)
    assert limiter.hit(rule, "1.1.1.1", now=1.0) == (True, 0, 0)
    assert limiter.hit(rule, "1.1.1.1", now=2.0) == (False, 0, 8)
    # Other clients have their own window
    assert limiter.hit(rule, "2.2.2.2", now=2.0)[0] is True
    # The first hit has left the window
    assert limiter.hit(rule, "1.1.1.1", now=10.5)[0] is True
