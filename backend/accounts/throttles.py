from rest_framework.throttling import AnonRateThrottle


class LoginThrottle(AnonRateThrottle):
    """
    Per-IP limit on credential checks, shared by the login API and the
    login page's token endpoint. Rate comes from
    REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']['login'] (off under tests).
    """
    scope = "login"
