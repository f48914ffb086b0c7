from django.conf import settings

DEFAULTS = {
    # A declined request leaves history behind; when True either side may
    # send a fresh request afterwards.
    "ALLOW_REQUEST_AFTER_DECLINE": True,
    # Owners and admins may not follow their own company.
    "FORBID_SELF_FOLLOW": True,
    # Membership roles that may act on behalf of a company.
    "ADMIN_ROLES": ("OWNER", "ADMIN"),
}


def engine_setting(name):
    """Return ``settings.RELATIONSHIPS[name]``, falling back to the default."""
    if name not in DEFAULTS:
        raise KeyError(f"Unknown relationships setting: {name}")
    overrides = getattr(settings, "RELATIONSHIPS", None) or {}
    return overrides.get(name, DEFAULTS[name])
