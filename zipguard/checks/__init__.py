"""Independent rule checks run by :mod:`zipguard.rules`."""
