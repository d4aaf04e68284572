# -*- test-case-name: tidings.test -*-
# Copyright (c) 2011-2021. See LICENSE for details.

"""
Tests for L{tidings}.

Set C{TIDINGS_HYPOTHESIS_PROFILE} to C{"quick"} for a shorter run of the
property tests.
"""

from os import environ

from hypothesis import HealthCheck, settings


_patient = settings(
    deadline=None,
    suppress_health_check=[
        HealthCheck.too_slow,
        HealthCheck.differing_executors,
    ],
)

settings.register_profile("patience", _patient)
settings.register_profile("quick", settings(_patient, max_examples=20))
settings.load_profile(environ.get("TIDINGS_HYPOTHESIS_PROFILE", "patience"))
