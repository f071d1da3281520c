"""Rules: reusable setup/teardown wrapped around tests."""

from tessel.rules.base import ExternalResource, RuleBinding, TestRule, apply_rules, sort_bindings
from tessel.rules.temporary_folder import TemporaryFolder
from tessel.rules.timeout import Timeout


__all__ = [
    "ExternalResource",
    "RuleBinding",
    "TemporaryFolder",
    "TestRule",
    "Timeout",
    "apply_rules",
    "sort_bindings",
]
