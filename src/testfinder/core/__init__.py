# Core module for testfinder

from testfinder.core.classify import (
    classify,
    is_helper_path,
    is_source_path,
    is_test_path,
)
from testfinder.core.discovery import Discoverer, discover
from testfinder.core.exceptions import (
    ConfigError,
    DiscoveryCancelledError,
    DiscoveryError,
    InvalidPatternError,
    TestfinderError,
)
from testfinder.core.models import (
    Classification,
    CompositionPolicy,
    DiscoveryResult,
    NormalizedRules,
)
from testfinder.core.normalize import normalize
from testfinder.core.patterns import MatchMode, Sign, SignedRule
