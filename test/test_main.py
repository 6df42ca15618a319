"""
Tests del punto de entrada (argumentos y perfiles)
===================================================
"""

import pytest

from config import LONG_TERM_PROFILE, SHORT_TERM_PROFILE
from main import parse_args, select_profiles


def test_default_arguments_run_all_profiles():
    args = parse_args([])

    assert args.profile == "all"
    assert not args.once
    assert not args.dry_run
    assert select_profiles(args.profile) == [SHORT_TERM_PROFILE, LONG_TERM_PROFILE]


def test_single_profile_once_dry_run():
    args = parse_args(["--profile", "long", "--once", "--dry-run"])

    assert args.once and args.dry_run
    assert select_profiles(args.profile) == [LONG_TERM_PROFILE]


def test_unknown_profile_is_rejected():
    with pytest.raises(SystemExit):
        parse_args(["--profile", "weekly"])


def test_profiles_only_differ_in_parameters():
    assert SHORT_TERM_PROFILE.intervals == ("30m", "1h")
    assert LONG_TERM_PROFILE.intervals == ("24h",)
    assert (SHORT_TERM_PROFILE.golden_cross_short, SHORT_TERM_PROFILE.golden_cross_long) == (7, 25)
    assert (LONG_TERM_PROFILE.golden_cross_short, LONG_TERM_PROFILE.golden_cross_long) == (50, 200)
