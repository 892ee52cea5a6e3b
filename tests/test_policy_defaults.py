"""Tests for policy text resolution."""

import json

import pytest

from tourpricing.services.policy_defaults import (
    POLICY_KEYS,
    PolicyResolver,
    load_default_policies,
    parse_policy_field,
)


class TestParsePolicyField:
    """Tests for normalizing stored policy values."""

    def test_list_values(self):
        assert parse_policy_field(["Meals", "  ", None, "Transfers"]) == ["Meals", "Transfers"]

    def test_json_encoded_list(self):
        assert parse_policy_field(json.dumps(["One", "Two"])) == ["One", "Two"]

    def test_newline_and_bullet_text(self):
        text = "Rooms subject to availability\n• Check-in at 2 PM\n\nNon-refundable deposit"
        assert parse_policy_field(text) == [
            "Rooms subject to availability",
            "Check-in at 2 PM",
            "Non-refundable deposit",
        ]

    def test_objects_with_text(self):
        assert parse_policy_field([{"text": "Airport pickup"}, {"label": "Breakfast"}]) == [
            "Airport pickup",
            "Breakfast",
        ]

    def test_blank_values(self):
        assert parse_policy_field(None) == []
        assert parse_policy_field("   ") == []
        assert parse_policy_field("[]") == []


class TestPolicyResolver:
    """Tests for layered policy lookup."""

    def test_packaged_defaults_cover_every_key(self):
        defaults = load_default_policies()

        for key in POLICY_KEYS:
            assert defaults[key], key

    def test_explicit_value_wins(self):
        resolver = PolicyResolver()

        assert resolver.resolve("inclusions", explicit=["Private cab"], location=["Shared cab"]) == [
            "Private cab"
        ]

    def test_location_value_used_when_no_explicit(self):
        resolver = PolicyResolver()

        assert resolver.resolve("payment_terms", explicit="", location='["Full payment upfront"]') == [
            "Full payment upfront"
        ]

    def test_default_used_last(self):
        resolver = PolicyResolver(defaults={"exclusions": ["Air fare"]})

        assert resolver.resolve("exclusions") == ["Air fare"]

    def test_unknown_key(self):
        with pytest.raises(KeyError):
            PolicyResolver().resolve("refund_rules")

    def test_resolve_all(self):
        sections = PolicyResolver().resolve_all(explicit={"useful_tips": ["Carry woollens"]})

        assert set(sections) == set(POLICY_KEYS)
        assert sections["useful_tips"] == ["Carry woollens"]
        assert sections["cancellation_policy"] == load_default_policies()["cancellation_policy"]
