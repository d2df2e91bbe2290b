"""
Tests for destination parsing

Covers the [@organization/]name@version selector and the map key helpers.
"""

import pytest

from apipush.push.destination import get_destination_props, parse_destination, split_api_key
from apipush.push.exceptions import InvalidDestination


class TestParseDestination:
    """Test cases for parse_destination"""

    def test_with_organization(self):
        destination = parse_destination("@acme/pets@1.0.0")
        assert destination.organization_id == "acme"
        assert destination.name == "pets"
        assert destination.version == "1.0.0"

    def test_without_organization(self):
        destination = parse_destination("pets@1.0.0")
        assert destination.organization_id is None
        assert destination.name == "pets"
        assert destination.version == "1.0.0"
        assert destination.key == "pets@1.0.0"

    def test_version_with_label(self):
        destination = parse_destination("pets@v2.1-beta_3")
        assert destination.version == "v2.1-beta_3"

    @pytest.mark.parametrize("value", ["not-valid", "pets@", "@1.0.0", "@acme/pets", "pets@1.0@2", "", "pets@1.0.0\n"])
    def test_invalid_values_rejected(self, value):
        with pytest.raises(InvalidDestination):
            parse_destination(value)

    def test_invalid_message_mentions_format(self):
        with pytest.raises(InvalidDestination) as exc_info:
            parse_destination("not-valid")
        assert "<api-name@api-version>" in str(exc_info.value)
        assert "not-valid" in str(exc_info.value)


class TestDestinationProps:
    """Test cases for organization fallback"""

    def test_destination_organization_wins(self):
        destination = get_destination_props("@acme/pets@1.0.0", "configured-org")
        assert destination.organization_id == "acme"

    def test_falls_back_to_configured_organization(self):
        destination = get_destination_props("pets@1.0.0", "configured-org")
        assert destination.organization_id == "configured-org"

    def test_no_destination(self):
        destination = get_destination_props(None, "configured-org")
        assert destination.organization_id == "configured-org"
        assert destination.name == ""
        assert destination.version == ""


class TestSplitApiKey:
    """Test cases for name@version map keys"""

    def test_split(self):
        assert split_api_key("pets@1.0.0") == ("pets", "1.0.0")

    def test_version_defaults_to_latest(self):
        assert split_api_key("pets") == ("pets", "latest")
