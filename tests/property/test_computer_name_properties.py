"""
Property-based tests for computer name derivation and password generation.

Uses Hypothesis to test naming invariants across many random host names.
"""

import string

from hypothesis import given, settings, strategies as st

from realm_ad.environment.format_utils import hostfqdn_to_computer_name
from realm_ad.environment.security.security_config_utils import generate_random_ad_password


# =============================================================================
# STRATEGIES
# =============================================================================

# DNS labels: letters, digits and hyphens
label_strategy = st.text(alphabet=string.ascii_letters + string.digits + "-", min_size=1, max_size=63)

fqdn_strategy = st.lists(label_strategy, min_size=1, max_size=5).map(".".join)

prefix_strategy = st.text(alphabet=string.ascii_letters + string.digits, min_size=0, max_size=20)


# =============================================================================
# NAMING PROPERTIES
# =============================================================================


class TestComputerNameProperties:
    """Property-based tests for hostfqdn_to_computer_name."""

    @given(fqdn=fqdn_strategy, prefix=prefix_strategy, hash_enabled=st.booleans(), use_fqdn=st.booleans())
    @settings(max_examples=200)
    def test_name_fits_netbios_limit(self, fqdn, prefix, hash_enabled, use_fqdn):
        """Property: Names never exceed 15 characters."""
        name = hostfqdn_to_computer_name(fqdn, prefix, hash_enabled, use_fqdn)
        assert len(name) <= 15

    @given(fqdn=fqdn_strategy, prefix=prefix_strategy, hash_enabled=st.booleans(), use_fqdn=st.booleans())
    def test_name_is_uppercase(self, fqdn, prefix, hash_enabled, use_fqdn):
        """Property: Names are always uppercase."""
        name = hostfqdn_to_computer_name(fqdn, prefix, hash_enabled, use_fqdn)
        assert name == name.upper()

    @given(fqdn=fqdn_strategy, prefix=prefix_strategy, hash_enabled=st.booleans(), use_fqdn=st.booleans())
    def test_name_is_deterministic(self, fqdn, prefix, hash_enabled, use_fqdn):
        """Property: Same host and policy always give the same name."""
        first = hostfqdn_to_computer_name(fqdn, prefix, hash_enabled, use_fqdn)
        second = hostfqdn_to_computer_name(fqdn, prefix, hash_enabled, use_fqdn)
        assert first == second

    @given(fqdn=fqdn_strategy)
    def test_only_first_label_used(self, fqdn):
        """Property: Without use_fqdn, only the short hostname matters."""
        short_name = fqdn.split(".")[0]
        assert hostfqdn_to_computer_name(fqdn) == hostfqdn_to_computer_name(short_name)
        assert hostfqdn_to_computer_name(fqdn) == short_name[:15].upper()

    @given(label=label_strategy, prefix=st.text(alphabet=string.ascii_letters, min_size=1, max_size=5))
    def test_prefix_never_doubled(self, label, prefix):
        """Property: A hostname that starts with the prefix is not prefixed again."""
        prefixed_host = prefix + label + ".example.com"
        expected = (prefix + label)[:15].upper()
        assert hostfqdn_to_computer_name(prefixed_host, prefix) == expected

    @given(label=label_strategy, prefix=st.text(alphabet=string.ascii_letters, min_size=1, max_size=5))
    def test_prefix_leads_name(self, label, prefix):
        """Property: A prefixed name always starts with the prefix."""
        name = hostfqdn_to_computer_name(label + ".example.com", prefix)
        assert name.startswith(prefix.upper())

    @given(fqdn=fqdn_strategy, prefix=prefix_strategy)
    def test_hashed_names_are_hex(self, fqdn, prefix):
        """Property: A hashed name is the prefix followed by hex digits."""
        name = hostfqdn_to_computer_name(fqdn, prefix, hash_enabled=True)
        if prefix:
            assert name.startswith(prefix[:15].upper())
        remainder = name[len(prefix):]
        assert set(remainder) <= set("0123456789ABCDEF")


# =============================================================================
# PASSWORD PROPERTIES
# =============================================================================


class TestPasswordProperties:
    """Property-based tests for generate_random_ad_password."""

    @given(length=st.integers(min_value=1, max_value=256))
    @settings(max_examples=50)
    def test_length_and_alphabet(self, length):
        """Property: Passwords have the requested length and only letters and digits."""
        password = generate_random_ad_password(length)
        assert len(password) == length
        assert set(password) <= set(string.ascii_letters + string.digits)
