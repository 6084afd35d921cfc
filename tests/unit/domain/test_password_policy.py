import pytest

from radio_auth.domain.services.auth.password_policy import PasswordPolicyValidator


@pytest.fixture
def policy():
    return PasswordPolicyValidator()


def test_valid_password_has_no_errors(policy):
    result = policy.validate("NewValid123!")

    assert result.is_valid is True
    assert result.errors == []


def test_short_password_reports_only_length(policy):
    result = policy.validate("Short1!")

    assert result.is_valid is False
    assert result.errors == ["Password must be at least 8 characters long"]


def test_missing_uppercase_reports_only_uppercase(policy):
    result = policy.validate("alllowercase123!")

    assert result.is_valid is False
    assert result.errors == ["Password must contain at least one uppercase letter"]


def test_every_violated_rule_is_reported(policy):
    result = policy.validate("abc")

    assert result.is_valid is False
    assert len(result.errors) == 4
    assert any("8 characters" in e for e in result.errors)
    assert any("uppercase" in e for e in result.errors)
    assert any("digit" in e for e in result.errors)
    assert any("special character" in e for e in result.errors)


@pytest.mark.parametrize(
    "password, fragment",
    [
        ("ALLUPPERCASE123!", "lowercase"),
        ("NoDigitsHere!", "digit"),
        ("NoSpecials123", "special character"),
    ],
)
def test_single_rule_failures(policy, password, fragment):
    result = policy.validate(password)

    assert not result.is_valid
    assert len(result.errors) == 1
    assert fragment in result.errors[0]


def test_password_equal_to_email_is_rejected_regardless_of_case(policy):
    email = "Editor1!@Radio.org"

    result = policy.validate(email.upper(), email)

    assert not result.is_valid
    assert "Password must not match your email address" in result.errors


def test_email_collision_is_reported_alongside_other_rules(policy):
    result = policy.validate("a@b.org", "A@B.ORG")

    assert "Password must not match your email address" in result.errors
    assert "Password must be at least 8 characters long" in result.errors


def test_email_rule_skipped_without_email(policy):
    result = policy.validate("Editor1!@radio.org")

    assert result.is_valid


def test_empty_password_is_invalid(policy):
    result = policy.validate("")

    assert not result.is_valid
    assert len(result.errors) == 5
