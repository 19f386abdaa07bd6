"""
Tests for CorrelationMetadata tokens and dicts.
"""

import uuid

import pytest

from payments.correlation import MAX_TOKEN_LENGTH, CorrelationMetadata


class TestCorrelationToken:
    def test_token_with_milestone(self):
        commission_id, milestone_id = str(uuid.uuid4()), str(uuid.uuid4())
        correlation = CorrelationMetadata(commission_id, "milestone", milestone_id)

        token = correlation.to_token()

        assert token == f"{commission_id}|milestone|{milestone_id}"
        assert CorrelationMetadata.from_token(token) == correlation

    def test_two_uuids_fit_paypal_limit(self):
        token = CorrelationMetadata(str(uuid.uuid4()), "milestone", str(uuid.uuid4())).to_token()

        assert len(token) <= MAX_TOKEN_LENGTH

    def test_separator_in_value_rejected(self):
        with pytest.raises(ValueError):
            CorrelationMetadata("abc|def", "deposit").to_token()

    def test_oversized_token_rejected(self):
        with pytest.raises(ValueError):
            CorrelationMetadata("x" * 120, "deposit", "y" * 10).to_token()

    @pytest.mark.parametrize("token", [None, "", "only-one-part", "a||b", "a|b|c|d"])
    def test_malformed_tokens_parse_to_none(self, token):
        assert CorrelationMetadata.from_token(token) is None


class TestCorrelationDict:
    def test_as_dict_omits_missing_milestone(self):
        assert CorrelationMetadata("c1", "deposit").as_dict() == {
            "commissionId": "c1",
            "paymentType": "deposit",
        }

    def test_from_stripe_metadata(self):
        metadata = {"commissionId": "c1", "paymentType": "milestone", "milestoneId": "m1", "transactionId": "t1"}

        assert CorrelationMetadata.from_dict(metadata) == CorrelationMetadata("c1", "milestone", "m1")

    def test_incomplete_metadata(self):
        assert CorrelationMetadata.from_dict({"commissionId": "c1"}) is None
        assert CorrelationMetadata.from_dict(None) is None
