import pytest

from inkroute.services.business_card import DISQUALIFIED_SCORE, BusinessCardDetector

CARD = """Jane Doe
Senior Engineer
Acme Technologies Inc.
(555) 123-4567
jane.doe@acme.com
www.acme.com
Seattle, WA 98101"""


@pytest.fixture
def detector(registry):
    return BusinessCardDetector(registry)


def test_business_card_scores_above_threshold(detector):
    signals = dict(detector.signals(CARD))
    assert signals['phone'] == 20
    assert signals['email'] == 20
    assert signals['website'] == 15
    assert signals['city, state zip'] == 15
    assert signals['name-like first line'] == 5
    assert detector.is_business_card(CARD)


def test_other_type_trigger_disqualifies(detector):
    assert detector.score('#todo#\n' + CARD) == DISQUALIFIED_SCORE
    assert not detector.is_business_card('#todo#\n' + CARD)


def test_contact_trigger_does_not_disqualify(detector):
    assert detector.is_business_card('#contact#\n' + CARD)


def test_prose_is_not_a_card(detector):
    assert detector.score('I went to the store today and bought some things for dinner.') < detector.threshold


def test_email_alone_does_not_count_as_website(detector):
    signals = dict(detector.signals('Bob\nbob@example.com'))
    assert 'website' not in signals
