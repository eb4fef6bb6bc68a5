import logging

import pytest

from inkroute.models.core import ClassificationMethod, NoteType
from inkroute.services.classification import LLM_MAX_CONFIDENCE, ClassificationService

CARD = """Jane Doe
Senior Engineer
Acme Technologies Inc.
(555) 123-4567
jane.doe@acme.com
www.acme.com
Seattle, WA 98101"""


@pytest.fixture
def service(registry):
    return ClassificationService(registry)


class TestExplicitPrecedence:

    def test_hashtag_in_text(self, service):
        classification = service.classify('#todo# buy milk')
        assert classification.note_type == NoteType.TODO
        assert classification.method == ClassificationMethod.EXPLICIT
        assert classification.confidence == 1.0

    def test_explicit_trigger_argument(self, service):
        classification = service.classify('buy milk and eggs', explicit_trigger='#shopping#')
        assert classification.note_type == NoteType.SHOPPING
        assert classification.method == ClassificationMethod.EXPLICIT

    def test_unregistered_trigger_argument_is_ignored(self, service):
        assert service.classify('xyz', explicit_trigger='#bogus#').method == ClassificationMethod.DEFAULT

    def test_explicit_wins_over_llm_and_heuristics(self, registry, make_llm):
        llm = make_llm({'type': 'meeting', 'confidence': 0.95})
        service = ClassificationService(registry, llm=llm)
        classification = service.classify('#idea#\n[ ] Call mom\n[ ] Meeting agenda')
        assert classification.note_type == NoteType.IDEA
        assert classification.confidence == 1.0
        assert llm.calls == []

    def test_manual(self, service):
        classification = service.classify_manual(NoteType.RECIPE)
        assert classification.method == ClassificationMethod.MANUAL
        assert classification.confidence == 1.0


class TestHeuristics:

    def test_fuzzy_hashtag(self, service):
        classification = service.classify('#tod0# call mom')
        assert classification.note_type == NoteType.TODO
        assert classification.method == ClassificationMethod.HEURISTIC
        assert classification.confidence == 0.85

    def test_business_card(self, service):
        classification = service.classify(CARD)
        assert classification.note_type == NoteType.CONTACT
        assert classification.method == ClassificationMethod.HEURISTIC

    def test_date_and_time_is_event(self, service):
        classification = service.classify('Dentist appointment on 6/20 at 3:30 PM')
        assert classification.note_type == NoteType.EVENT
        assert classification.confidence == 0.80

    def test_grocery_list_is_shopping(self, service):
        classification = service.classify('- 2 apples\n- 1 gallon milk\n[x] bread')
        assert classification.note_type == NoteType.SHOPPING
        assert classification.confidence == 0.75

    def test_checkbox_list_is_todo(self, service):
        classification = service.classify('[ ] Call mom\n[ ] File taxes')
        assert classification.note_type == NoteType.TODO
        assert classification.confidence == 0.80

    def test_meeting_keywords(self, service):
        classification = service.classify('Project sync meeting\nDiscussed roadmap and agenda')
        assert classification.note_type == NoteType.MEETING
        assert classification.confidence == 0.75

    def test_content_analysis(self, service):
        classification = service.classify('Dear team, kind regards')
        assert classification.note_type == NoteType.EMAIL
        assert classification.method == ClassificationMethod.CONTENT_ANALYSIS
        assert classification.confidence == 0.6

    def test_default(self, service):
        classification = service.classify('xyz')
        assert classification.note_type == NoteType.GENERAL
        assert classification.method == ClassificationMethod.DEFAULT
        assert classification.confidence == 0.5


class TestLLM:

    def test_llm_consulted_when_no_pattern_matches(self, registry, make_llm):
        llm = make_llm({'type': 'idea', 'confidence': 0.9, 'reasoning': 'A brainstorm'})
        classification = ClassificationService(registry, llm=llm).classify('xyz')
        assert classification.note_type == NoteType.IDEA
        assert classification.method == ClassificationMethod.LLM
        assert classification.confidence == 0.9
        assert classification.reasoning == 'A brainstorm'
        assert classification.prompt_version == 'v1'
        assert llm.calls[0]['prefill'] == '```json'
        assert 'claudePrompt' in llm.calls[0]['system_prompt']

    def test_llm_skipped_when_heuristic_matches(self, registry, make_llm):
        llm = make_llm()
        classification = ClassificationService(registry, llm=llm).classify('[ ] Call mom\n[ ] File taxes')
        assert classification.method == ClassificationMethod.HEURISTIC
        assert llm.calls == []

    def test_llm_confidence_is_clamped(self, registry, make_llm):
        classification = ClassificationService(registry, llm=make_llm({'type': 'todo', 'confidence': 1.5})).classify('xyz')
        assert classification.confidence == LLM_MAX_CONFIDENCE

    def test_bare_label_response(self, registry, make_llm):
        classification = ClassificationService(registry, llm=make_llm('reminder')).classify('xyz')
        assert classification.note_type == NoteType.REMINDER
        assert classification.confidence == 0.85

    def test_llm_failure_keeps_heuristic_result(self, registry, failing_llm):
        with_llm = ClassificationService(registry, llm=failing_llm).classify('Dear team, kind regards')
        without_llm = ClassificationService(registry).classify('Dear team, kind regards')

        assert with_llm.note_type == without_llm.note_type == NoteType.EMAIL
        assert with_llm.method == without_llm.method
        assert with_llm.confidence == without_llm.confidence
        assert with_llm.is_llm_fallback
        assert not without_llm.is_llm_fallback
        assert len(failing_llm.calls) == 1

    def test_unknown_label_falls_back_to_default(self, registry, make_llm):
        classification = ClassificationService(registry, llm=make_llm({'type': 'banana'})).classify('xyz')
        assert classification.note_type == NoteType.GENERAL
        assert classification.method == ClassificationMethod.DEFAULT
        assert classification.is_llm_fallback

    def test_malformed_json_falls_back(self, registry, make_llm):
        classification = ClassificationService(registry, llm=make_llm('{"type": ')).classify('xyz')
        assert classification.method == ClassificationMethod.DEFAULT
        assert classification.is_llm_fallback

    def test_unexpected_llm_error_is_a_warning(self, registry, broken_llm, caplog):
        with caplog.at_level(logging.WARNING, logger='inkroute.services.classification'):
            classification = ClassificationService(registry, llm=broken_llm).classify('xyz')

        assert classification.method == ClassificationMethod.DEFAULT
        assert classification.is_llm_fallback
        records = [record for record in caplog.records if 'Unexpected error in LLM classification' in record.getMessage()]
        assert [record.levelno for record in records] == [logging.WARNING]
