import pytest

from inkroute import mcp_interface
from inkroute.models.core import NoteType
from inkroute.services.classification import ClassificationService
from inkroute.services.extraction import ExtractionService
from inkroute.services.formatters import FormatterRegistry
from inkroute.services.pipeline import NotePipeline


@pytest.fixture
def use_pipeline(registry, monkeypatch):
    """Swap the module pipeline for one built on the given fake LLM."""

    def install(llm=None):
        pipeline = NotePipeline(registry, ClassificationService(registry, llm=llm), ExtractionService(llm=llm),
                                FormatterRegistry.default())
        monkeypatch.setattr(mcp_interface, 'pipeline', pipeline)
        return pipeline

    return install


def test_server_name():
    assert mcp_interface.mcp.name == 'Note Router'


def test_note_type_names():
    assert mcp_interface._note_type('Todo') == NoteType.TODO
    assert mcp_interface._note_type('#event#') == NoteType.EVENT
    with pytest.raises(ValueError):
        mcp_interface._note_type('banana')


class TestClassifyNote:

    def test_explicit_hashtag(self, use_pipeline):
        use_pipeline()
        result = mcp_interface.classify_note('#todo#\n[ ] Call mom')
        assert result['type'] == 'todo'
        assert result['confidence'] == 1.0
        assert result['method'] == 'explicit'
        assert set(result) == {'type', 'confidence', 'method', 'reasoning', 'promptVersion'}

    def test_explicit_trigger_argument(self, use_pipeline):
        use_pipeline()
        assert mcp_interface.classify_note('Picnic on Saturday', explicit_trigger='#event#')['type'] == 'event'

    def test_llm_classification(self, use_pipeline, make_llm):
        llm = make_llm({'type': 'idea', 'confidence': 0.9, 'reasoning': 'A brainstorm'})
        use_pipeline(llm)
        result = mcp_interface.classify_note('xyz')
        assert result == {'type': 'idea', 'confidence': 0.9, 'method': 'llm', 'reasoning': 'A brainstorm', 'promptVersion': 'v1'}
        assert len(llm.calls) == 1

    @pytest.mark.parametrize('text', ['', '   \n'])
    def test_empty_text_is_wrapped(self, use_pipeline, text):
        use_pipeline()
        with pytest.raises(Exception, match='Note classification failed: Note text is required'):
            mcp_interface.classify_note(text)


class TestExtractNoteData:

    def test_todo_list_becomes_list_of_dicts(self, use_pipeline):
        use_pipeline()
        result = mcp_interface.extract_note_data('- [x] Pay rent\n[ ] Call mom', 'todo')
        assert [todo['text'] for todo in result] == ['Pay rent', 'Call mom']
        assert [todo['is_completed'] for todo in result] == [True, False]
        assert all(isinstance(todo['id'], str) for todo in result)

    def test_record_from_llm(self, use_pipeline, make_llm):
        llm = make_llm({'merchant': 'Blue Bottle', 'amount': 4.5, 'currency': 'USD'})
        use_pipeline(llm)
        result = mcp_interface.extract_note_data('Blue Bottle coffee 4.50', '#expense#')
        assert result['merchant'] == 'Blue Bottle'
        assert result['amount'] == 4.5
        assert llm.calls[0]['stop_sequences'] == ['```']

    def test_type_without_extractor(self, use_pipeline):
        use_pipeline()
        assert mcp_interface.extract_note_data('rocket boots', 'idea') is None

    def test_unknown_type_is_wrapped(self, use_pipeline):
        use_pipeline()
        with pytest.raises(Exception, match="Note extraction failed: Unknown note type 'banana'"):
            mcp_interface.extract_note_data('rocket boots', 'banana')


class TestProcessNote:

    def test_single_note(self, use_pipeline, make_llm):
        llm = make_llm({'todos': [{'text': 'Call mom', 'priority': 'urgent'}]})
        use_pipeline(llm)
        result = mcp_interface.process_note('#todo#\n[ ] Call mom')
        assert len(result) == 1
        assert result[0]['classification']['type'] == 'todo'
        assert result[0]['content'] == '[ ] Call mom'
        assert result[0]['extracted'][0]['text'] == 'Call mom'
        assert result[0]['extracted'][0]['priority'] == 'high'
        assert result[0]['metadata']['progress'] == '0 of 1 completed'
        assert llm.calls[0]['prefill'] == '```json'

    def test_split_sections(self, use_pipeline):
        use_pipeline()
        result = mcp_interface.process_note('#todo#\n[ ] a\n#shopping#\n- milk', split_sections=True)
        assert [note['classification']['type'] for note in result] == ['todo', 'shopping']
        assert result[0]['extracted'][0]['text'] == 'a'
        assert result[1]['extracted']['items'][0]['name'] == 'milk'

    def test_llm_failure_still_returns_heuristic_data(self, use_pipeline, failing_llm):
        use_pipeline(failing_llm)
        result = mcp_interface.process_note('#todo#\n[ ] Call mom')
        assert result[0]['extracted'][0]['text'] == 'Call mom'
        assert result[0]['extracted'][0]['priority'] == 'normal'

    def test_empty_text_is_wrapped(self, use_pipeline):
        use_pipeline()
        with pytest.raises(Exception, match='Note processing failed: Note text is required'):
            mcp_interface.process_note('')


class TestFormatNote:

    def test_classifies_when_type_missing(self, use_pipeline):
        use_pipeline()
        result = mcp_interface.format_note('#todo#\n[x] laundry')
        assert result['type'] == 'todo'
        assert result['segments'] == [{'text': 'laundry', 'style': 'completed'}]
        assert result['metadata']['progress'] == '1 of 1 completed'

    def test_given_type(self, use_pipeline):
        use_pipeline()
        result = mcp_interface.format_note('Summer Picnic\nWhere: Riverside Park', 'event')
        assert result['segments'][0] == {'text': 'Summer Picnic', 'style': 'title'}
        assert result['metadata'] == {'location': 'Riverside Park'}

    def test_unknown_type_is_wrapped(self, use_pipeline):
        use_pipeline()
        with pytest.raises(Exception, match='Note formatting failed'):
            mcp_interface.format_note('laundry', 'banana')


def test_health_status(make_config, monkeypatch):
    monkeypatch.setattr(mcp_interface, 'config', make_config(llm_enabled=False))
    result = mcp_interface.health_status()
    assert result['service_name'] == 'Inkroute'
    assert result['environment'] == 'testing'
    assert result['configuration']['bedrock_llm_enabled'] is False
    assert result['health_status']['bedrock_llm']['healthy'] is True
