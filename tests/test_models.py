import pytest

from inkroute.models.core import (ClassificationMethod, ExtractedContact, ExtractedEmail, ExtractedEvent, ExtractedExpense,
                                  ExtractedMeeting, ExtractedRecipe, ExtractedShoppingItem, ExtractedShoppingList, ExtractedTodo,
                                  NoteClassification, NoteType, ProcessedNote, record_to_dict)


class TestNoteType:

    def test_parse_is_case_insensitive(self):
        assert NoteType.parse('TODO') == NoteType.TODO
        assert NoteType.parse('claudeprompt') == NoteType.CLAUDE_PROMPT
        assert NoteType.parse('CLAUDE_PROMPT') == NoteType.CLAUDE_PROMPT
        assert NoteType.parse('#meeting#') == NoteType.MEETING

    def test_parse_unknown(self):
        assert NoteType.parse('banana') is None
        assert NoteType.parse(None) is None

    def test_from_string_defaults_to_general(self):
        assert NoteType.from_string('banana') == NoteType.GENERAL
        assert NoteType.from_string('shopping') == NoteType.SHOPPING


class TestNoteClassification:

    def test_explicit_and_manual_have_full_confidence(self):
        assert NoteClassification.explicit(NoteType.TODO, '#todo#').confidence == 1.0
        assert NoteClassification.manual(NoteType.IDEA).confidence == 1.0

    def test_user_directed_methods_require_full_confidence(self):
        with pytest.raises(ValueError):
            NoteClassification(NoteType.TODO, 0.9, ClassificationMethod.EXPLICIT)
        with pytest.raises(ValueError):
            NoteClassification(NoteType.TODO, 0.5, ClassificationMethod.MANUAL)

    def test_automatic_methods_stay_below_one(self):
        with pytest.raises(ValueError):
            NoteClassification.heuristic(NoteType.TODO, 1.0)
        with pytest.raises(ValueError):
            NoteClassification.llm(NoteType.TODO, 1.0)

    def test_confidence_range(self):
        with pytest.raises(ValueError):
            NoteClassification.llm(NoteType.TODO, 1.5)
        with pytest.raises(ValueError):
            NoteClassification.content_analysis(NoteType.TODO, -0.1)

    def test_confidence_helpers(self):
        classification = NoteClassification.heuristic(NoteType.EVENT, 0.75)
        assert classification.confidence_percentage == '75%'
        assert classification.should_request_confirmation
        assert not classification.is_high_confidence
        assert not classification.is_low_confidence
        assert not NoteClassification.explicit(NoteType.EVENT).should_request_confirmation
        assert NoteClassification.default().is_low_confidence

    def test_llm_fallback_flag(self):
        assert NoteClassification.heuristic(NoteType.TODO, 0.8, 'LLM fallback (timeout): Checkbox list').is_llm_fallback
        assert not NoteClassification.heuristic(NoteType.TODO, 0.8, 'Checkbox list').is_llm_fallback

    def test_to_dict(self):
        data = NoteClassification.llm(NoteType.CLAUDE_PROMPT, 0.9, 'feature request', 'v1').to_dict()
        assert data == {'type': 'claudePrompt', 'confidence': 0.9, 'method': 'llm', 'reasoning': 'feature request', 'promptVersion': 'v1'}

    def test_method_display_names(self):
        assert ClassificationMethod.EXPLICIT.display_name == 'Hashtag'
        assert ClassificationMethod.LLM.display_name == 'AI Detection'
        assert not ClassificationMethod.MANUAL.is_automatic
        assert ClassificationMethod.CONTENT_ANALYSIS.is_automatic


class TestExtractedRecords:

    def test_records_compare_without_ids(self):
        first, second = ExtractedTodo('Buy milk'), ExtractedTodo('Buy milk')
        assert first.id != second.id
        assert first == second

    def test_todo_from_json(self):
        todo = ExtractedTodo.from_json({'text': ' Buy milk ', 'completed': 'true', 'priority': 'urgent', 'dueDate': 'tomorrow'})
        assert todo == ExtractedTodo('Buy milk', is_completed=True, priority='high', due_date='tomorrow')

    def test_todo_from_json_requires_text(self):
        with pytest.raises(ValueError):
            ExtractedTodo.from_json({'text': '  '})

    def test_todo_due_date(self, now):
        todo = ExtractedTodo('Pay rent', due_date='tomorrow')
        assert todo.parsed_due_date(now).day == 13

    def test_event_from_json_and_datetime(self, now):
        event = ExtractedEvent.from_json({'title': 'Dentist', 'date': 'tomorrow', 'time': '2:00 PM', 'isRecurring': False})
        assert event.has_minimum_data
        assert event.parsed_datetime(now) == now.replace(day=13, hour=14, minute=0)

    def test_event_time_without_date_means_today(self, now):
        event = ExtractedEvent(title='Call', time='3pm')
        assert event.parsed_datetime(now) == now.replace(hour=15, minute=0)

    def test_event_without_title_has_no_minimum_data(self):
        assert not ExtractedEvent(date='tomorrow').has_minimum_data

    def test_contact_name_from_parts(self):
        contact = ExtractedContact.from_json({'firstName': 'Jane', 'lastName': 'Doe'})
        assert contact.name == 'Jane Doe'
        assert contact.has_minimum_data
        assert not ExtractedContact().has_minimum_data

    def test_shopping_list_from_json(self):
        shopping = ExtractedShoppingList.from_json({
            'storeName': 'Costco',
            'items': [{'name': 'milk', 'quantity': '1 gallon'}, {'name': 'bread', 'isChecked': True}],
        })
        assert shopping.store_name == 'Costco'
        assert shopping.unchecked_count == 1
        assert shopping.items[0].display_name == '1 gallon milk'
        assert ExtractedShoppingItem('eggs').display_name == 'eggs'

    def test_shopping_list_rejects_wrong_shape(self):
        with pytest.raises(ValueError):
            ExtractedShoppingList.from_json({'items': 'milk, eggs'})

    def test_expense_amount_from_string(self):
        expense = ExtractedExpense.from_json({'merchant': 'Cafe', 'amount': '$1,234.50', 'currency': None})
        assert expense.amount == 1234.5
        assert expense.currency == 'USD'
        assert expense.has_minimum_data

    def test_expense_rejects_non_numeric_amount(self):
        with pytest.raises(ValueError):
            ExtractedExpense.from_json({'amount': 'lots'})

    def test_meeting_from_json_splits_strings(self):
        meeting = ExtractedMeeting.from_json({'subject': 'Sync', 'attendees': 'Alice, Bob', 'actionItems': 'Ship it\nWrite notes'})
        assert meeting.attendees == ['Alice', 'Bob']
        assert meeting.action_items == ['Ship it', 'Write notes']

    def test_recipe_from_json(self):
        recipe = ExtractedRecipe.from_json({'title': 'Pancakes', 'ingredients': ['2 cups flour', ' ', None], 'steps': 'Mix\nFry',
                                            'servings': 4, 'prepTime': '5 min'})
        assert recipe == ExtractedRecipe(title='Pancakes', ingredients=['2 cups flour'], steps=['Mix', 'Fry'], servings='4',
                                         prep_time='5 min')
        assert recipe.has_minimum_data
        assert not ExtractedRecipe.from_json({'title': 'Pancakes'}).has_minimum_data

    def test_recipe_rejects_wrong_shape(self):
        with pytest.raises(ValueError):
            ExtractedRecipe.from_json({'ingredients': {'flour': 2}})

    def test_email_from_json_and_recipients(self):
        email = ExtractedEmail.from_json({'to': 'bob@example.com, amy@example.com', 'bcc': 'boss@example.com;', 'subject': ' '})
        assert email.to_recipients == ['bob@example.com', 'amy@example.com']
        assert email.bcc_recipients == ['boss@example.com']
        assert email.cc_recipients == []
        assert email.subject is None
        assert email.has_minimum_data
        assert not ExtractedEmail.from_json({'cc': 'amy@example.com'}).has_minimum_data


def test_processed_note_to_dict():
    note = ProcessedNote(classification=NoteClassification.explicit(NoteType.TODO, '#todo#'),
                         content='[ ] Call mom',
                         extracted=[ExtractedTodo('Call mom')],
                         metadata={'totalCount': 1})
    data = note.to_dict()
    assert data['classification']['method'] == 'explicit'
    assert data['extracted'][0]['text'] == 'Call mom'
    assert data['metadata'] == {'totalCount': 1}


def test_record_to_dict_none():
    assert record_to_dict(None) is None
