from inkroute.models.core import NoteType
from inkroute.models.note_types import NoteTypeConfig, NoteTypeRegistry


def test_default_registry_covers_every_note_type(registry):
    assert {config.note_type for config in registry.all_configs()} == set(NoteType)


def test_general_has_no_triggers(registry):
    assert registry.triggers_for(NoteType.GENERAL) == ()


def test_match_trigger_normalizes(registry):
    assert registry.match_trigger('#todo#') == NoteType.TODO
    assert registry.match_trigger('TODO') == NoteType.TODO
    assert registry.match_trigger('#Meeting') == NoteType.MEETING
    assert registry.match_trigger('#groceries#') == NoteType.SHOPPING
    assert registry.match_trigger('#nope#') is None
    assert registry.match_trigger('  ') is None


def test_all_triggers_longest_first(registry):
    lengths = [len(trigger) for trigger, _ in registry.all_triggers()]
    assert lengths == sorted(lengths, reverse=True)


def test_display_names(registry):
    assert registry.display_name(NoteType.CLAUDE_PROMPT) == 'Feature'
    assert registry.get(NoteType.TODO).detail_view_type == 'todo'


def test_register_custom_config():
    registry = NoteTypeRegistry()
    registry.register(NoteTypeConfig(NoteType.IDEA, 'Spark', 'bolt', 'bolt', ('#spark#',)))
    assert registry.match_trigger('#spark#') == NoteType.IDEA
    assert registry.display_name(NoteType.TODO) == 'todo'
