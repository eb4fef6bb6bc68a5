"""
Note type configuration and the registry of hashtag triggers.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .core import NoteType


@dataclass(frozen=True)
class NoteTypeConfig:
    """Display properties and hashtag triggers for one note type."""
    note_type: NoteType
    display_name: str
    icon: str
    footer_icon: str
    triggers: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def name(self) -> str:
        return self.note_type.value

    @property
    def detail_view_type(self) -> str:
        return self.note_type.value


BUILT_IN_CONFIGS = [
    NoteTypeConfig(NoteType.GENERAL, 'Note', 'doc.text', 'text.alignleft'),
    NoteTypeConfig(NoteType.TODO, 'To-Do', 'checkmark.square', 'checkmark.square', ('#todo#', '#to-do#', '#tasks#', '#task#')),
    NoteTypeConfig(NoteType.EMAIL, 'Email', 'envelope', 'paperplane', ('#email#', '#mail#')),
    NoteTypeConfig(NoteType.MEETING, 'Meeting', 'calendar', 'person.2', ('#meeting#', '#notes#', '#minutes#')),
    NoteTypeConfig(NoteType.REMINDER, 'Reminder', 'bell', 'clock', ('#reminder#', '#remind#', '#remindme#')),
    NoteTypeConfig(NoteType.EVENT, 'Event', 'calendar.badge.plus', 'clock', ('#event#', '#appointment#', '#schedule#', '#appt#')),
    NoteTypeConfig(NoteType.EXPENSE, 'Expense', 'dollarsign.circle', 'creditcard', ('#expense#', '#receipt#', '#spent#', '#paid#')),
    NoteTypeConfig(NoteType.SHOPPING, 'Shopping', 'cart', 'bag', ('#shopping#', '#shop#', '#grocery#', '#groceries#', '#list#')),
    NoteTypeConfig(NoteType.RECIPE, 'Recipe', 'fork.knife', 'list.bullet', ('#recipe#', '#cook#', '#bake#')),
    NoteTypeConfig(NoteType.IDEA, 'Idea', 'lightbulb', 'brain', ('#idea#', '#thought#', '#note-to-self#', '#notetoself#')),
    NoteTypeConfig(NoteType.CLAUDE_PROMPT, 'Feature', 'sparkles', 'arrow.up.circle',
                   ('#claude#', '#feature#', '#prompt#', '#request#', '#issue#')),
    NoteTypeConfig(NoteType.CONTACT, 'Contact', 'person.crop.circle', 'person', ('#contact#', '#person#', '#phone#')),
]


class NoteTypeRegistry:
    """Mapping from note type to its configuration.

    Built once by the caller and passed to the services that need it.
    """

    def __init__(self, configs: Optional[List[NoteTypeConfig]] = None):
        self._configs: Dict[NoteType, NoteTypeConfig] = {}
        for config in configs or []:
            self.register(config)

    @classmethod
    def default(cls) -> 'NoteTypeRegistry':
        return cls(BUILT_IN_CONFIGS)

    def register(self, config: NoteTypeConfig) -> None:
        self._configs[config.note_type] = config

    def get(self, note_type: NoteType) -> Optional[NoteTypeConfig]:
        return self._configs.get(note_type)

    def all_configs(self) -> List[NoteTypeConfig]:
        return list(self._configs.values())

    def triggers_for(self, note_type: NoteType) -> Tuple[str, ...]:
        config = self._configs.get(note_type)
        return config.triggers if config else ()

    def all_triggers(self) -> List[Tuple[str, NoteType]]:
        """Return every (trigger, note type) pair, longest trigger first."""
        pairs = [(trigger, config.note_type) for config in self._configs.values() for trigger in config.triggers]
        return sorted(pairs, key=lambda pair: -len(pair[0]))

    def match_trigger(self, trigger: Optional[str]) -> Optional[NoteType]:
        """Resolve a hashtag trigger to its note type.

        Matching is case-insensitive and the surrounding '#' characters are optional.

        Args:
            trigger: Trigger text such as '#todo#', 'TODO' or '#todo'

        Returns:
            Matching NoteType, or None if the trigger is not registered
        """
        if not trigger or not trigger.strip():
            return None
        normalized = f"#{trigger.strip().strip('#').lower()}#"
        for registered, note_type in self.all_triggers():
            if registered == normalized:
                return note_type
        return None

    def display_name(self, note_type: NoteType) -> str:
        config = self._configs.get(note_type)
        return config.display_name if config else note_type.value
