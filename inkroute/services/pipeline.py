"""
Note processing pipeline: classify, clean, extract and describe a note.
"""

from typing import List, Optional

from ..models.core import FormattedNote, NoteSection, NoteType, ProcessedNote
from ..models.note_types import NoteTypeRegistry
from ..utils.bedrock_llm import BedrockLLM
from ..utils.config import AppConfig
from ..utils.logging_config import get_logger
from .classification import ClassificationService
from .extraction import ExtractionService
from .formatters import FormatterRegistry
from .triggers import TriggerDetector

logger = get_logger(__name__)


class NotePipeline:
    """Unified entry point running classification, extraction and formatting for a note."""

    def __init__(self,
                 registry: NoteTypeRegistry,
                 classifier: ClassificationService,
                 extractor: ExtractionService,
                 formatters: FormatterRegistry):
        """
        Initialize the pipeline.

        Args:
            registry: Note type registry shared with the classifier
            classifier: Classification service
            extractor: Structured extraction service
            formatters: Formatter dispatch table
        """
        self.registry = registry
        self.classifier = classifier
        self.extractor = extractor
        self.formatters = formatters
        self.triggers = TriggerDetector(registry)

        logger.info('Initialized NotePipeline')

    @classmethod
    def from_config(cls, app_config: AppConfig, registry: Optional[NoteTypeRegistry] = None) -> 'NotePipeline':
        """Build a pipeline from application configuration.

        The Bedrock client is only created when it is enabled, and each service
        receives it only when its own ``use_llm`` flag is set.
        """
        registry = registry or NoteTypeRegistry.default()
        llm = BedrockLLM(app_config.bedrock_llm) if app_config.bedrock_llm.enabled else None

        classifier = ClassificationService(registry,
                                           llm=llm if app_config.classification.use_llm else None,
                                           prompt_version=app_config.classification.prompt_version)
        extractor = ExtractionService(llm=llm if app_config.extraction.use_llm else None)
        return cls(registry, classifier, extractor, FormatterRegistry.default())

    def process(self, text: str, explicit_trigger: Optional[str] = None) -> ProcessedNote:
        """Classify a note and extract its structured data.

        Args:
            text: OCR'd note text
            explicit_trigger: Hashtag chosen by the user, if any

        Returns:
            ProcessedNote with trigger tags removed from the content
        """
        classification = self.classifier.classify(text, explicit_trigger)
        content = self.triggers.strip_trigger_tags(text, classification.note_type)
        extracted = self.extractor.extract(classification.note_type, content)
        metadata = self.formatters.extract_metadata(content, classification.note_type)

        logger.debug(f'Processed note as {classification.note_type.value} via {classification.method.value} '
                     f'({classification.confidence_percentage})')
        return ProcessedNote(classification=classification, content=content, extracted=extracted, metadata=metadata)

    def process_sections(self, text: str) -> List[ProcessedNote]:
        """Process each hashtag-delimited section of a note independently."""
        sections = self.triggers.split_into_sections(text, self.classifier.classify)
        return [self._process_section(section) for section in sections]

    def _process_section(self, section: NoteSection) -> ProcessedNote:
        content = self.triggers.strip_trigger_tags(section.content, section.note_type)
        return ProcessedNote(classification=section.classification,
                             content=content,
                             extracted=self.extractor.extract(section.note_type, content),
                             metadata=self.formatters.extract_metadata(content, section.note_type))

    def format(self, text: str, note_type: Optional[NoteType] = None) -> FormattedNote:
        """Format a note for display, classifying it first when no type is given."""
        if note_type is None:
            note_type = self.classifier.classify(text).note_type
        content = self.triggers.strip_trigger_tags(text, note_type)
        return self.formatters.format(content, note_type)
