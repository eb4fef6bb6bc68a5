"""
Prompt templates for LLM classification and extraction.
"""

from typing import Iterable

from ..models.core import NoteType

CLASSIFICATION_PROMPT_VERSION = 'v1'

CLASSIFICATION_SYSTEM_PROMPT = """
You are a classifier for handwritten notes that were captured with a camera and run through OCR.
The text may contain OCR mistakes. Return JSON only.

Schema:
```json
{{
  "type": "{type_names}",
  "confidence": 0.0,
  "reasoning": "one short sentence"
}}
```

Rules:
- Choose exactly one type from the list.
- confidence is between 0 and 1.
- Use "general" when nothing else fits, with a low confidence.
- claudePrompt means a feature request, bug report or prompt for an AI assistant.
""".strip()

EXTRACTION_SYSTEM_PROMPT = """
You extract structured data from handwritten notes that were captured with a camera and run through OCR.
The text may contain OCR mistakes. Return a single JSON object matching the requested format.
Use null for missing values. Never invent information that is not in the note.
""".strip()

TODO_EXTRACTION_PROMPT = """
Extract all todo items from this text.

Format:
```json
{{
  "todos": [
    {{
      "text": "Task description",
      "completed": false,
      "priority": "normal",
      "dueDate": "2024-12-25" or "tomorrow" or null,
      "notes": "Additional context if any"
    }}
  ]
}}
```

Rules:
- Extract ALL tasks, even if not explicitly marked
- Set completed=true if task has checkmark [x] or is marked done
- Priority: "high" (urgent/critical), "medium" (important), "normal" (default)
- Extract dates in natural language ("tomorrow", "next week") or ISO format
- If no todos found, return an empty array

Text:
{content}
""".strip()

EVENT_EXTRACTION_PROMPT = """
Extract event information from this text (flyer, invitation, announcement, etc.).

Format:
```json
{{
  "title": "Event name/title",
  "date": "2024-12-25" or "Friday, December 25" or "tomorrow" or null,
  "time": "2:00 PM" or "14:00" or null,
  "location": "Venue name and address",
  "description": "Event description or details",
  "organizer": "Organizer name",
  "contactInfo": "Phone or email",
  "isRecurring": false,
  "recurrencePattern": "daily" or "weekly" or "monthly" or null
}}
```

Rules:
- Extract title from first line or prominent text
- Keep dates as written ("tomorrow", "next Friday") or in standard formats
- Include full location/venue information
- Set isRecurring=true if event repeats

Text:
{content}
""".strip()

CONTACT_EXTRACTION_PROMPT = """
Extract contact information from this text (business card or contact note).

Format:
```json
{{
  "name": "Full name",
  "firstName": "First name",
  "lastName": "Last name",
  "phone": "Phone number as written",
  "email": "Email address as written",
  "company": "Company name",
  "title": "Job title",
  "address": "Street, city, state and zip",
  "website": "Website",
  "notes": "Anything else"
}}
```

Text:
{content}
""".strip()

SHOPPING_EXTRACTION_PROMPT = """
Extract the shopping list from this text.

Format:
```json
{{
  "storeName": "Store name or null",
  "items": [
    {{
      "name": "Item name",
      "quantity": "2" or "1 gallon" or null,
      "isChecked": false,
      "category": "produce|dairy|meat|bakery|pantry|frozen|household" or null
    }}
  ],
  "notes": "Additional notes or null"
}}
```

Rules:
- One entry per list line
- Set isChecked=true for lines marked [x] or with a checkmark

Text:
{content}
""".strip()

EXPENSE_EXTRACTION_PROMPT = """
Extract expense information from this handwritten note or receipt.

Format:
```json
{{
  "merchant": "merchant name or null",
  "amount": 123.45 or null,
  "currency": "USD" or null,
  "date": "YYYY-MM-DD or null",
  "category": "category or null",
  "paymentMethod": "payment method or null",
  "notes": "additional notes or null"
}}
```

Guidelines:
- Parse amount as a number ("$123.45" becomes 123.45), using the total when there is one
- Categorize: food, transport, shopping, utilities, entertainment, health, travel, other
- Payment method: cash, card, credit, debit, mobile

Text:
{content}
""".strip()

MEETING_EXTRACTION_PROMPT = """
Extract meeting details from these meeting notes.

Format:
```json
{{
  "subject": "Meeting subject",
  "attendees": ["Name", "Name"],
  "date": "Date as written or null",
  "time": "Time as written or null",
  "location": "Location or null",
  "agenda": "Agenda text or null",
  "actionItems": ["Action item"],
  "notes": "Discussion notes or null"
}}
```

Text:
{content}
""".strip()

RECIPE_EXTRACTION_PROMPT = """
Extract recipe information from this handwritten note.

Format:
```json
{{
  "title": "recipe name or null",
  "ingredients": ["2 cups flour", "1 tsp salt"],
  "steps": ["Step text", "Step text"],
  "servings": "serving count or null",
  "cookTime": "cooking time or null",
  "prepTime": "prep time or null",
  "notes": "additional notes or null"
}}
```

Guidelines:
- Extract all ingredients with their quantities
- Extract steps in order, without step numbers
- Parse serving count ("serves 4" becomes "4", "makes 12 cookies" becomes "12")
- Keep times as written ("30 minutes", "1 hour")
- Put tips and variations in notes
- Return empty arrays if no ingredients or steps are found

Text:
{content}
""".strip()

EMAIL_EXTRACTION_PROMPT = """
Extract the draft email from this handwritten note.

Format:
```json
{{
  "to": "recipient@example.com or null",
  "cc": "cc@example.com or null",
  "bcc": "bcc@example.com or null",
  "subject": "email subject or null",
  "body": "email body text or null"
}}
```

Guidelines:
- Multiple recipients are comma separated
- The subject often follows "Subject:", "Re:" or "Subj:"
- Preserve paragraph breaks in the body

Text:
{content}
""".strip()

EXTRACTION_PROMPTS = {
    NoteType.TODO: TODO_EXTRACTION_PROMPT,
    NoteType.EVENT: EVENT_EXTRACTION_PROMPT,
    NoteType.CONTACT: CONTACT_EXTRACTION_PROMPT,
    NoteType.SHOPPING: SHOPPING_EXTRACTION_PROMPT,
    NoteType.EXPENSE: EXPENSE_EXTRACTION_PROMPT,
    NoteType.MEETING: MEETING_EXTRACTION_PROMPT,
    NoteType.RECIPE: RECIPE_EXTRACTION_PROMPT,
    NoteType.EMAIL: EMAIL_EXTRACTION_PROMPT,
}


def classification_system_prompt(note_types: Iterable[NoteType]) -> str:
    return CLASSIFICATION_SYSTEM_PROMPT.format(type_names='|'.join(note_type.value for note_type in note_types))


def classification_user_prompt(content: str) -> str:
    return f'Classify this note:\n{content}'


def extraction_prompt(note_type: NoteType, content: str) -> str:
    return EXTRACTION_PROMPTS[note_type].format(content=content)
