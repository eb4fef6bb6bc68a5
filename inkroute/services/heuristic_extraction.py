"""
Regex and keyword heuristics that turn note text into extracted records.

Every function here is pure: it only reads the text it is given and always
returns a record, possibly with empty fields.
"""

import re
from typing import Callable, Dict, List, Optional, Pattern, Tuple

from ..models.core import (ExtractedContact, ExtractedEmail, ExtractedEvent, ExtractedExpense, ExtractedMeeting, ExtractedRecipe,
                           ExtractedShoppingItem, ExtractedShoppingList, ExtractedTodo, PRIORITY_HIGH, PRIORITY_MEDIUM,
                           PRIORITY_NORMAL)
from ..utils.patterns import (CITY_STATE_ZIP_PATTERN, ZIP_PATTERN, find_date, find_email, find_mentions, find_phone, find_time,
                              find_url, is_checked_marker, split_list_marker)

TRIGGER_LINE_PATTERN = re.compile(r'^#[\w-]+#?$')

# Todos

TODO_PREFIX_PATTERN = re.compile(r'^TODO:?\s*(.+)$', re.IGNORECASE)

DUE_DATE_PATTERNS = [
    re.compile(r'due\s+(\d{1,2}/\d{1,2})', re.IGNORECASE),
    re.compile(r'by\s+(\w+\s+\d{1,2})', re.IGNORECASE),
    re.compile(r'(\d{1,2}/\d{1,2}/\d{2,4})'),
    re.compile(r'due\s+(today|tomorrow|\w+day)', re.IGNORECASE),
]

# Shopping

QUANTITY_WITH_UNIT_PATTERN = re.compile(r'^(\d+(?:\.\d+)?)\s+(lb|lbs|oz|kg|g|gallon|quart|pint|cup|package|bag|box|can)s?\s+', re.IGNORECASE)
BARE_QUANTITY_PATTERN = re.compile(r'^(\d+)\s+')

SHOPPING_CATEGORIES: List[Tuple[str, List[str]]] = [
    ('produce', ['apple', 'banana', 'orange', 'lettuce', 'tomato', 'carrot', 'onion', 'potato', 'fruit', 'vegetable']),
    ('dairy', ['milk', 'cheese', 'yogurt', 'butter', 'cream', 'eggs']),
    ('meat', ['chicken', 'beef', 'pork', 'fish', 'turkey', 'bacon', 'sausage']),
    ('bakery', ['bread', 'bagel', 'donut', 'cake', 'pastry']),
    ('pantry', ['rice', 'pasta', 'flour', 'sugar', 'oil', 'cereal', 'can']),
    ('frozen', ['ice cream', 'frozen', 'pizza']),
    ('household', ['detergent', 'soap', 'paper towel', 'toilet paper', 'cleaner']),
]

# Longest keywords first so 'ice cream' beats 'cream'
_CATEGORY_KEYWORDS = sorted(((keyword, category) for category, keywords in SHOPPING_CATEGORIES for keyword in keywords),
                            key=lambda pair: -len(pair[0]))

STORE_KEYWORDS = ['costco', 'walmart', 'target', 'whole foods', 'trader joe', 'safeway', 'kroger', 'store', 'market', 'shop']

# Events

EVENT_LABELS: Dict[str, List[str]] = {
    'title': ['title', 'event', 'what'],
    'date': ['date', 'when', 'on'],
    'time': ['time'],
    'location': ['location', 'where', 'venue', 'place', 'address', 'at'],
    'organizer': ['organizer', 'organiser', 'host', 'hosted by'],
    'contact_info': ['contact', 'phone', 'email', 'rsvp'],
    'description': ['description', 'details', 'notes'],
}

LOCATION_PATTERN = re.compile(r"\bat\s+(?:the\s+)?([A-Z][\w'&.-]*(?:\s+[A-Z][\w'&.-]*)*)")
STREET_PATTERN = re.compile(r'^\d+\s+\w+.*\b(?:street|st|avenue|ave|road|rd|boulevard|blvd|drive|dr|lane|ln|way|court|ct)\b\.?', re.IGNORECASE)
RECURRENCE_PATTERN = re.compile(r'\b(daily|weekly|monthly|yearly|annually|every\s+(?:other\s+)?\w+)\b', re.IGNORECASE)

# Contacts

CONTACT_LABELS: Dict[str, List[str]] = {
    'name': ['name'],
    'phone': ['phone', 'tel', 'cell', 'mobile', 'ph'],
    'email': ['email', 'e-mail'],
    'company': ['company', 'org', 'organization'],
    'title': ['title', 'position', 'role'],
    'address': ['address', 'addr'],
    'website': ['website', 'web', 'url'],
}

JOB_TITLE_KEYWORDS = [
    'ceo', 'cto', 'cfo', 'coo', 'cmo', 'president', 'vice president', 'vp ', 'director', 'manager', 'supervisor', 'engineer',
    'developer', 'designer', 'architect', 'analyst', 'consultant', 'specialist', 'coordinator', 'executive', 'administrator',
    'associate', 'founder', 'co-founder', 'partner', 'owner', 'sales', 'marketing', 'account', 'business development', 'senior',
    'junior', 'lead', 'head of', 'chief'
]

COMPANY_KEYWORDS = [
    'inc', 'llc', 'ltd', 'corp', 'corporation', 'company', 'co.', 'group', 'holdings', 'solutions', 'services', 'consulting',
    'partners', 'technologies', 'tech', 'systems', 'enterprises', 'industries', 'associates', 'agency', 'studio', 'labs',
    'ventures', 'capital', 'media'
]

STREET_INDICATORS = [
    'street', 'st.', 'st,', 'avenue', 'ave.', 'ave,', 'boulevard', 'blvd', 'road', 'rd.', 'rd,', 'drive', 'dr.', 'dr,', 'lane',
    'ln.', 'court', 'ct.', 'suite', 'ste.', 'floor', 'fl.', 'apt', 'unit'
]

STATE_ABBREVIATIONS = {
    'al', 'ak', 'az', 'ar', 'ca', 'co', 'ct', 'de', 'fl', 'ga', 'hi', 'id', 'il', 'in', 'ia', 'ks', 'ky', 'la', 'me', 'md', 'ma',
    'mi', 'mn', 'ms', 'mo', 'mt', 'ne', 'nv', 'nh', 'nj', 'nm', 'ny', 'nc', 'nd', 'oh', 'ok', 'or', 'pa', 'ri', 'sc', 'sd', 'tn',
    'tx', 'ut', 'vt', 'va', 'wa', 'wv', 'wi', 'wy'
}

# Expenses

AMOUNT_PATTERNS = [
    re.compile(r'[$€£¥]\s*(\d+(?:,\d{3})*(?:\.\d{2})?)'),
    re.compile(r'(\d+(?:,\d{3})*(?:\.\d{2}))\s*[$€£¥]'),
    re.compile(r'(\d+(?:,\d{3})*\.\d{2})'),
]
CURRENCY_SYMBOLS = [('€', 'EUR'), ('£', 'GBP'), ('¥', 'JPY')]

EXPENSE_DATE_PATTERNS = [
    (re.compile(r'(\d{4})-(\d{2})-(\d{2})'), lambda m: f'{m.group(1)}-{m.group(2)}-{m.group(3)}'),
    (re.compile(r'(\d{2})/(\d{2})/(\d{4})'), lambda m: f'{m.group(3)}-{m.group(1)}-{m.group(2)}'),
    (re.compile(r'(\d{2})-(\d{2})-(\d{4})'), lambda m: f'{m.group(3)}-{m.group(2)}-{m.group(1)}'),
]

EXPENSE_CATEGORIES: List[Tuple[str, List[str]]] = [
    ('food', ['restaurant', 'food', 'dining', 'lunch', 'dinner', 'breakfast', 'cafe', 'coffee']),
    ('transport', ['uber', 'lyft', 'taxi', 'gas', 'fuel', 'parking', 'transit', 'metro', 'bus']),
    ('shopping', ['store', 'amazon', 'shop', 'retail', 'purchase', 'buy']),
    ('utilities', ['electric', 'water', 'internet', 'phone', 'utility']),
    ('entertainment', ['movie', 'concert', 'game', 'ticket', 'show', 'theater']),
    ('health', ['pharmacy', 'doctor', 'hospital', 'medical', 'health', 'clinic']),
    ('travel', ['hotel', 'flight', 'airline', 'booking', 'airbnb']),
]

PAYMENT_METHODS: List[Tuple[str, List[str]]] = [
    ('mobile', ['apple pay', 'venmo', 'paypal', 'zelle', 'cashapp']),
    ('cash', ['cash']),
    ('credit', ['credit']),
    ('debit', ['debit']),
    ('card', ['card', 'visa', 'mastercard', 'amex']),
]

# Meetings

MEETING_SECTION_PATTERN = re.compile(r'(?i)(agenda:|action items:|discussion:|notes:|location:|date:|time:|attendees:|next meeting:)')
SUBJECT_PREFIX_PATTERN = re.compile(r'^(?:meeting|minutes)\s*:\s*', re.IGNORECASE)

# Recipes

RECIPE_SECTIONS: List[Tuple[str, Pattern]] = [
    ('ingredients', re.compile(r'^[#*\s-]*ingredients?\s*:?\s*$', re.IGNORECASE)),
    ('steps', re.compile(r'^[#*\s-]*(?:directions?|instructions?|steps|method)\s*:?\s*$', re.IGNORECASE)),
    ('notes', re.compile(r'^[#*\s-]*(?:notes?|tips?)\s*:?\s*$', re.IGNORECASE)),
]

INGREDIENT_UNIT_PATTERN = re.compile(
    r'(?:\d+(?:[./]\d+)?|[½¼¾⅓⅔⅛])\s*(?:cups?|tbsps?|tsps?|tablespoons?|teaspoons?|oz|ounces?|lbs?|pounds?|g|grams?|kg|ml|l)\b'
    r'|\b(?:pinch|dash|handful)\b', re.IGNORECASE)
STEP_NUMBER_PATTERN = re.compile(r'^(?:\d+[.):]|step\s+\d+)', re.IGNORECASE)
STEP_PREFIX_PATTERN = re.compile(r'^(?:\d+[.):\s]+|step\s+\d+:?\s*)', re.IGNORECASE)
INGREDIENT_MARKER_PATTERN = re.compile(r'^(?:[-*•]|\[[ xX]?\])\s*')

COOKING_VERBS = [
    'mix', 'stir', 'bake', 'cook', 'heat', 'add', 'combine', 'whisk', 'pour', 'fold', 'beat', 'melt', 'boil', 'simmer', 'fry',
    'sauté', 'saute', 'roast', 'grill', 'blend', 'chop', 'dice', 'slice', 'preheat', 'serve'
]
COOKING_VERB_PATTERN = re.compile(r'\b(?:' + '|'.join(COOKING_VERBS) + r')\b', re.IGNORECASE)

SERVINGS_PATTERNS = [
    re.compile(r'\bservings?[:\s]+(\d+(?:-\d+)?)', re.IGNORECASE),
    re.compile(r'\bserves?[:\s]+(\d+(?:-\d+)?)', re.IGNORECASE),
    re.compile(r'\bmakes?\s+(\d+)', re.IGNORECASE),
    re.compile(r'\byields?[:\s]+(\d+(?:-\d+)?)', re.IGNORECASE),
    re.compile(r'\b(\d+)\s+(?:servings?|portions?)\b', re.IGNORECASE),
]

RECIPE_DURATION = r'(\d+(?:\.\d+)?\s*(?:minutes?|mins?|hours?|hrs?))\b'
RECIPE_METADATA_LABEL = re.compile(r'^(?:serves?|servings?|makes?|yields?|(?:prep|cook|cooking|total)\s*(?:time\b|:))', re.IGNORECASE)

# Emails

EMAIL_FIELD_PREFIXES: List[Tuple[str, Tuple[str, ...]]] = [
    ('to', ('to:', 'to ', 'recipient:', 'send to:')),
    ('cc', ('cc:', 'cc ', 'copy:')),
    ('bcc', ('bcc:', 'bcc ')),
    ('subject', ('subject:', 'subj:', 're:', 'regarding:')),
]
EMAIL_GREETING_PATTERN = re.compile(r'^(?:dear|hi|hello|hey)\b', re.IGNORECASE)


def _lines(text: str) -> List[str]:
    """Non-empty stripped lines, without bare hashtag trigger lines."""
    return [line for line in (raw.strip() for raw in text.splitlines()) if line and not TRIGGER_LINE_PATTERN.match(line)]


def _split_label(line: str, labels: Dict[str, List[str]]) -> Optional[Tuple[str, str]]:
    """Match a 'label: value' line against a table of field labels."""
    if ':' not in line:
        return None
    label, value = line.split(':', 1)
    label = label.strip().lower()
    value = value.strip()
    if not value:
        return None
    for field_name, aliases in labels.items():
        if label in aliases:
            return field_name, value
    return None


def todo_priority_from_text(text: str) -> str:
    lowered = text.lower()
    if '!!!' in text or 'urgent' in lowered or 'critical' in lowered:
        return PRIORITY_HIGH
    if '!!' in text or 'important' in lowered:
        return PRIORITY_MEDIUM
    return PRIORITY_NORMAL


def todo_due_date(text: str) -> Optional[str]:
    """Return the raw due-date phrase of a task, if any."""
    for pattern in DUE_DATE_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def parse_todo_line(line: str) -> Optional[ExtractedTodo]:
    """Parse one checkbox, bullet, numbered or 'TODO:' line into a task."""
    stripped = line.strip()
    if not stripped:
        return None

    split = split_list_marker(stripped)
    if split:
        marker, task = split
        completed = is_checked_marker(marker)
    else:
        match = TODO_PREFIX_PATTERN.match(stripped)
        if not match:
            return None
        task = match.group(1).strip()
        completed = False

    if not task:
        return None
    return ExtractedTodo(text=task, is_completed=completed, priority=todo_priority_from_text(task), due_date=todo_due_date(task))


def extract_todos(text: str) -> List[ExtractedTodo]:
    """Extract every task line from the text, in order."""
    todos = []
    for line in _lines(text):
        todo = parse_todo_line(line)
        if todo:
            todos.append(todo)
    return todos


def split_quantity(text: str) -> Tuple[Optional[str], str]:
    """Split '1 gallon milk' into ('1 gallon', 'milk') and '2 apples' into ('2', 'apples')."""
    match = QUANTITY_WITH_UNIT_PATTERN.match(text)
    if match:
        return match.group(0).strip(), text[match.end():].strip()
    match = BARE_QUANTITY_PATTERN.match(text)
    if match:
        return match.group(1), text[match.end():].strip()
    return None, text.strip()


def shopping_category(name: str) -> Optional[str]:
    lowered = name.lower()
    for keyword, category in _CATEGORY_KEYWORDS:
        if re.search(r'\b' + re.escape(keyword), lowered):
            return category
    return None


def parse_shopping_item(line: str) -> Optional[ExtractedShoppingItem]:
    split = split_list_marker(line)
    if not split:
        return None
    marker, rest = split
    quantity, name = split_quantity(rest)
    if not name:
        return None
    return ExtractedShoppingItem(name=name, quantity=quantity, is_checked=is_checked_marker(marker), category=shopping_category(name))


def _store_name(line: str) -> Optional[str]:
    lowered = line.lower()
    if any(keyword in lowered for keyword in STORE_KEYWORDS):
        return line.strip(':#- ') or None
    return None


def extract_shopping_list(text: str) -> ExtractedShoppingList:
    """Extract items, an optional store name and trailing notes from a shopping list.

    Every checkbox, bullet or numbered line becomes exactly one item.
    """
    store_name = None
    items: List[ExtractedShoppingItem] = []
    notes: List[str] = []

    for line in _lines(text):
        if split_list_marker(line):
            item = parse_shopping_item(line)
            if item:
                items.append(item)
            continue
        if store_name is None:
            store_name = _store_name(line)
            if store_name:
                continue
        if items:
            notes.append(line)

    return ExtractedShoppingList(store_name=store_name, items=items, notes='\n'.join(notes) if notes else None)


def is_grocery_list(text: str) -> bool:
    """True when most list items fall into a grocery category or a store is named."""
    shopping = extract_shopping_list(text)
    if not shopping.items:
        return False
    if shopping.store_name:
        return True
    categorized = sum(1 for item in shopping.items if item.category)
    return categorized * 2 > len(shopping.items)


def _find_location(line: str) -> Optional[str]:
    if '@' in line:
        return None
    if STREET_PATTERN.match(line):
        return line
    match = LOCATION_PATTERN.search(line)
    if match:
        return match.group(1).strip()
    return None


def split_event_label(line: str) -> Optional[Tuple[str, str]]:
    """Return (field, value) for a labelled event line such as 'Where: Town Hall'."""
    return _split_label(line, EVENT_LABELS)


def extract_event(text: str) -> ExtractedEvent:
    """Extract event fields from labelled lines first, then from patterns.

    The first match wins for each field.
    """
    fields: Dict[str, Optional[str]] = {name: None for name in EVENT_LABELS}
    unlabeled: List[str] = []

    for line in _lines(text):
        labelled = _split_label(line, EVENT_LABELS)
        if labelled:
            name, value = labelled
            if fields[name] is None:
                fields[name] = value
            continue
        unlabeled.append(line)

    if fields['title'] is None and unlabeled:
        fields['title'] = unlabeled.pop(0)

    # Labelled values may embed a time ('when: Friday 7pm')
    if fields['date']:
        if not fields['time']:
            fields['time'] = find_time(fields['date'])
        fields['date'] = find_date(fields['date']) or fields['date']

    for line in ([fields['title']] if fields['title'] else []) + unlabeled:
        if fields['date'] is None:
            fields['date'] = find_date(line)
        if fields['time'] is None:
            fields['time'] = find_time(line)
        if fields['location'] is None:
            fields['location'] = _find_location(line)
        if fields['contact_info'] is None:
            fields['contact_info'] = find_email(line) or find_phone(line)

    if fields['description'] is None and unlabeled:
        fields['description'] = '\n'.join(unlabeled)

    recurrence = RECURRENCE_PATTERN.search(text)
    return ExtractedEvent(title=fields['title'],
                          date=fields['date'],
                          time=fields['time'],
                          location=fields['location'],
                          description=fields['description'],
                          organizer=fields['organizer'],
                          contact_info=fields['contact_info'],
                          is_recurring=recurrence is not None,
                          recurrence_pattern=recurrence.group(1).lower() if recurrence else None)


def looks_like_job_title(line: str) -> bool:
    lowered = line.lower()
    if any(keyword in lowered for keyword in JOB_TITLE_KEYWORDS):
        return True
    words = line.split()
    return 2 < len(words) <= 4 and len(line) < 40 and all(word[0].isupper() for word in words)


def looks_like_company(line: str) -> bool:
    lowered = line.lower()
    return any(re.search(r'\b' + re.escape(keyword) + r'(?!\w)', lowered) for keyword in COMPANY_KEYWORDS)


def looks_like_address(line: str) -> bool:
    lowered = line.lower()
    if any(indicator in lowered for indicator in STREET_INDICATORS):
        return True
    if CITY_STATE_ZIP_PATTERN.search(line) or ZIP_PATTERN.search(line):
        return True
    words = lowered.split()
    return len(words) > 1 and words[-1] in STATE_ABBREVIATIONS and words[0][0].isdigit()


def _mostly(value: str, line: str) -> bool:
    return len(value) > len(line) / 2


# Labelled phone and website values are cut down to the pattern match, if any
LABEL_VALUE_FINDERS: Dict[str, Callable[[str], Optional[str]]] = {
    'phone': find_phone,
    'website': find_url,
}


def _labelled_contact_field(line: str) -> Optional[Tuple[str, str]]:
    """Match a 'Phone: ...' style line and keep only the value itself.

    An email label without an address is ignored so the line is scanned like
    any other, which keeps the email an exact substring of the text.
    """
    labelled = _split_label(line, CONTACT_LABELS)
    if labelled is None:
        return None
    name, value = labelled
    if name == 'email':
        email = find_email(value)
        return (name, email) if email else None
    if name in LABEL_VALUE_FINDERS:
        return name, LABEL_VALUE_FINDERS[name](value) or value
    return labelled


def extract_contact(text: str) -> ExtractedContact:
    """Extract contact details from a business card or contact note.

    Labelled lines ('Phone: ...') are honoured first. Remaining lines are
    scanned for phone, email and website patterns, address lines, and then
    name, job title and company in that order. Whatever is left becomes notes.
    """
    contact = ExtractedContact()
    remaining: List[str] = []
    address_lines: List[str] = []

    for line in _lines(text):
        labelled = _labelled_contact_field(line)
        if labelled:
            name, value = labelled
            if getattr(contact, name) is None:
                setattr(contact, name, value)
            continue

        consumed = False
        if contact.phone is None:
            phone = find_phone(line)
            if phone:
                contact.phone = phone
                consumed = _mostly(phone, line)
        if not consumed and contact.email is None:
            email = find_email(line)
            if email:
                contact.email = email
                consumed = _mostly(email, line)
        if not consumed and contact.website is None:
            website = find_url(line)
            if website:
                contact.website = website
                consumed = _mostly(website, line)
        if consumed:
            continue

        if looks_like_address(line):
            address_lines.append(line)
            continue
        remaining.append(line)

    if contact.email is None:
        contact.email = find_email(text)

    if address_lines and contact.address is None:
        contact.address = ', '.join(address_lines)

    if contact.name is None and remaining:
        contact.name = remaining.pop(0)

    if contact.title is None:
        for index, line in enumerate(remaining):
            if looks_like_job_title(line):
                contact.title = remaining.pop(index)
                break

    if contact.company is None:
        for index, line in enumerate(remaining):
            if looks_like_company(line):
                contact.company = remaining.pop(index)
                break

    # A short leftover line is most likely the company, then the title
    if remaining and len(remaining[0]) < 50 and not any(char in remaining[0] for char in '.!?'):
        if contact.company is None:
            contact.company = remaining.pop(0)
        elif contact.title is None:
            contact.title = remaining.pop(0)

    if remaining:
        contact.notes = '\n'.join(remaining)

    if contact.name:
        parts = contact.name.split()
        contact.first_name = parts[0]
        if len(parts) > 1:
            contact.last_name = ' '.join(parts[1:])

    return contact


def _amount(line: str) -> Optional[float]:
    for pattern in AMOUNT_PATTERNS:
        match = pattern.search(line)
        if match:
            return float(match.group(1).replace(',', ''))
    return None


def _expense_date(line: str) -> Optional[str]:
    for pattern, to_iso in EXPENSE_DATE_PATTERNS:
        match = pattern.search(line)
        if match:
            return to_iso(match)
    return None


def _first_keyword_match(lowered: str, table: List[Tuple[str, List[str]]]) -> Optional[str]:
    for name, keywords in table:
        if any(re.search(r'\b' + re.escape(keyword), lowered) for keyword in keywords):
            return name
    return None


def extract_expense(text: str) -> ExtractedExpense:
    """Extract merchant, amount, date, category and payment method from a receipt.

    A line mentioning a total takes precedence over the first amount seen.
    """
    lines = _lines(text)
    expense = ExtractedExpense()
    used = set()

    total_lines = [index for index, line in enumerate(lines) if re.search(r'\btotal\b', line, re.IGNORECASE)
                   and not re.search(r'\bsub\s*-?total\b', line, re.IGNORECASE)]
    amount_candidates = total_lines + list(range(len(lines)))
    for index in amount_candidates:
        amount = _amount(lines[index])
        if amount is not None:
            expense.amount = amount
            for symbol, currency in CURRENCY_SYMBOLS:
                if symbol in lines[index]:
                    expense.currency = currency
                    break
            used.add(index)
            break

    for index, line in enumerate(lines):
        date = _expense_date(line)
        if date:
            expense.date = date
            used.add(index)
            break

    for index, line in enumerate(lines):
        if index in used or _amount(line) is not None or any(symbol in line for symbol in '$€£¥'):
            continue
        cleaned = line.strip(':#- ')
        if 3 <= len(cleaned) <= 60:
            expense.merchant = cleaned
            used.add(index)
            break

    lowered = text.lower()
    expense.category = _first_keyword_match(lowered, EXPENSE_CATEGORIES)
    expense.payment_method = _first_keyword_match(lowered, PAYMENT_METHODS)

    notes = [line for index, line in enumerate(lines) if index not in used and _amount(line) is None]
    expense.notes = '\n'.join(notes) if notes else None
    return expense


def _section(text: str, header: str) -> Optional[str]:
    """Return the text after 'header:' up to the next known section header."""
    match = re.search(re.escape(header) + r'\s*', text, re.IGNORECASE)
    if not match:
        return None
    after = text[match.end():]
    following = MEETING_SECTION_PATTERN.search(after)
    body = after[:following.start()] if following else after
    return body.strip() or None


def _dedupe(names: List[str]) -> List[str]:
    seen = set()
    result = []
    for name in names:
        key = name.lower()
        if key not in seen:
            seen.add(key)
            result.append(name)
    return result


def extract_attendees(text: str) -> List[str]:
    """Names listed in an 'Attendees:' section, in order and without duplicates.

    Comma or 'and' separated names are split directly. Otherwise consecutive
    capitalized words are grouped into first and last names.
    """
    section = _section(text, 'attendees:')
    if not section:
        return []

    section = re.sub(r'(?m)^[-*•]\s*', '', section)
    attendees: List[str] = []

    if ',' in section or ' and ' in section.lower():
        for part in re.split(r',|\band\b', section):
            name = ' '.join(part.split())
            if 2 <= len(name) <= 40 and name[0].isalpha():
                attendees.append(name)

    if not attendees:
        pending: List[str] = []
        for word in section.split():
            cleaned = word.strip('.,;:!?()')
            if len(cleaned) >= 2 and cleaned[0].isupper():
                pending.append(cleaned)
                if len(pending) == 2:
                    attendees.append(' '.join(pending))
                    pending = []
            elif pending:
                attendees.append(pending[0])
                pending = []
        if pending:
            attendees.append(' '.join(pending))

    return _dedupe(attendees)


def meeting_participants(text: str) -> List[str]:
    """Sorted union of @mentions and names from an attendees section."""
    return sorted(set(find_mentions(text)) | set(extract_attendees(text)))


def extract_meeting(text: str) -> ExtractedMeeting:
    lines = _lines(text)
    subject = SUBJECT_PREFIX_PATTERN.sub('', lines[0]).strip() if lines else None

    location = None
    for line in lines:
        labelled = _split_label(line, {'location': EVENT_LABELS['location']})
        if labelled:
            location = labelled[1]
            break

    return ExtractedMeeting(subject=subject or None,
                            attendees=_dedupe(extract_attendees(text) + find_mentions(text)),
                            date=find_date(text),
                            time=find_time(text),
                            location=location,
                            agenda=_section(text, 'agenda:'),
                            action_items=[todo.text for todo in extract_todos(text)],
                            notes=_section(text, 'discussion:') or _section(text, 'notes:'))


def recipe_section(line: str) -> Optional[str]:
    """Return 'ingredients', 'steps' or 'notes' for a bare section header line."""
    for section, pattern in RECIPE_SECTIONS:
        if pattern.match(line):
            return section
    return None


def is_ingredient_line(line: str) -> bool:
    if INGREDIENT_UNIT_PATTERN.search(line):
        return True
    if any(char.isdigit() for char in line) and not STEP_NUMBER_PATTERN.match(line):
        return True
    return line.startswith(('-', '•', '*'))


def is_step_line(line: str) -> bool:
    return bool(STEP_NUMBER_PATTERN.match(line) or COOKING_VERB_PATTERN.search(line))


def _opens_step(line: str) -> bool:
    """A line that reads as an instruction: 'Bake for 20 min', or a numbered line such as '2. Add 2 cups flour'."""
    if COOKING_VERB_PATTERN.match(line):
        return True
    if not STEP_NUMBER_PATTERN.match(line):
        return False
    text = step_text(line)
    return bool(COOKING_VERB_PATTERN.match(text)) or not is_ingredient_line(text)


def recipe_servings(text: str) -> Optional[str]:
    for pattern in SERVINGS_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def recipe_time(text: str, kind: str) -> Optional[str]:
    """Return a labelled duration such as 'Prep time: 15 min' for kind 'prep'."""
    match = re.search(r'\b' + re.escape(kind) + r'(?:ing)?(?:\s+time)?[:\s]+' + RECIPE_DURATION, text, re.IGNORECASE)
    return match.group(1) if match else None


def extract_recipe(text: str) -> ExtractedRecipe:
    """Extract title, ingredients, steps, servings and timings from a recipe note.

    Header lines ('Ingredients', 'Directions', 'Notes') switch sections. Before
    any header, quantities and bullets read as ingredients while numbered lines
    and cooking verbs read as steps.
    """
    recipe = ExtractedRecipe()
    notes: List[str] = []
    section: Optional[str] = None

    for line in _lines(text):
        header = recipe_section(line)
        if header:
            section = header
            continue

        if recipe.title is None and section is None and not (recipe.ingredients or recipe.steps or notes):
            recipe.title = _recipe_title(line)
            if recipe.title:
                continue

        servings = recipe_servings(line)
        prep_time = recipe_time(line, 'prep')
        cook_time = recipe_time(line, 'cook')
        recipe.servings = recipe.servings or servings
        recipe.prep_time = recipe.prep_time or prep_time
        recipe.cook_time = recipe.cook_time or cook_time
        # 'Serves 4' and 'Prep: 10 min' carry nothing else
        if (servings or prep_time or cook_time) and (RECIPE_METADATA_LABEL.match(line) or not is_step_line(line)):
            continue

        if section == 'notes':
            notes.append(line)
        elif section == 'steps' or _opens_step(line):
            _append_step(recipe, line)
        elif section == 'ingredients' or is_ingredient_line(line):
            ingredient = clean_ingredient(line)
            if ingredient:
                recipe.ingredients.append(ingredient)
        elif is_step_line(line):
            _append_step(recipe, line)
        else:
            notes.append(line)

    recipe.notes = '\n'.join(notes) if notes else None
    return recipe


def _recipe_title(line: str) -> Optional[str]:
    if is_ingredient_line(line) or is_step_line(line):
        return None
    cleaned = line.strip(':#- ')
    return cleaned if 3 <= len(cleaned) <= 60 else None


def clean_ingredient(line: str) -> str:
    return INGREDIENT_MARKER_PATTERN.sub('', line).strip()


def step_text(line: str) -> str:
    """Drop a leading '1.' or 'Step 1:' from an instruction line."""
    return STEP_PREFIX_PATTERN.sub('', line).strip()


def _append_step(recipe: ExtractedRecipe, line: str) -> None:
    step = step_text(line)
    if step:
        recipe.steps.append(step)


def _email_field(line: str) -> Optional[Tuple[str, str]]:
    lowered = line.lower()
    for field_name, prefixes in EMAIL_FIELD_PREFIXES:
        for prefix in prefixes:
            if lowered.startswith(prefix):
                value = line[len(prefix):].strip()
                return (field_name, value) if value else None
    return None


def extract_email(text: str) -> ExtractedEmail:
    """Extract recipients, subject and body from a drafted email.

    Header fields are read until the body starts, which is after the subject
    line or at a greeting. The body keeps its blank lines. Without either, the
    lines that are not header fields become the body.
    """
    email = ExtractedEmail()
    body: List[str] = []
    loose: List[str] = []
    in_body = False

    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            if in_body:
                body.append('')
            continue
        if TRIGGER_LINE_PATTERN.match(line):
            continue

        field = None if in_body else _email_field(line)
        if field and getattr(email, field[0]) is None:
            setattr(email, field[0], field[1])
            if field[0] == 'subject':
                in_body = True
            continue

        if not in_body and EMAIL_GREETING_PATTERN.match(line):
            in_body = True
        if in_body:
            body.append(line)
        else:
            loose.append(line)

    email.body = '\n'.join(body or loose).strip() or None
    return email
