"""
PII Data Generator Module

Generates realistic personal data for text columns:
- Names (first, last, full)
- Email addresses built from generated names
- Phone numbers
- Addresses, cities, company names, URLs, usernames
- UUIDs

Every value comes from the run's seeded Faker instance or random source, so
output is reproducible for a fixed seed.
"""

import logging
from typing import Callable, Dict

from ..context import GenerationContext
from ..schema.model import Column
from .base import ValueGenerator

logger = logging.getLogger(__name__)


class EmailGenerator:
    """
    Generate realistic email addresses

    Formats:
    - firstname.lastname@domain.com
    - firstnamelastname@domain.com
    - firstname123@domain.com
    - f.lastname@domain.com
    """

    DOMAINS = [
        'gmail.com', 'yahoo.com', 'outlook.com', 'hotmail.com',
        'icloud.com', 'aol.com', 'live.com', 'msn.com',
    ]

    FORMATS = ['dot', 'concat', 'number', 'initial']

    @staticmethod
    def _sanitize_name(value: str) -> str:
        """Normalize names for email local-part generation."""
        cleaned = ''.join(ch for ch in str(value).lower() if ch.isascii() and ch.isalpha())
        return cleaned or 'user'

    def generate(self, context: GenerationContext) -> str:
        first = self._sanitize_name(context.faker.first_name())
        last = self._sanitize_name(context.faker.last_name())

        format_type = context.choice(self.FORMATS)
        domain = context.choice(self.DOMAINS)

        if format_type == 'dot':
            return f"{first}.{last}@{domain}"
        elif format_type == 'concat':
            return f"{first}{last}@{domain}"
        elif format_type == 'number':
            return f"{first}{context.randint(1, 999)}@{domain}"
        else:  # initial
            return f"{first[0]}.{last}@{domain}"


class PhoneGenerator:
    """Generate US phone numbers (NNN-NNN-NNNN)"""

    def generate(self, context: GenerationContext) -> str:
        area_code = context.randint(200, 999)
        exchange = context.randint(200, 999)
        number = context.randint(1000, 9999)
        return f"{area_code}-{exchange}-{number}"


class PIIGenerator(ValueGenerator):
    """
    Realistic text for a named kind of personal data

    The kind is one of HINTS; values are truncated to the column's length.
    """

    name = "pii"

    HINTS = (
        'first-name', 'last-name', 'full-name', 'email', 'phone', 'city',
        'address', 'url', 'company', 'username', 'uuid',
    )

    def __init__(self, config, hint: str):
        super().__init__(config)
        if hint not in self.HINTS:
            raise ValueError(f"Unknown PII kind: {hint}")
        self.hint = hint
        self.email_generator = EmailGenerator()
        self.phone_generator = PhoneGenerator()

        self._producers: Dict[str, Callable[[GenerationContext], str]] = {
            'first-name': lambda context: context.faker.first_name(),
            'last-name': lambda context: context.faker.last_name(),
            'full-name': lambda context: f"{context.faker.first_name()} {context.faker.last_name()}",
            'email': self.email_generator.generate,
            'phone': self.phone_generator.generate,
            'city': lambda context: context.faker.city(),
            'address': lambda context: context.faker.street_address(),
            'url': lambda context: context.faker.url(),
            'company': lambda context: context.faker.company(),
            'username': lambda context: context.faker.user_name(),
            'uuid': lambda context: context.faker.uuid4(),
        }

    def generate(self, context: GenerationContext, column: Column) -> str:
        max_length = column.max_length or self.config.text.max_length
        value = str(self._producers[self.hint](context))
        return value[:max_length]


def infer_hint(column_name: str) -> str:
    """
    Guess the kind of text a column holds from its name

    Args:
        column_name: Column name

    Returns:
        A PIIGenerator hint, or 'lorem' when nothing matches
    """
    name = column_name.lower()

    if 'first' in name and 'name' in name:
        return 'first-name'
    if ('last' in name and 'name' in name) or 'surname' in name:
        return 'last-name'
    if 'full' in name and 'name' in name:
        return 'full-name'
    if 'phone' in name:
        return 'phone'
    if 'city' in name:
        return 'city'
    if 'address' in name and 'email' not in name:
        return 'address'
    if 'email' in name:
        return 'email'
    if 'homepage' in name or 'website' in name or 'url' in name:
        return 'url'
    return 'lorem'
