"""Privacy policy document returned by GET /api/privacy/policy."""

from datetime import date
from typing import List

from status_tracker.schemas.common import CamelModel


class PolicySection(CamelModel):
    title: str
    content: List[str]


class PolicyContent(CamelModel):
    title: str
    sections: List[PolicySection]


class PrivacyPolicy(CamelModel):
    version: str
    effective_date: date
    last_updated: date
    content: PolicyContent
