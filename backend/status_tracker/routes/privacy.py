"""
Status Tracker Backend: Privacy Policy Route
=============================================

What:  GET /api/privacy/policy, the document users accept at registration.
How:   Static content; the version comes from PRIVACY_POLICY_VERSION so it
       always matches what AuthService.register() stamps onto new accounts.
"""

from datetime import date

from fastapi import APIRouter

from status_tracker.config import settings
from status_tracker.schemas.common import ApiResponse
from status_tracker.schemas.privacy import PolicyContent, PolicySection, PrivacyPolicy

router = APIRouter(prefix="/api/privacy", tags=["Privacy"])

POLICY_EFFECTIVE_DATE = date(2025, 6, 25)

POLICY_SECTIONS = [
    PolicySection(
        title="Information We Collect",
        content=[
            "Account information: Username, password (hashed), and role",
            "Status data: Water intake timestamps and mood/altitude ratings",
            "Technical data: IP addresses, browser information, and access logs",
            "Usage data: API requests, login times, and system interactions",
        ],
    ),
    PolicySection(
        title="How We Use Your Information",
        content=[
            "Provide and maintain the personal status tracking service",
            "Authenticate users and maintain account security",
            "Monitor system performance and detect security threats",
            "Comply with legal obligations and protect user safety",
        ],
    ),
    PolicySection(
        title="Data Storage and Security",
        content=[
            "Data is stored on our own servers",
            "Passwords are hashed using bcrypt and are never stored in plain text",
            "Access tokens expire automatically",
            "We implement security measures to protect against unauthorized access",
        ],
    ),
    PolicySection(
        title="Data Retention",
        content=[
            "Account data: Retained until account deletion",
            "Status tracking data: Retained until deleted by an administrator",
            "Access logs: Retained only as long as needed for system maintenance",
        ],
    ),
    PolicySection(
        title="Your Rights",
        content=[
            "Access your personal data stored in the system",
            "Request deletion of your account and associated data",
            "Request information about data processing activities",
        ],
    ),
    PolicySection(
        title="Data Sharing",
        content=[
            "We do not sell, trade, or share your personal data with third parties",
            "Data may be disclosed if required by law or to protect system security",
        ],
    ),
    PolicySection(
        title="Contact Information",
        content=[
            "For privacy-related questions or to exercise your rights, "
            "contact the system administrator",
        ],
    ),
]


@router.get(
    "/policy",
    response_model=ApiResponse[PrivacyPolicy],
    summary="Get the current privacy policy",
)
async def get_privacy_policy() -> ApiResponse[PrivacyPolicy]:
    policy = PrivacyPolicy(
        version=settings.privacy_policy_version,
        effective_date=POLICY_EFFECTIVE_DATE,
        last_updated=POLICY_EFFECTIVE_DATE,
        content=PolicyContent(
            title="Privacy Policy - Personal Status Tracker",
            sections=POLICY_SECTIONS,
        ),
    )
    return ApiResponse(data=policy)
