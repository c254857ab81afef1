"""
permissions.py — Role definitions and access mappings.

Maps each subscription role to the company-data sections it may view and the
actions it may perform. The company wizard is gated on
`can_modify_company_data`: only a role granted create/update/delete reaches
it, every other role gets the fixed access-denied response, which carries
the role's `access_summary` so the front end can show what the role does get.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class UserRole(str, Enum):
    FREEMIUM = "FREEMIUM"
    PREMIUM = "PREMIUM"
    ENTERPRISE = "ENTERPRISE"
    ADMIN = "ADMIN"


class AccessLevel(str, Enum):
    # Company data sections
    BASIC_INFO = "basic_info"
    ADDRESS_CONTACT = "address_contact"
    KEY_OFFICIALS = "key_officials"
    FINANCIAL_INFO = "financial_info"
    FINANCIAL_METRICS = "financial_metrics"
    FUNDING_INVESTMENTS = "funding_investments"
    REGULATORY_LEGAL = "regulatory_legal"
    NEWS_RELATIONSHIPS = "news_relationships"

    # Actions
    CREATE_COMPANY = "create_company"
    UPDATE_COMPANY = "update_company"
    DELETE_COMPANY = "delete_company"
    VIEW_COMPANY = "view_company"
    EXPORT_DATA = "export_data"
    USE_WATCHLIST = "use_watchlist"


_ALL_SECTIONS = [
    AccessLevel.BASIC_INFO,
    AccessLevel.ADDRESS_CONTACT,
    AccessLevel.KEY_OFFICIALS,
    AccessLevel.FINANCIAL_INFO,
    AccessLevel.FINANCIAL_METRICS,
    AccessLevel.FUNDING_INVESTMENTS,
    AccessLevel.REGULATORY_LEGAL,
    AccessLevel.NEWS_RELATIONSHIPS,
]

ROLE_PERMISSIONS: Dict[UserRole, Dict[str, List[AccessLevel]]] = {
    UserRole.FREEMIUM: {
        "sections": [
            AccessLevel.BASIC_INFO,
            AccessLevel.ADDRESS_CONTACT,
        ],
        "actions": [
            AccessLevel.VIEW_COMPANY,
            AccessLevel.USE_WATCHLIST,
        ],
    },
    UserRole.PREMIUM: {
        "sections": [
            AccessLevel.BASIC_INFO,
            AccessLevel.ADDRESS_CONTACT,
            AccessLevel.KEY_OFFICIALS,
            AccessLevel.FINANCIAL_INFO,
            AccessLevel.FINANCIAL_METRICS,
        ],
        "actions": [
            AccessLevel.VIEW_COMPANY,
            AccessLevel.EXPORT_DATA,
            AccessLevel.USE_WATCHLIST,
        ],
    },
    UserRole.ENTERPRISE: {
        "sections": list(_ALL_SECTIONS),
        "actions": [
            AccessLevel.VIEW_COMPANY,
            AccessLevel.EXPORT_DATA,
            AccessLevel.USE_WATCHLIST,
        ],
    },
    UserRole.ADMIN: {
        "sections": list(_ALL_SECTIONS),
        "actions": [
            AccessLevel.VIEW_COMPANY,
            AccessLevel.CREATE_COMPANY,
            AccessLevel.UPDATE_COMPANY,
            AccessLevel.DELETE_COMPANY,
            AccessLevel.EXPORT_DATA,
            AccessLevel.USE_WATCHLIST,
        ],
    },
}

# Wizard step that first shows each section (financial metrics live on the
# financial info step).
SECTION_STEPS: Dict[AccessLevel, int] = {
    AccessLevel.BASIC_INFO: 1,
    AccessLevel.ADDRESS_CONTACT: 2,
    AccessLevel.KEY_OFFICIALS: 3,
    AccessLevel.FINANCIAL_INFO: 4,
    AccessLevel.FINANCIAL_METRICS: 4,
    AccessLevel.FUNDING_INVESTMENTS: 5,
    AccessLevel.REGULATORY_LEGAL: 6,
    AccessLevel.NEWS_RELATIONSHIPS: 7,
}

ROLE_DISPLAY_NAMES: Dict[UserRole, str] = {
    UserRole.FREEMIUM: "Freemium",
    UserRole.PREMIUM: "Premium",
    UserRole.ENTERPRISE: "Enterprise",
    UserRole.ADMIN: "Admin",
}

ROLE_DESCRIPTIONS: Dict[UserRole, str] = {
    UserRole.FREEMIUM: "Basic company information and contact details",
    UserRole.PREMIUM: "Basic info, contact, key officials, and financial data",
    UserRole.ENTERPRISE: "Full access to all company information",
    UserRole.ADMIN: "Full access with ability to create, update, and delete company data",
}


def _permissions(role: Optional[str]) -> Optional[Dict[str, List[AccessLevel]]]:
    if not role or not is_valid_role(role):
        return None
    return ROLE_PERMISSIONS[UserRole(role)]


def is_valid_role(role: Optional[str]) -> bool:
    return role in {r.value for r in UserRole}


def has_section_access(role: Optional[str], section: Optional[str]) -> bool:
    permissions = _permissions(role)
    if permissions is None or not section:
        return False
    return section in {s.value for s in permissions["sections"]}


def has_action_access(role: Optional[str], action: Optional[str]) -> bool:
    permissions = _permissions(role)
    if permissions is None or not action:
        return False
    return action in {a.value for a in permissions["actions"]}


def can_modify_company_data(role: Optional[str]) -> bool:
    """True when the role may create, update or delete company data."""
    return (
        has_action_access(role, AccessLevel.CREATE_COMPANY.value)
        or has_action_access(role, AccessLevel.UPDATE_COMPANY.value)
        or has_action_access(role, AccessLevel.DELETE_COMPANY.value)
    )


def can_export_data(role: Optional[str]) -> bool:
    return has_action_access(role, AccessLevel.EXPORT_DATA.value)


def can_use_watchlist(role: Optional[str]) -> bool:
    return has_action_access(role, AccessLevel.USE_WATCHLIST.value)


def max_step_for_role(role: Optional[str]) -> int:
    """Highest wizard step whose section the role may see (at least 1)."""
    permissions = _permissions(role)
    if permissions is None:
        return 1
    return max([1] + [SECTION_STEPS[s] for s in permissions["sections"]])


def accessible_sections(role: Optional[str]) -> List[str]:
    permissions = _permissions(role)
    return [s.value for s in permissions["sections"]] if permissions else []


def available_actions(role: Optional[str]) -> List[str]:
    permissions = _permissions(role)
    return [a.value for a in permissions["actions"]] if permissions else []


def role_display_name(role: Optional[str]) -> str:
    if is_valid_role(role):
        return ROLE_DISPLAY_NAMES[UserRole(role)]
    return role or ""


def role_description(role: Optional[str]) -> str:
    if is_valid_role(role):
        return ROLE_DESCRIPTIONS[UserRole(role)]
    return "Unknown role"


def access_summary(role: Optional[str]) -> Dict[str, Any]:
    """What a role may see and do, as shown on the access-denied view."""
    return {
        "role": role,
        "role_display_name": role_display_name(role),
        "role_description": role_description(role),
        "sections": accessible_sections(role),
        "actions": available_actions(role),
        "visible_steps": sorted(
            {step for section, step in SECTION_STEPS.items() if has_section_access(role, section.value)}
        ),
        "max_step": max_step_for_role(role),
        "can_modify_company_data": can_modify_company_data(role),
        "can_export_data": can_export_data(role),
        "can_use_watchlist": can_use_watchlist(role),
    }
