"""Map raw department names and locations onto KPI categories."""

import re

from orgbench.domains.kpis.definitions import KPICategory

DEPARTMENT_KEYWORDS: dict[KPICategory, tuple[str, ...]] = {
    KPICategory.CUSTOMER_SUCCESS: ("customer success", "support", "customer support", "cs", "customer service"),
    KPICategory.ENGINEERING: ("engineering", "technology", "dev", "development", "it", "infrastructure", "qa",
                              "quality assurance"),
    KPICategory.FINANCE: ("finance", "accounting", "treasury", "fp&a"),
    KPICategory.HR: ("hr", "human resources", "people", "people ops", "talent"),
    KPICategory.LEGAL: ("legal", "compliance", "regulatory"),
    KPICategory.MARKETING: ("marketing", "growth", "brand", "communications", "pr", "public relations"),
    KPICategory.OPERATIONS: ("operations", "ops", "bizops", "business operations"),
    KPICategory.PRODUCT: ("product", "product management", "pm"),
    KPICategory.PROFESSIONAL_SERVICES: ("professional services", "consulting", "implementation", "services"),
    KPICategory.SALES: ("sales", "business development", "bd", "revenue", "account management"),
}

HIGH_COST_COUNTRIES = (
    "united states", "usa", "us",
    "switzerland", "norway", "denmark", "sweden",
    "united kingdom", "uk", "britain",
    "germany", "france", "netherlands", "belgium",
    "australia", "canada", "singapore",
)


def _keyword_pattern(keywords) -> re.Pattern:
    alternatives = "|".join(re.escape(k) for k in sorted(keywords, key=len, reverse=True))
    return re.compile(rf"(?<!\w)(?:{alternatives})(?!\w)")


_DEPARTMENT_PATTERNS = [(cat, _keyword_pattern(words)) for cat, words in DEPARTMENT_KEYWORDS.items()]
_HIGH_COST_PATTERN = _keyword_pattern(HIGH_COST_COUNTRIES)


def categorize_department(department: str | None) -> KPICategory | None:
    """First category whose keywords appear as whole words in the department name."""
    if not isinstance(department, str) or not department:
        return None
    normalized = department.lower().strip()
    for category, pattern in _DEPARTMENT_PATTERNS:
        if pattern.search(normalized):
            return category
    return None


def is_high_cost_location(location: str | None) -> bool:
    if not isinstance(location, str) or not location:
        return False
    return bool(_HIGH_COST_PATTERN.search(location.lower()))
