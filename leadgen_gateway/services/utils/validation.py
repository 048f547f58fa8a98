import re

LINKEDIN_PROFILE_RE = re.compile(r"^https://(www\.)?linkedin\.com/in/[a-zA-Z0-9-]+/?$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DOMAIN_RE = re.compile(
    r"^[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)
MAX_DOMAIN_LENGTH = 253


def is_valid_linkedin_url(url: str) -> bool:
    return bool(url) and LINKEDIN_PROFILE_RE.match(url) is not None


def is_valid_email(email: str) -> bool:
    return bool(email) and EMAIL_RE.match(email) is not None


def validate_domain(domain: str) -> list[str]:
    """Return the list of problems with a company domain (empty when valid)."""
    problems: list[str] = []
    if not domain:
        problems.append("Company domain is required")
        return problems
    if len(domain) > MAX_DOMAIN_LENGTH:
        problems.append("Domain name too long")
    if not DOMAIN_RE.match(domain):
        problems.append("Invalid domain format")
    return problems
