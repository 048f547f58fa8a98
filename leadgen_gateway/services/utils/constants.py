PEOPLE_SEARCH_PATH = "/v1/people/search"
DECISION_MAKERS_PATH = "/v1/people/decision-makers"
LINKEDIN_ENRICH_PATH = "/v1/linkedin/enrich"
EMAIL_ENRICH_PATH = "/v1/email/enrich"
DOMAIN_ENRICH_PATH = "/v1/domain/enrich"
EMAIL_VERIFY_PATH = "/v1/email/verify"
USAGE_STATS_PATH = "/v1/stats"
BULK_ENRICH_PATH = "/v2/people/linkedin/batch"
CONTACT_STATUS_PATHS = {
    "personal_email": "/v1/people/linkedin/personal_email_status",
    "work_email": "/v1/people/linkedin/work_email_status",
    "phone": "/v1/people/linkedin/phone_status",
}

# Every field the upstream people search understands.
UPSTREAM_SEARCH_FIELDS = (
    "name",
    "job_title",
    "exclude_job_titles",
    "current_titles_only",
    "include_related_job_titles",
    "company",
    "exclude_companies",
    "company_filter",
    "current_company_only",
    "match_experience",
    "domain",
    "company_size",
    "location",
    "industry",
    "skills",
    "education",
    "years_of_experience",
    "years_in_current_role",
    "keyword",
    "data_types",
    "reveal_info",
    "page",
    "page_size",
)

# Accepted by our API but meaningless (and rejected) upstream.
INTERNAL_SEARCH_FIELDS = ("enable_quality_verification", "sort_by_quality")

DISCRIMINATING_FIELDS = (
    "name",
    "job_title",
    "company",
    "location",
    "industry",
    "skills",
    "education",
    "keyword",
    "domain",
    "company_size",
)

MATCH_EXPERIENCE_CONFLICTS = ("company_filter", "current_titles_only", "current_company_only")

EXPERIENCE_RANGES = ("0_1", "1_2", "1_3", "2_3", "3_5", "3_6", "5_7", "6_10", "7_10", "10", "10+")
COMPANY_SIZES = (
    "1_10",
    "11_50",
    "51_200",
    "201_500",
    "501_1000",
    "1001_5000",
    "5001_10000",
    "5001+",
    "10001+",
)
EXPERIENCE_MATCH_MODES = ("current", "previous", "past", "both")
DATA_TYPES = ("personal_email", "work_email", "phone")
REVEAL_TYPES = ("email", "phone")

CACHE_TTL_SECONDS = {
    "search": 60 * 60,
    "linkedin": 24 * 60 * 60,
    "email": 12 * 60 * 60,
    "company": 7 * 24 * 60 * 60,
    "verify": 30 * 24 * 60 * 60,
}

RATE_LIMIT_WINDOW_SECONDS = 60

QUALITY_BATCH_SIZE = 5
CONFIDENCE_BASE_SCORES = {"high": 85, "medium": 65, "low": 35}
DEFAULT_BASE_SCORE = 50

DEFAULT_PAGE_SIZE = 25
MAX_BULK_PROFILES = 100
DEFAULT_ORGANIZATION = "default-org"
